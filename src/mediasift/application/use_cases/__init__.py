from .batch_search import BatchSearchUseCase
from .tiered_search import SearchProgress, StageReport, StageState, TieredSearch

__all__ = [
    "BatchSearchUseCase",
    "SearchProgress",
    "StageReport",
    "StageState",
    "TieredSearch",
]
