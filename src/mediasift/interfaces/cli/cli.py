from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import httpx
import structlog
import uvicorn

from mediasift.application.use_cases import SearchProgress
from mediasift.infrastructure.cache import ResultCache
from mediasift.infrastructure.config import AppConfig, load_config
from mediasift.infrastructure.logging.setup import configure_logging
from mediasift.interfaces.app import create_app
from mediasift.interfaces.app_state import AppState
from mediasift.interfaces.composition import wire_services

log = structlog.get_logger(__name__)


def _parse_args(argv: Iterable[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="mediasift")

    # Config wiring flags (no business logic)
    parser.add_argument(
        "--config",
        default=None,
        help="Path to YAML config file.",
    )
    parser.add_argument(
        "--dotenv",
        default=None,
        help="Path to .env file.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override log level.",
    )
    parser.add_argument(
        "--log-format",
        default=None,
        choices=["json", "console"],
        help="Override log format.",
    )

    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP API (default).")
    serve.add_argument(
        "--host",
        default=None,
        help="Bind host (overrides HOST env).",
    )
    serve.add_argument(
        "--port",
        default=None,
        type=int,
        help="Bind port (overrides PORT env).",
    )

    search = sub.add_parser("search", help="Run one tiered search and print groups.")
    search.add_argument("query", help="Title to search for.")
    search.add_argument("--user", default=None, help="Caller identity.")
    search.add_argument(
        "--json",
        action="store_true",
        help="Print the final result as JSON instead of a table.",
    )

    return parser.parse_args(argv)


def _format_stage(progress: SearchProgress) -> str:
    parts = []
    for tier, report in progress.stages.items():
        if report.skipped:
            parts.append(f"{tier.value}=skipped")
        elif report.cached:
            parts.append(f"{tier.value}={report.result_count} (cached)")
        else:
            parts.append(f"{tier.value}={report.result_count}")
    return " ".join(parts)


def _print_groups(progress: SearchProgress) -> None:
    if not progress.groups:
        print(f"no results for {progress.query!r}")
        return
    for group in progress.groups:
        sources = ", ".join(group.sources)
        print(f"{group.title} ({group.year}, {group.media_type}) [{sources}]")


async def _run_search(
    config: AppConfig, query: str, user: str | None, as_json: bool
) -> int:
    state = AppState()
    state.config = config

    async with (
        ResultCache(
            ttl_seconds=config.cache.ttl_seconds,
            sweep_interval_seconds=config.cache.sweep_interval_seconds,
            max_entries=config.cache.max_entries,
        ) as cache,
        httpx.AsyncClient(
            timeout=httpx.Timeout(config.http_timeout_seconds),
            headers={"User-Agent": config.http_user_agent},
            follow_redirects=config.http_follow_redirects,
        ) as client,
    ):
        state.result_cache = cache
        state.http_client = client
        wire_services(state, config)

        final: SearchProgress | None = None
        async for progress in state.tiered_search.run(query, user):
            if not as_json:
                print(_format_stage(progress), file=sys.stderr)
            final = progress

    if final is None:
        raise RuntimeError("tiered search yielded no progress")
    if as_json:
        print(
            json.dumps(
                {
                    "query": final.query,
                    "groups": [g.to_dict() for g in final.groups],
                    "sites_searched": final.sites_searched,
                    "short_circuited": final.short_circuited,
                },
                ensure_ascii=False,
                indent=2,
            )
        )
    else:
        _print_groups(final)
    return 0 if final.results else 1


def start(argv: Iterable[str] | None = None) -> int:
    """
    Process entrypoint.

    Loads config exactly once here, then either serves the API or runs
    a single search in-process.
    """

    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    config_path = Path(args.config) if args.config else None
    dotenv_path = Path(args.dotenv) if args.dotenv else None

    cli_overrides: dict[str, Any] = {}
    if args.log_level:
        cli_overrides["log_level"] = args.log_level
    if args.log_format:
        cli_overrides["log_format"] = args.log_format

    config = load_config(
        config_path=config_path,
        dotenv_path=dotenv_path,
        cli_overrides=cli_overrides,
    )

    log_config = configure_logging(config)

    if args.command == "search":
        return asyncio.run(_run_search(config, args.query, args.user, args.json))

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "8080"))

    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=log_config,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(start())
