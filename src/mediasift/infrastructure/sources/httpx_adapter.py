"""Upstream query adapter for video-list JSON APIs over httpx."""

from __future__ import annotations

import re
from typing import Any

import httpx
import structlog

from mediasift.domain.entities import (
    UNKNOWN_YEAR,
    ProviderDescriptor,
    ResultRecord,
    UpstreamError,
)

log = structlog.get_logger(__name__)

_EPISODE_RE = re.compile(r"\$(https?://[^\"'\s#$]+?\.m3u8)")
_YEAR_RE = re.compile(r"\d{4}")
_SPACES_RE = re.compile(r"\s+")


def parse_episodes(play_url: str | None) -> tuple[str, ...]:
    """Extract playable episode URLs from a ``vod_play_url`` field.

    The field holds ``$$$``-separated play groups of ``name$url`` pairs
    joined by ``#``. The group with the most ``.m3u8`` links wins;
    duplicate links are dropped and a trailing ``(...)`` note is cut.
    """
    if not play_url:
        return ()

    best: list[str] = []
    for group in play_url.split("$$$"):
        links = _EPISODE_RE.findall(group)
        if len(links) > len(best):
            best = links

    seen: set[str] = set()
    episodes: list[str] = []
    for link in best:
        paren = link.find("(")
        if paren > 0:
            link = link[:paren]
        if link not in seen:
            seen.add(link)
            episodes.append(link)
    return tuple(episodes)


def parse_year(raw: Any) -> str:
    match = _YEAR_RE.search(str(raw or ""))
    return match.group(0) if match else UNKNOWN_YEAR


def _parse_douban_id(raw: Any) -> int | None:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return None
    return value or None


def to_record(item: dict[str, Any], provider: ProviderDescriptor) -> ResultRecord:
    """Normalize one upstream list item into a ResultRecord."""
    return ResultRecord(
        id=str(item.get("vod_id", "")),
        title=_SPACES_RE.sub(" ", str(item.get("vod_name", ""))).strip(),
        year=parse_year(item.get("vod_year")),
        episodes=parse_episodes(item.get("vod_play_url")),
        source=provider.key,
        source_name=provider.name,
        poster=item.get("vod_pic") or None,
        douban_id=_parse_douban_id(item.get("vod_douban_id")),
    )


class HttpxUpstreamAdapter:
    """Queries ``<api>?ac=videolist&wd=<query>`` on a provider.

    The tier executor owns the timeout race; the shared client's own
    timeout is only an outer safety bound.

    Args:
        http_client: Shared httpx.AsyncClient.
    """

    def __init__(self, *, http_client: httpx.AsyncClient) -> None:
        self._http = http_client

    async def query(
        self, provider: ProviderDescriptor, query: str
    ) -> list[ResultRecord]:
        if not provider.api:
            raise UpstreamError(f"provider {provider.key!r} has no api url")

        try:
            resp = await self._http.get(
                provider.api,
                params={"ac": "videolist", "wd": query},
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"{provider.key}: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise UpstreamError(f"{provider.key}: {e!s}") from e
        except ValueError as e:
            raise UpstreamError(f"{provider.key}: malformed JSON") from e

        items = payload.get("list") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise UpstreamError(f"{provider.key}: payload has no 'list'")

        records: list[ResultRecord] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            record = to_record(item, provider)
            if record.title:
                records.append(record)

        log.debug(
            "upstream_query_done",
            provider=provider.key,
            query=query,
            raw_count=len(items),
            result_count=len(records),
        )
        return records
