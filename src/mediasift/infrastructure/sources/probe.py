"""Speed test - timed GET against a provider's API endpoint."""

from __future__ import annotations

import time

import httpx
import structlog

from mediasift.domain.entities import ProbeResult, ProviderDescriptor

log = structlog.get_logger(__name__)


class SourceProbe:
    """Measures reachability and latency of a provider's API.

    Any HTTP response counts as reachable; ``success`` additionally
    requires a 2xx status.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        timeout: float = 8.0,
    ) -> None:
        self._http = http_client
        self._timeout = timeout

    async def probe(self, provider: ProviderDescriptor) -> ProbeResult:
        t0 = time.monotonic()

        def _elapsed() -> int:
            return int((time.monotonic() - t0) * 1000)

        try:
            resp = await self._http.get(
                provider.api,
                timeout=self._timeout,
                headers={
                    "Accept": "application/json, text/plain, */*",
                    "Cache-Control": "no-cache",
                },
            )
        except httpx.TimeoutException:
            return ProbeResult(success=False, speed_ms=_elapsed(), error="timeout")
        except httpx.HTTPError as exc:
            log.debug("source_probe_error", source=provider.key, error=str(exc))
            return ProbeResult(
                success=False, speed_ms=_elapsed(), error="connection failed"
            )

        speed_ms = _elapsed()
        if resp.is_success:
            result = ProbeResult(
                success=True, speed_ms=speed_ms, status=resp.status_code
            )
        else:
            result = ProbeResult(
                success=False,
                speed_ms=speed_ms,
                status=resp.status_code,
                error=f"HTTP {resp.status_code}: {resp.reason_phrase}",
            )
        log.info(
            "source_probe_done",
            source=provider.key,
            success=result.success,
            speed_ms=speed_ms,
            status=resp.status_code,
        )
        return result
