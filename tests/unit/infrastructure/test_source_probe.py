"""Unit tests for SourceProbe (speed test)."""

from __future__ import annotations

import httpx
import respx

from mediasift.domain.entities import ProviderDescriptor
from mediasift.infrastructure.sources import SourceProbe

_API = "https://alpha.example.com/api.php/provide/vod"
_PROVIDER = ProviderDescriptor(key="alpha", name="Alpha", api=_API)


class TestProbe:
    @respx.mock
    async def test_reachable_returns_success(self) -> None:
        respx.get(_API).respond(200, json={"list": []})
        async with httpx.AsyncClient() as client:
            result = await SourceProbe(client).probe(_PROVIDER)

        assert result.success is True
        assert result.status == 200
        assert result.speed_ms >= 0
        assert result.error is None

    @respx.mock
    async def test_http_error_status(self) -> None:
        respx.get(_API).respond(502)
        async with httpx.AsyncClient() as client:
            result = await SourceProbe(client).probe(_PROVIDER)

        assert result.success is False
        assert result.status == 502
        assert result.error == "HTTP 502: Bad Gateway"

    @respx.mock
    async def test_timeout(self) -> None:
        respx.get(_API).mock(side_effect=httpx.ReadTimeout("timed out"))
        async with httpx.AsyncClient() as client:
            result = await SourceProbe(client, timeout=0.5).probe(_PROVIDER)

        assert result.success is False
        assert result.error == "timeout"
        assert result.status is None

    @respx.mock
    async def test_connection_failed(self) -> None:
        respx.get(_API).mock(side_effect=httpx.ConnectError("refused"))
        async with httpx.AsyncClient() as client:
            result = await SourceProbe(client).probe(_PROVIDER)

        assert result.success is False
        assert result.error == "connection failed"
