"""Tests for the mediasift CLI entrypoint."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
import respx
import yaml

from mediasift.interfaces.cli import cli

_API = "https://alpha.example.com/api.php/provide/vod"


class TestParseArgs:
    def test_serve_options(self) -> None:
        args = cli._parse_args(["--log-level", "DEBUG", "serve", "--port", "9000"])
        assert args.command == "serve"
        assert args.port == 9000
        assert args.log_level == "DEBUG"

    def test_search_options(self) -> None:
        args = cli._parse_args(["search", "the matrix", "--user", "bob", "--json"])
        assert args.command == "search"
        assert args.query == "the matrix"
        assert args.user == "bob"
        assert args.json is True

    def test_no_command_defaults_to_serve(self) -> None:
        assert cli._parse_args([]).command is None


class TestStart:
    def test_serve_runs_uvicorn(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("PORT", raising=False)
        with patch.object(cli.uvicorn, "run") as run:
            assert cli.start(["serve", "--host", "127.0.0.1"]) == 0

        _, kwargs = run.call_args
        assert kwargs["host"] == "127.0.0.1"
        assert kwargs["port"] == 8080
        assert kwargs["log_config"]["version"] == 1

    @respx.mock
    def test_search_prints_groups(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        respx.get(_API).respond(
            json={
                "list": [
                    {
                        "vod_id": 1,
                        "vod_name": "The Matrix",
                        "vod_year": "1999",
                        "vod_play_url": "HD$https://cdn.example.com/m.m3u8",
                    }
                ]
            }
        )
        config = tmp_path / "config.yaml"
        config.write_text(
            yaml.dump(
                {
                    "environment": "test",
                    "sources": [{"key": "alpha", "api": _API, "tier": "high"}],
                }
            ),
            encoding="utf-8",
        )

        code = cli.start(["--config", str(config), "search", "matrix"])

        assert code == 0
        out = capsys.readouterr().out
        assert "The Matrix (1999, movie) [alpha]" in out

    def test_search_without_results_exits_1(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(yaml.dump({"environment": "test"}), encoding="utf-8")

        code = cli.start(["--config", str(config), "search", "nothing", "--json"])

        assert code == 1
        assert '"groups": []' in capsys.readouterr().out
