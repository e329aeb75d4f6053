from __future__ import annotations

import json

import pytest

from chrono_mcp.cli import main


@pytest.fixture(autouse=True)
def _no_default_offset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHRONO_DEFAULT_TIMEZONE_OFFSET", "")
    monkeypatch.delenv("CHRONO_DEFAULT_TIMEZONE_OFFSET")


def test_parse_prints_json(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["parse", "--text", "meet 2025-03-15T14:30:00Z", "--timezone-offset", "540"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["results"][0]["text"] == "2025-03-15T14:30:00Z"
    assert out["results"][0]["start"]["iso"] == "2025-03-15T23:30:00.000+09:00"


def test_parse_uses_env_default_offset(capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHRONO_DEFAULT_TIMEZONE_OFFSET", "-300")
    rc = main(["parse", "--text", "2025-03-15T14:30:00Z"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["results"][0]["start"]["iso"].endswith("-05:00")


def test_parse_all_mode(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(
        [
            "parse",
            "--text",
            "Monday 10am and Wednesday 2pm",
            "--reference",
            "2025-10-04T10:00:00Z",
            "--mode",
            "all",
        ]
    )
    assert rc == 0
    assert len(json.loads(capsys.readouterr().out)["results"]) == 2


def test_bad_reference_exit_code(capsys: pytest.CaptureFixture[str]) -> None:
    rc = main(["parse", "--text", "tomorrow", "--reference", "not a date"])
    assert rc == 2
    assert "Invalid reference date" in capsys.readouterr().err
