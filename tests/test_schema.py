import pytest

from chrono_mcp.errors import InvalidInput, InvalidReference
from chrono_mcp.schema import ParsedDateTime, ParseRequest, ParseResponse, ParseResultEntry, to_json


def test_defaults() -> None:
    r = ParseRequest.from_arguments({"text": "tomorrow"})
    assert r == ParseRequest(text="tomorrow", reference=None, timezone_offset=None, forward_only=True, mode="first")


def test_explicit_arguments() -> None:
    r = ParseRequest.from_arguments(
        {
            "text": "tomorrow",
            "reference": "2025-10-04T10:00:00Z",
            "timezone_offset": 540.0,
            "forwardOnly": False,
            "mode": "all",
        }
    )
    assert r.timezone_offset == 540
    assert isinstance(r.timezone_offset, int)
    assert r.forward_only is False
    assert r.mode == "all"


@pytest.mark.parametrize("args", [{}, {"text": ""}, {"text": 42}, {"text": None}])
def test_text_is_required(args: dict) -> None:
    with pytest.raises(InvalidInput, match="text is required and must be a string"):
        ParseRequest.from_arguments(args)


@pytest.mark.parametrize("offset", [True, "540", 5.5])
def test_bad_offset(offset: object) -> None:
    with pytest.raises(InvalidInput, match="timezone_offset"):
        ParseRequest.from_arguments({"text": "x", "timezone_offset": offset})


def test_bad_mode_and_direction() -> None:
    with pytest.raises(InvalidInput, match="mode"):
        ParseRequest.from_arguments({"text": "x", "mode": "some"})
    with pytest.raises(InvalidInput, match="forwardOnly"):
        ParseRequest.from_arguments({"text": "x", "forwardOnly": "yes"})


def test_non_string_reference() -> None:
    with pytest.raises(InvalidReference):
        ParseRequest.from_arguments({"text": "x", "reference": 1759651200})


def test_to_json_wire_shape() -> None:
    start = ParsedDateTime(
        iso="2025-10-05T17:00:00.000+09:00",
        unix_millis=1759651200000,
        detected_offset_minutes=None,
        certain_fields=("year", "month", "day", "hour"),
        implied_fields=("minute", "second", "millisecond"),
    )
    single = to_json(ParseResponse(results=(ParseResultEntry("tomorrow at 5pm", start),), summary="s"))
    assert single == {
        "results": [
            {
                "text": "tomorrow at 5pm",
                "isRange": False,
                "start": {
                    "iso": "2025-10-05T17:00:00.000+09:00",
                    "unix": 1759651200000,
                    "timezoneOffset": None,
                    "certain": ["year", "month", "day", "hour"],
                    "implied": ["minute", "second", "millisecond"],
                },
            }
        ],
        "summary": "s",
    }

    ranged = to_json(ParseResponse(results=(ParseResultEntry("a to b", start, start),), summary="r"))
    assert ranged["results"][0]["isRange"] is True
    assert ranged["results"][0]["end"] == ranged["results"][0]["start"]
