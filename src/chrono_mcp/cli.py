from __future__ import annotations

import argparse
import json
import logging
import sys

from chrono_mcp.config import load_settings
from chrono_mcp.errors import InternalError, InvalidInput, InvalidReference


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="chrono-mcp")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_parse = sub.add_parser("parse", help="Parse date/time expressions in a text.")
    p_parse.add_argument("--text", required=True)
    p_parse.add_argument("--reference", default=None, help="Reference ISO-8601 timestamp (default: now).")
    p_parse.add_argument(
        "--timezone-offset",
        type=int,
        default=None,
        help="Output offset in minutes from UTC (default: CHRONO_DEFAULT_TIMEZONE_OFFSET or 0).",
    )
    p_parse.add_argument("--mode", choices=["first", "all"], default="first")
    p_parse.add_argument(
        "--backward",
        action="store_true",
        help="Do not prefer future dates for ambiguous expressions.",
    )

    args = parser.parse_args(argv)
    settings = load_settings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "parse":
        from chrono_mcp.pipeline import parse_datetime
        from chrono_mcp.schema import ParseRequest, to_json

        offset = args.timezone_offset
        if offset is None:
            offset = settings.default_timezone_offset
        try:
            request = ParseRequest.from_arguments(
                {
                    "text": args.text,
                    "reference": args.reference,
                    "timezone_offset": offset,
                    "forwardOnly": not args.backward,
                    "mode": args.mode,
                }
            )
            response = parse_datetime(request)
        except (InvalidInput, InvalidReference) as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        except InternalError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        print(json.dumps(to_json(response), ensure_ascii=False, indent=2))
        return 0

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
