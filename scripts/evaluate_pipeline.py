from __future__ import annotations

import argparse
from dataclasses import dataclass
import json
from pathlib import Path
from typing import Any, Optional


def _read_jsonl(path: Path) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            rows.append(json.loads(line))
    return rows


def _write_jsonl(path: Path, rows: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")


@dataclass
class CaseResult:
    passed: bool
    failures: list[str]


def _check(expect: dict[str, Any], out: dict[str, Any]) -> CaseResult:
    failures: list[str] = []
    results = out.get("results") or []

    count = expect.get("count")
    if count is not None and len(results) != int(count):
        failures.append(f"count: expected {count}, got {len(results)}")

    first: Optional[dict[str, Any]] = results[0] if results else None
    iso_prefix = expect.get("iso_prefix")
    if iso_prefix is not None:
        got = first["start"]["iso"] if first else None
        if got is None or not got.startswith(iso_prefix):
            failures.append(f"iso: expected prefix {iso_prefix!r}, got {got!r}")

    is_range = expect.get("is_range")
    if is_range is not None:
        got_range = first["isRange"] if first else None
        if got_range != is_range:
            failures.append(f"isRange: expected {is_range}, got {got_range}")

    return CaseResult(passed=not failures, failures=failures)


def main(argv: list[str] | None = None) -> int:
    # Load .env first so CHRONO_DEFAULT_TIMEZONE_OFFSET applies to cases without an offset
    from chrono_mcp.config import load_dotenv_into_env, load_settings

    load_dotenv_into_env()
    settings = load_settings()

    ap = argparse.ArgumentParser(prog="evaluate_pipeline.py")
    ap.add_argument("--input", default="data/eval_cases.jsonl")
    ap.add_argument("--limit", type=int, default=0)
    ap.add_argument("--out", default="artifacts/eval_results.jsonl")
    args = ap.parse_args(argv)

    from chrono_mcp.errors import ChronoError
    from chrono_mcp.pipeline import parse_datetime
    from chrono_mcp.schema import ParseRequest, to_json

    inp = Path(args.input)
    rows = _read_jsonl(inp)
    if args.limit and args.limit > 0:
        rows = rows[: args.limit]

    results_rows: list[dict[str, Any]] = []
    n_pass = n_fail = n_error = 0

    for r in rows:
        rid = r.get("id")
        arguments = {
            "text": r.get("text"),
            "reference": r.get("reference"),
            "timezone_offset": r.get("timezone_offset", settings.default_timezone_offset),
            "forwardOnly": r.get("forwardOnly"),
            "mode": r.get("mode"),
        }
        row_out: dict[str, Any] = {"id": rid, "text": r.get("text")}

        expect_error = r.get("expect_error")
        try:
            out = to_json(parse_datetime(ParseRequest.from_arguments(arguments)))
        except ChronoError as e:
            row_out["error"] = {"type": type(e).__name__, "message": str(e)}
            if expect_error == type(e).__name__:
                n_pass += 1
                row_out["passed"] = True
            else:
                n_error += 1
                row_out["passed"] = False
            results_rows.append(row_out)
            continue

        row_out["output"] = out
        if expect_error:
            check = CaseResult(passed=False, failures=[f"expected {expect_error}, got a response"])
        else:
            check = _check(r.get("expect") or {}, out)
        row_out["passed"] = check.passed
        if check.failures:
            row_out["failures"] = check.failures
        if check.passed:
            n_pass += 1
        else:
            n_fail += 1
        results_rows.append(row_out)

    n = len(rows)
    summary: dict[str, Any] = {
        "input": str(inp),
        "n": n,
        "passed": n_pass,
        "failed": n_fail,
        "errors": n_error,
        "pass_rate": (n_pass / n) if n else 1.0,
    }

    out_path = Path(args.out)
    _write_jsonl(out_path, [{"_summary": summary}] + results_rows)
    print(json.dumps(summary, ensure_ascii=False))
    print(f"Wrote: {out_path}")
    return 0 if n_pass == n else 1


if __name__ == "__main__":
    raise SystemExit(main())
