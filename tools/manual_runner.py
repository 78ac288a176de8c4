"""Utility for manually invoking the judge engine.

Run a source file either as a snippet (raw output, no verdict) or against
test case files and print the engine's response as JSON.  Test cases are
given as pairs ``<name>.in`` / ``<name>.out`` inside a directory and are
judged in sorted name order.

Example::

    python -m tools.manual_runner main.cpp --lang cpp20 --stdin input.txt

    python -m tools.manual_runner problem/a-plus-b/src/main.py \
        --lang python3 \
        --testcase-dir problem/a-plus-b/testcase \
        --time-limit 1000

Use ``--strategy float --precision 4`` for real-valued answers.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from judge.constant import CompareStrategy
from judge.engine import JudgeEngine
from judge.language import supported_languages


def load_testcases(testcase_dir: Path) -> List[Dict[str, Any]]:
    """Return test cases built from ``*.in``/``*.out`` pairs."""

    cases = []
    for in_path in sorted(testcase_dir.glob("*.in")):
        out_path = in_path.with_suffix(".out")
        if not out_path.exists():
            raise FileNotFoundError(f"missing answer file: {out_path}")
        cases.append({
            "input": in_path.read_text(),
            "expectedOutput": out_path.read_text(),
        })
    if not cases:
        raise FileNotFoundError(f"no testcase found in {testcase_dir}")
    return cases


def parse_args() -> argparse.Namespace:
    """Parse CLI arguments."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "source",
        type=Path,
        help="source file to run",
    )
    parser.add_argument(
        "--lang",
        default="python3",
        choices=supported_languages(),
        help="language identifier",
    )
    parser.add_argument(
        "--stdin",
        type=Path,
        help="file fed to the program in snippet mode (omit for empty stdin)",
    )
    parser.add_argument(
        "--testcase-dir",
        type=Path,
        help="judge against the testcases in this directory",
    )
    parser.add_argument(
        "--time-limit",
        type=int,
        help="time limit in milliseconds",
    )
    parser.add_argument(
        "--mem-limit",
        type=int,
        default=256,
        help="memory limit in megabytes (reported only, not enforced)",
    )
    parser.add_argument(
        "--strategy",
        default=CompareStrategy.TOKEN.value,
        choices=[s.value for s in CompareStrategy],
        help="output comparison strategy",
    )
    parser.add_argument(
        "--precision",
        type=int,
        default=6,
        help="decimal digits compared by the float strategy",
    )
    return parser.parse_args()


async def run(args: argparse.Namespace) -> Dict[str, Any]:
    engine = JudgeEngine()
    code = args.source.read_text()
    if args.testcase_dir is not None:
        result = await engine.execute_code(
            code,
            args.lang,
            load_testcases(args.testcase_dir),
            time_limit=args.time_limit or 2000,
            memory_limit=args.mem_limit,
            compare_strategy=args.strategy,
            precision=args.precision,
        )
    else:
        result = await engine.run_snippet(
            code,
            args.lang,
            stdin=args.stdin.read_text() if args.stdin else "",
            time_limit=args.time_limit or 5000,
        )
    return result.model_dump(mode="json")


def main() -> None:
    """CLI entry point."""

    args = parse_args()
    print(json.dumps(asyncio.run(run(args)), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
