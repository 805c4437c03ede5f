#!/usr/bin/env python3
"""
Test runner script
Runs the unit or integration suites, with coverage by default
"""

import argparse
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent


def run_command(cmd: list, env: dict = None) -> int:
    """Run a command from the repository root and return its exit code"""
    print(f"Running: {' '.join(cmd)}")
    result = subprocess.run(cmd, cwd=str(ROOT), env=env)
    return result.returncode


def run_tests(test_type: str = "all", coverage: bool = True) -> int:
    cmd = [sys.executable, "-m", "pytest"]
    env = dict(os.environ)

    if test_type == "unit":
        cmd += ["-m", "unit"]
    elif test_type == "integration":
        cmd += ["-m", "integration"]
        env["LIVE_FEED_TESTS"] = "1"

    if coverage and test_type != "integration":
        cmd += ["--cov=orderbook_merger", "--cov-report=term", "--cov-report=html"]

    return run_command(cmd, env=env)


def main():
    parser = argparse.ArgumentParser(description="Run the test suites")
    parser.add_argument(
        "--type",
        choices=["all", "unit", "integration"],
        default="all",
        help="Which tests to run",
    )
    parser.add_argument(
        "--no-coverage",
        action="store_true",
        help="Skip the coverage report",
    )
    args = parser.parse_args()

    exit_code = run_tests(args.type, coverage=not args.no_coverage)

    if exit_code == 0:
        print("\nAll tests passed")
    else:
        print(f"\nTests failed, exit code: {exit_code}")
        coverage_dir = ROOT / "htmlcov"
        if coverage_dir.exists():
            print(f"Coverage report: {coverage_dir}/index.html")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
