#!/usr/bin/env python3

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from dotenv import load_dotenv

SUITE_DIR = Path(__file__).parent / "tests"


def build_pytest_args(args: argparse.Namespace, output_dir: str, results_dir: str) -> list:
    """Translate runner options into a pytest command line."""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    reports_dir = Path(output_dir) / "reports"
    reports_dir.mkdir(parents=True, exist_ok=True)

    pytest_args = [
        str(SUITE_DIR / ("e2e/discovery" if args.discovery else "e2e")),
        f"--alluredir={Path(output_dir) / results_dir}",
        f"--junitxml={reports_dir / f'junit_{args.platform}_{timestamp}.xml'}",
    ]
    if args.discovery:
        # Overrides the default "not discovery" selection
        pytest_args += ["-m", "discovery"]
    elif args.marker:
        pytest_args += ["-m", args.marker]
    if args.keyword:
        pytest_args += ["-k", args.keyword]
    if args.verbose:
        pytest_args.append("-v")
    return pytest_args


def main() -> int:
    load_dotenv()

    # Parse command line arguments
    parser = argparse.ArgumentParser(description="My Demo App mobile E2E suite runner")
    parser.add_argument("--platform", choices=["android", "ios"], default=os.getenv("PLATFORM", "android"),
                        help="Target platform")
    parser.add_argument("--device-type", choices=["emulator", "simulator", "real"],
                        default=os.getenv("DEVICE_TYPE"),
                        help="Device kind (defaults to emulator on Android, simulator on iOS)")
    parser.add_argument("--no-auto-appium", action="store_true",
                        help="Use an Appium server that is already running (for parallel platform runs)")
    parser.add_argument("-m", "--marker", help="Only run tests matching this marker expression, e.g. 'smoke and login'")
    parser.add_argument("-k", "--keyword", help="Only run tests matching this keyword expression")
    parser.add_argument("--discovery", action="store_true", help="Run the locator discovery scenarios instead")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose pytest output")
    args = parser.parse_args()

    device_type = args.device_type or ("simulator" if args.platform == "ios" else "emulator")
    os.environ["PLATFORM"] = args.platform
    os.environ["DEVICE_TYPE"] = device_type
    if args.no_auto_appium:
        os.environ["AUTO_APPIUM"] = "false"

    output_dir = os.getenv("OUTPUT_DIR", "output")
    results_dir = os.getenv("ALLURE_RESULTS_DIR", "allure-results")
    return pytest.main(build_pytest_args(args, output_dir, results_dir))


if __name__ == "__main__":
    sys.exit(main())
