#!/usr/bin/env python3

import pytest
import os
import sys
import logging
from pathlib import Path
from dotenv import load_dotenv

# Add the parent directory to sys.path to allow importing mobile_e2e
sys.path.append(str(Path(__file__).parent.parent))

# Configure logging for tests
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Load environment variables from .env file
load_dotenv()

MARKERS = {
    "smoke": "critical path checks run on every build",
    "regression": "full regression coverage",
    "login": "login screen scenarios",
    "logout": "logout scenarios",
    "security": "credential handling scenarios",
    "negative": "invalid input scenarios",
    "validation": "form validation scenarios",
    "ui": "screen layout checks",
    "session": "session persistence scenarios",
    "shopping": "catalog and cart scenarios",
    "e2e": "complete purchase flows",
    "checkout": "checkout scenarios",
    "cart": "cart scenarios",
    "products": "catalog scenarios",
    "lifecycle": "app install/launch/terminate scenarios",
    "installation": "app installation scenarios",
    "relaunch": "app relaunch scenarios",
    "edge_case": "edge case scenarios",
    "orientation": "device rotation scenarios",
    "background": "background/foreground scenarios",
    "navigation": "back navigation scenarios",
    "network": "connectivity scenarios",
    "restart": "app restart scenarios",
    "discovery": "locator discovery for maintainers, deselected by default",
    "appium": "mark test as requiring appium server",
    "integration": "mark test as an integration test",
}


# Register marks for pytest
def pytest_configure(config):
    """Register custom pytest markers."""
    for name, description in MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


# Skip appium tests if the server is not available
def pytest_runtest_setup(item):
    """Skip tests marked with 'appium' if Appium server is not available."""
    if "appium" in item.keywords:
        # Check if Appium tests should be skipped
        if os.environ.get("SKIP_APPIUM_TESTS", "").lower() in ("true", "1", "yes"):
            pytest.skip("Appium tests skipped via SKIP_APPIUM_TESTS environment variable")
