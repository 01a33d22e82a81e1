"""Reusable test steps shared by the scenarios."""

import logging
import time
from typing import Any, Callable, TypeVar

from mobile_e2e.appium.driver import MobileDriver
from mobile_e2e.appium.exceptions import ElementNotFoundError
from mobile_e2e.appium.gestures import Gestures, SCROLL_DISTANCE, SCROLL_PAUSE
from mobile_e2e.appium.locators import to_locator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Steps:
    def __init__(self, mobile: MobileDriver, gestures: Gestures = None):
        self.mobile = mobile
        self.gestures = gestures or Gestures(mobile)

    def login(self, username: str, password: str) -> None:
        """Fill the login form identified by accessibility ids and submit it."""
        self.mobile.wait_for_element("~username-input", 10)
        self.mobile.fill_field("~username-input", username)
        self.mobile.fill_field("~password-input", password)
        self.mobile.tap("~login-button")
        self.mobile.wait(2)

    def wait_for_app_ready(self) -> None:
        self.mobile.wait(3)

    def assert_visible(self, locator) -> None:
        loc = to_locator(locator)
        if self.mobile.count_visible(loc) == 0:
            raise AssertionError(f"Element {loc} is not visible")

    def assert_not_visible(self, locator) -> None:
        loc = to_locator(locator)
        if self.mobile.count_visible(loc) > 0:
            raise AssertionError(f"Element {loc} is visible but should not be")

    def assert_equals(self, actual: Any, expected: Any, message: str = None) -> None:
        if actual != expected:
            raise AssertionError(message or f'Expected "{expected}" but got "{actual}"')

    def assert_true(self, condition: Any, message: str = None) -> None:
        if not condition:
            raise AssertionError(message or "Expected condition to be true")

    def assert_false(self, condition: Any, message: str = None) -> None:
        if condition:
            raise AssertionError(message or "Expected condition to be false")

    def assert_contains(self, text: str, substring: str, message: str = None) -> None:
        if substring not in text:
            raise AssertionError(message or f'Expected "{text}" to contain "{substring}"')

    def retry_action(self, action: Callable[[], T], attempts: int = 3, delay: int = 1000) -> T:
        """Call `action` until it succeeds, sleeping `delay` ms between attempts."""
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        last_error = None
        for attempt in range(1, attempts + 1):
            try:
                return action()
            except Exception as e:
                last_error = e
                logger.warning(f"Attempt {attempt}/{attempts} failed: {str(e)}")
                if attempt < attempts:
                    time.sleep(delay / 1000)
        raise last_error

    def scroll_until_visible(self, locator, direction: str = "down", max_scrolls: int = 10) -> None:
        loc = to_locator(locator)
        for _ in range(max_scrolls):
            if self.mobile.count_visible(loc) > 0:
                return
            if direction == "down":
                self.gestures.swipe_up(SCROLL_DISTANCE)
            else:
                self.gestures.swipe_down(SCROLL_DISTANCE)
            time.sleep(SCROLL_PAUSE)
        raise ElementNotFoundError(loc, f"Element {loc} not found after {max_scrolls} scrolls")

    def wait_and_tap(self, locator, timeout: float = 10) -> None:
        self.mobile.wait_for_visible(locator, timeout)
        self.mobile.tap(locator)

    def wait_and_fill(self, locator, value: str, timeout: float = 10) -> None:
        self.mobile.wait_for_visible(locator, timeout)
        self.mobile.fill_field(locator, value)

    def get_element_count(self, locator) -> int:
        return self.mobile.count_visible(locator)

    def is_android(self) -> bool:
        return self.mobile.is_android

    def is_ios(self) -> bool:
        return self.mobile.is_ios
