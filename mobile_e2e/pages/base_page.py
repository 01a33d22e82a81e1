import logging
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional

from selenium.common.exceptions import WebDriverException

from mobile_e2e.appium.driver import MobileDriver
from mobile_e2e.appium.exceptions import MobileAutomationError
from mobile_e2e.appium.gestures import Gestures
from mobile_e2e.appium.locators import Locator, PlatformLocator
from mobile_e2e.config import ANDROID_APP_PACKAGE

logger = logging.getLogger(__name__)


def parse_count(text: Optional[str], default: int) -> int:
    """Leading integer of a label such as "3" or "3 items", `default` when there is none."""
    match = re.match(r'\s*(\d+)', text or "")
    if not match:
        return default
    return int(match.group(1)) or default


def android_resource_id(view_id: str) -> str:
    """UiAutomator selector for a view of the demo app."""
    return f'android=new UiSelector().resourceId("{ANDROID_APP_PACKAGE}:id/{view_id}")'


class BasePage(ABC):
    """Common behaviour for screen objects; subclasses declare LOCATORS."""

    LOCATORS: Dict[str, PlatformLocator] = {}

    def __init__(self, mobile: MobileDriver, gestures: Optional[Gestures] = None):
        self.mobile = mobile
        self.gestures = gestures or Gestures(mobile)

    @property
    def is_android(self) -> bool:
        return self.mobile.is_android

    @property
    def is_ios(self) -> bool:
        return self.mobile.is_ios

    def get_locator(self, android: str, ios: str) -> Locator:
        return PlatformLocator(android, ios).for_platform(self.mobile.platform)

    def loc(self, name: str) -> Locator:
        """Locator declared in LOCATORS for the current platform."""
        return self.LOCATORS[name].for_platform(self.mobile.platform)

    @abstractmethod
    def wait_for_page_load(self) -> None:
        ...

    @abstractmethod
    def is_page_displayed(self) -> bool:
        ...

    def wait_for_element(self, locator, timeout: float = 10):
        return self.mobile.wait_for_element(locator, timeout)

    def wait_for_visible(self, locator, timeout: float = 10):
        return self.mobile.wait_for_visible(locator, timeout)

    def wait_for_invisible(self, locator, timeout: float = 10):
        return self.mobile.wait_for_invisible(locator, timeout)

    def tap(self, locator) -> None:
        self.mobile.tap(locator)

    def fill_field(self, locator, value: str) -> None:
        self.mobile.fill_field(locator, value)

    def set_field_value(self, locator, value: str) -> None:
        """Replace the field content and dismiss the keyboard."""
        self.mobile.clear_field(locator)
        self.mobile.append_field(locator, value)
        try:
            self.mobile.hide_keyboard()
        except WebDriverException:
            logger.debug("Keyboard was not open")

    def clear_field(self, locator) -> None:
        self.mobile.clear_field(locator)

    def get_text(self, locator) -> str:
        return self.mobile.grab_text(locator)

    def get_attribute(self, locator, attribute: str) -> Optional[str]:
        return self.mobile.grab_attribute(locator, attribute)

    def element_exists(self, locator) -> bool:
        try:
            return self.mobile.count_visible(locator) > 0
        except (WebDriverException, MobileAutomationError) as e:
            logger.debug(f"Visibility check failed for {locator}: {str(e)}")
            return False

    def scroll_to(self, locator) -> None:
        self.gestures.scroll_to_element(locator)

    def take_screenshot(self, name: str):
        return self.mobile.save_screenshot(f"{name}.png")

    def wait_for_text(self, text: str, timeout: float = 10):
        return self.mobile.wait_for_text(text, timeout)

    def see_text(self, text: str) -> None:
        self.mobile.see(text)

    def dont_see_text(self, text: str) -> None:
        self.mobile.dont_see(text)

    def pause(self, seconds: float) -> None:
        self.mobile.wait(seconds)
