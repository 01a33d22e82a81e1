class MobileAutomationError(Exception):
    """Base class for errors raised by the automation layer."""


class DriverNotStartedError(MobileAutomationError):
    """An operation needed an Appium session but none is active."""


class ElementNotFoundError(MobileAutomationError):
    """An element could not be located or did not reach the expected state in time."""

    def __init__(self, locator, message=None):
        self.locator = locator
        super().__init__(message or f"Element {locator} not found")


class AppiumServerError(MobileAutomationError):
    """The Appium server process could not be started."""
