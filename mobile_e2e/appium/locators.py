"""Locator expressions used by the page objects.

Locators are written as strings in the notation the demo app's page objects
have always used:

    ~Product Title                          accessibility id
    android=new UiSelector().text("...")    UiAutomator selector
    -ios class chain:**/XCUIElementType...  iOS class chain
    -ios predicate string:label == "..."    iOS predicate
    **/XCUIElementTypeButton                iOS class chain (short form)
    id=com.example:id/name                  resource id
    //android.widget.Button[@text="..."]    XPath

`Locator.parse` turns such a string into an Appium strategy and value.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple
from appium.webdriver.common.appiumby import AppiumBy


class LocatorStrategy(str, Enum):
    ACCESSIBILITY_ID = "accessibility_id"
    ANDROID_UIAUTOMATOR = "android_uiautomator"
    IOS_CLASS_CHAIN = "ios_class_chain"
    IOS_PREDICATE = "ios_predicate"
    ID = "id"
    XPATH = "xpath"


STRATEGY_MAP = {
    LocatorStrategy.ACCESSIBILITY_ID: AppiumBy.ACCESSIBILITY_ID,
    LocatorStrategy.ANDROID_UIAUTOMATOR: AppiumBy.ANDROID_UIAUTOMATOR,
    LocatorStrategy.IOS_CLASS_CHAIN: AppiumBy.IOS_CLASS_CHAIN,
    LocatorStrategy.IOS_PREDICATE: AppiumBy.IOS_PREDICATE,
    LocatorStrategy.ID: AppiumBy.ID,
    LocatorStrategy.XPATH: AppiumBy.XPATH,
}

# Order matters: longer prefixes first
_PREFIXES = (
    ("-ios class chain:", LocatorStrategy.IOS_CLASS_CHAIN),
    ("-ios predicate string:", LocatorStrategy.IOS_PREDICATE),
    ("android=", LocatorStrategy.ANDROID_UIAUTOMATOR),
    ("id=", LocatorStrategy.ID),
    ("~", LocatorStrategy.ACCESSIBILITY_ID),
)


@dataclass(frozen=True)
class Locator:
    """A parsed locator, optionally narrowed to the n-th match (zero based)."""
    strategy: LocatorStrategy
    value: str
    expression: str
    index: Optional[int] = None

    @classmethod
    def parse(cls, expression: str) -> "Locator":
        if expression is None or not expression.strip():
            raise ValueError("Locator expression cannot be empty")
        expression = expression.strip()

        for prefix, strategy in _PREFIXES:
            if expression.startswith(prefix):
                value = expression[len(prefix):]
                if not value:
                    raise ValueError(f"Locator '{expression}' has no value after '{prefix}'")
                return cls(strategy, value, expression)

        if expression.startswith("**/"):
            return cls(LocatorStrategy.IOS_CLASS_CHAIN, expression, expression)
        if expression.startswith("/") or expression.startswith("("):
            return cls(LocatorStrategy.XPATH, expression, expression)
        return cls(LocatorStrategy.ACCESSIBILITY_ID, expression, expression)

    @property
    def by(self) -> str:
        return STRATEGY_MAP[self.strategy]

    def as_tuple(self) -> Tuple[str, str]:
        """(by, value) pair accepted by find_elements and expected_conditions."""
        return self.by, self.value

    def nth(self, index: int) -> "Locator":
        if index < 0:
            raise ValueError(f"Locator index must not be negative: {index}")
        return replace(self, index=index)

    def __str__(self) -> str:
        if self.index is None:
            return self.expression
        return f"{self.expression}[{self.index}]"


def to_locator(value) -> Locator:
    """Accept either a Locator or a raw expression."""
    if isinstance(value, Locator):
        return value
    return Locator.parse(value)


@dataclass(frozen=True)
class PlatformLocator:
    """The same element addressed on Android and on iOS."""
    android: str
    ios: str

    def for_platform(self, platform: str) -> Locator:
        expression = self.ios if (platform or "").lower() == "ios" else self.android
        return Locator.parse(expression)
