import logging

from selenium.common.exceptions import WebDriverException

from mobile_e2e.appium.exceptions import MobileAutomationError
from mobile_e2e.appium.locators import PlatformLocator
from .base_page import BasePage, android_resource_id

logger = logging.getLogger(__name__)

USERNAME_HINTS = ("bob", "alice", "john", "visual")


def _hint(username: str) -> PlatformLocator:
    email = f"{username}@example.com"
    return PlatformLocator(f'android=new UiSelector().text("{email}")', f"~{email}")


class LoginPage(BasePage):
    """Login screen, reached from the menu or when checking out as a guest.

    The iOS text fields have no accessibility ids, so they are addressed by
    class chain position.
    """

    LOCATORS = {
        "username_field": PlatformLocator(
            android_resource_id("nameET"),
            "-ios class chain:**/XCUIElementTypeTextField[1]",
        ),
        "password_field": PlatformLocator(
            android_resource_id("passwordET"),
            "-ios class chain:**/XCUIElementTypeSecureTextField[1]",
        ),
        "login_button": PlatformLocator(
            android_resource_id("loginBtn"),
            '-ios predicate string:type == "XCUIElementTypeButton" AND name == "Login" AND label == "Login"',
        ),
        "error_message": PlatformLocator(
            android_resource_id("nameErrorTV"),
            '-ios predicate string:type == "XCUIElementTypeStaticText" AND '
            '(label CONTAINS "error" OR label CONTAINS "required")',
        ),
        "username_error": PlatformLocator(
            android_resource_id("nameErrorTV"),
            '-ios predicate string:type == "XCUIElementTypeStaticText" AND label CONTAINS "Username"',
        ),
        "password_error": PlatformLocator(
            'android=new UiSelector().resourceId("com.saucelabs.mydemoapp.android:id/passwordErrorTV")'
            '.className("android.widget.TextView")',
            '-ios predicate string:type == "XCUIElementTypeStaticText" AND label CONTAINS "Password"',
        ),
        "login_screen": PlatformLocator(android_resource_id("loginTV"), "~Usernames"),
        "login_title": PlatformLocator(
            android_resource_id("loginTV"),
            '-ios predicate string:type == "XCUIElementTypeStaticText" AND label == "Login" AND value == "Login"',
        ),
        "products_screen": PlatformLocator("~Displays all products of catalog", "~title"),
        "menu_button": PlatformLocator("~View menu", "~More-tab-item"),
        "login_menu_item": PlatformLocator("~Login Menu Item", "~Login Button"),
        "biometric_button": PlatformLocator("~Biometrics button", "~Biometrics button"),
        "logout_menu_item": PlatformLocator("~Logout Menu Item", "~LogOut-menu-item"),
        "logout_confirm_button": PlatformLocator('android=new UiSelector().text("LOGOUT")', "~LOGOUT"),
    }
    LOCATORS.update({f"hint_{name}": _hint(name) for name in USERNAME_HINTS})

    def wait_for_page_load(self) -> None:
        self.wait_for_visible(self.loc("login_screen"), 20)
        self.wait_for_visible(self.loc("username_field"), 20)
        self.wait_for_visible(self.loc("login_button"), 20)

    def is_page_displayed(self) -> bool:
        return self.element_exists(self.loc("login_screen"))

    def open_from_menu(self) -> None:
        self.tap(self.loc("menu_button"))
        self.wait_for_visible(self.loc("login_menu_item"), 10)
        self.tap(self.loc("login_menu_item"))

    def enter_username(self, username: str) -> None:
        self.wait_for_element(self.loc("username_field"), 20)
        self.set_field_value(self.loc("username_field"), username)

    def enter_password(self, password: str) -> None:
        self.wait_for_element(self.loc("password_field"), 20)
        self.set_field_value(self.loc("password_field"), password)

    def select_username_hint(self, username: str) -> None:
        """Tap one of the suggested accounts: bob, alice, john or visual."""
        if username not in USERNAME_HINTS:
            raise ValueError(f"Unknown username hint: {username}")
        hint = self.loc(f"hint_{username}")
        self.wait_for_element(hint, 20)
        self.tap(hint)

    def tap_login_button(self) -> None:
        self.tap(self.loc("login_button"))

    def login(self, username: str, password: str) -> None:
        self.enter_username(username)
        self.enter_password(password)
        self.tap_login_button()

    def get_error_message(self) -> str:
        self.wait_for_visible(self.loc("error_message"), 20)
        return self.get_text(self.loc("error_message"))

    def _error_shown(self, name: str) -> bool:
        try:
            self.wait_for_visible(self.loc(name), 20)
            return self.element_exists(self.loc(name))
        except (WebDriverException, MobileAutomationError):
            return False

    def is_error_displayed(self) -> bool:
        return self._error_shown("error_message")

    def is_username_error_displayed(self) -> bool:
        return self._error_shown("username_error")

    def is_password_error_displayed(self) -> bool:
        return self._error_shown("password_error")

    def get_username_error_message(self) -> str:
        self.wait_for_visible(self.loc("username_error"), 20)
        return self.get_text(self.loc("username_error"))

    def get_password_error_message(self) -> str:
        self.wait_for_visible(self.loc("password_error"), 20)
        return self.get_text(self.loc("password_error"))

    def tap_biometric_login(self) -> None:
        self.tap(self.loc("biometric_button"))

    def clear_form(self) -> None:
        self.clear_field(self.loc("username_field"))
        self.clear_field(self.loc("password_field"))

    def logout(self) -> None:
        """Log out from the open menu, confirming the dialog when it appears."""
        self.wait_for_element(self.loc("logout_menu_item"), 20)
        self.tap(self.loc("logout_menu_item"))
        self.pause(1)
        if self.element_exists(self.loc("logout_confirm_button")):
            self.tap(self.loc("logout_confirm_button"))
            self.pause(1)
        else:
            logger.debug("No logout confirmation dialog")

    def is_user_logged_in(self) -> bool:
        """A logout entry in the menu means a user is logged in."""
        return self.element_exists(self.loc("logout_menu_item"))
