#!/usr/bin/env python3

import atexit
import logging
import time
import traceback
import weakref
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import allure
from appium import webdriver
from appium.options.android import UiAutomator2Options
from appium.options.ios import XCUITestOptions
from selenium.common.exceptions import (
    StaleElementReferenceException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.support.ui import WebDriverWait

from mobile_e2e.config import Config, build_capabilities, load_config
from mobile_e2e.reporting.allure_helper import attach_screenshot, sanitize_file_name
from .action_trace import StepTracer
from .enums import AppState, Orientation, StepStatus
from .exceptions import DriverNotStartedError, ElementNotFoundError, MobileAutomationError
from .locators import Locator, to_locator

logger = logging.getLogger(__name__)

DEFAULT_WAIT = 10
POLL_FREQUENCY = 0.5
STEP_RETRY_DELAY = 1

# Steps whose failure is not retried
RETRY_IGNORED_PREFIXES = ("wait", "send", "execute", "run", "have")


class MobileDriver:
    """Appium session for the app under test, with recorded steps."""
    _instances = weakref.WeakSet()

    def __init__(self, config: Optional[Config] = None):
        self.driver = None
        self.config = config or load_config()
        self.tracer = StepTracer(self.config.traces_path, self.config.platform)
        self._instances.add(self)
        logger.debug("MobileDriver instance created")

    @classmethod
    def _cleanup_all(cls):
        """Clean up all driver instances."""
        logger.info("Cleaning up all driver instances")
        for instance in list(cls._instances):
            try:
                instance.cleanup()
            except Exception as e:
                logger.error(f"Error cleaning up instance: {str(e)}")
        cls._instances.clear()

    @property
    def platform(self) -> str:
        return self.config.platform

    @property
    def is_android(self) -> bool:
        return self.config.is_android

    @property
    def is_ios(self) -> bool:
        return self.config.is_ios

    @property
    def is_active(self) -> bool:
        return self.driver is not None

    def build_options(self):
        """Appium options for the configured platform."""
        capabilities = build_capabilities(self.config)
        options = UiAutomator2Options() if self.config.is_android else XCUITestOptions()
        options.load_capabilities(capabilities)
        return options

    def start(self) -> bool:
        """Create a new Appium session for the configured device."""
        if self.driver:
            logger.info("Driver already exists, cleaning up before re-initialization")
            self.cleanup()

        server_url = self.config.appium.server_url
        options = self.build_options()
        logger.info(f"Initializing {self.config.platform_name} driver on {self.config.device.device_name}")

        try:
            logger.debug(f"Connecting to Appium server at {server_url}")
            logger.debug(f"Using options: {options.to_capabilities()}")
            self.driver = webdriver.Remote(command_executor=server_url, options=options)

            self.driver.implicitly_wait(self.config.run.implicit_wait_ms / 1000)
            self.driver.set_script_timeout(self.config.run.default_timeout_ms / 1000)
            logger.info(f"Successfully initialized {self.config.platform_name} driver")
            return True
        except Exception as e:
            logger.error(f"Failed to initialize {self.config.platform_name} driver: {str(e)}")
            logger.debug(f"Stack trace: {traceback.format_exc()}")
            self.driver = None
            return False

    def cleanup(self):
        """Clean up the driver instance."""
        if self.driver:
            logger.info("Cleaning up driver instance")
            try:
                self.driver.quit()
            except Exception as e:
                logger.warning(f"Error during driver cleanup: {str(e)}")
            finally:
                self.driver = None

    quit = cleanup

    def _session(self):
        if not self.driver:
            raise DriverNotStartedError("No active Appium session")
        return self.driver

    # Steps

    def _run_step(self, name: str, action: Callable[[], Any], capture: bool = True,
                  retries: Optional[int] = None) -> Any:
        """Run one driver interaction as a reported, retried step."""
        if retries is None:
            retries = 0 if name.startswith(RETRY_IGNORED_PREFIXES) else self.config.run.step_retries

        with allure.step(name):
            attempt = 0
            while True:
                try:
                    result = action()
                    break
                except (MobileAutomationError, AssertionError) as e:
                    self.tracer.log_step(name, StepStatus.FAILED, {"error": str(e)})
                    raise
                except WebDriverException as e:
                    if attempt >= retries:
                        self.tracer.log_step(name, StepStatus.FAILED, {"error": str(e), "attempts": attempt + 1})
                        raise
                    attempt += 1
                    logger.warning(f"Step '{name}' failed, retry {attempt}/{retries}: {str(e).strip()}")
                    time.sleep(STEP_RETRY_DELAY)

            number = self.tracer.log_step(name, StepStatus.PASSED, {"attempts": attempt + 1})
            if capture and self.config.run.step_screenshots:
                self._capture_step(number, name)
            return result

    def _capture_step(self, number: int, name: str) -> Optional[Path]:
        path = self.config.step_screenshots_path / f"step_{number}_{sanitize_file_name(name)}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            self._session().get_screenshot_as_file(str(path))
            attach_screenshot(path, f"Step {number}: {name}")
            return path
        except (WebDriverException, OSError) as e:
            logger.warning(f"Could not capture screenshot for step {number}: {str(e)}")
            return None

    # Element lookup

    def find_elements(self, locator) -> List[Any]:
        loc = to_locator(locator)
        elements = self._session().find_elements(*loc.as_tuple())
        if loc.index is not None:
            return elements[loc.index:loc.index + 1]
        return elements

    def find_element(self, locator):
        loc = to_locator(locator)
        elements = self.find_elements(loc)
        if not elements:
            raise ElementNotFoundError(loc)
        return elements[0]

    def _visible_elements(self, loc: Locator) -> List[Any]:
        visible = []
        for element in self.find_elements(loc):
            try:
                if element.is_displayed():
                    visible.append(element)
            except StaleElementReferenceException:
                continue
        return visible

    def _wait(self, condition: Callable[[Any], Any], timeout: float, loc, state: str):
        try:
            return WebDriverWait(self._session(), timeout, poll_frequency=POLL_FREQUENCY).until(condition)
        except TimeoutException:
            raise ElementNotFoundError(loc, f"Element {loc} was not {state} after {timeout} sec")

    # Waits

    def wait_for_element(self, locator, timeout: float = DEFAULT_WAIT):
        """Wait until at least one matching element is present."""
        loc = to_locator(locator)
        return self._run_step(
            f"wait_for_element {loc}",
            lambda: self._wait(lambda _: self.find_elements(loc) or False, timeout, loc, "present"),
            capture=False,
        )

    def wait_for_visible(self, locator, timeout: float = DEFAULT_WAIT):
        """Wait until at least one matching element is displayed."""
        loc = to_locator(locator)
        return self._run_step(
            f"wait_for_visible {loc}",
            lambda: self._wait(lambda _: self._visible_elements(loc) or False, timeout, loc, "visible"),
            capture=False,
        )

    def wait_for_invisible(self, locator, timeout: float = DEFAULT_WAIT) -> bool:
        """Wait until no matching element is displayed."""
        loc = to_locator(locator)
        return self._run_step(
            f"wait_for_invisible {loc}",
            lambda: self._wait(lambda _: not self._visible_elements(loc), timeout, loc, "hidden"),
            capture=False,
        )

    def wait_for_text(self, text: str, timeout: float = DEFAULT_WAIT) -> bool:
        """Wait until the text appears anywhere on screen."""
        def text_on_screen(driver):
            return text in (driver.page_source or "")

        def action():
            try:
                return WebDriverWait(self._session(), timeout, poll_frequency=POLL_FREQUENCY).until(text_on_screen)
            except TimeoutException:
                raise ElementNotFoundError(text, f'Text "{text}" did not appear after {timeout} sec')

        return self._run_step(f'wait_for_text "{text}"', action, capture=False)

    def wait(self, seconds: float) -> None:
        self._run_step(f"wait {seconds}", lambda: time.sleep(seconds), capture=False)

    # Actions

    def tap(self, locator) -> None:
        loc = to_locator(locator)
        self._run_step(f"tap {loc}", lambda: self.find_element(loc).click())

    def fill_field(self, locator, value: str) -> None:
        loc = to_locator(locator)

        def action():
            element = self.find_element(loc)
            element.clear()
            element.send_keys(value)

        self._run_step(f'fill_field {loc} "{value}"', action)

    def append_field(self, locator, value: str) -> None:
        loc = to_locator(locator)
        self._run_step(f'append_field {loc} "{value}"', lambda: self.find_element(loc).send_keys(value))

    def clear_field(self, locator) -> None:
        loc = to_locator(locator)
        self._run_step(f"clear_field {loc}", lambda: self.find_element(loc).clear())

    def hide_keyboard(self) -> None:
        """Hide the soft keyboard. Raises WebDriverException when none is shown."""
        self._run_step("hide_keyboard", lambda: self._session().hide_keyboard(), capture=False, retries=0)

    def is_keyboard_shown(self) -> bool:
        return bool(self._session().is_keyboard_shown())

    # Queries

    def grab_text(self, locator) -> str:
        loc = to_locator(locator)
        return self._run_step(f"grab_text {loc}", lambda: self.find_element(loc).text, capture=False)

    def grab_attribute(self, locator, attribute: str) -> Optional[str]:
        loc = to_locator(locator)
        return self._run_step(
            f"grab_attribute {loc} {attribute}",
            lambda: self.find_element(loc).get_attribute(attribute),
            capture=False,
        )

    def count_visible(self, locator) -> int:
        loc = to_locator(locator)
        return self._run_step(
            f"grab_number_of_visible_elements {loc}",
            lambda: len(self._visible_elements(loc)),
            capture=False,
        )

    def element_rect(self, locator) -> Dict[str, int]:
        return self.find_element(locator).rect

    def see(self, text: str) -> None:
        def action():
            if text not in self.page_source():
                raise AssertionError(f'Text "{text}" is not visible on screen')

        self._run_step(f'see "{text}"', action, capture=False)

    def dont_see(self, text: str) -> None:
        def action():
            if text in self.page_source():
                raise AssertionError(f'Text "{text}" is visible on screen but should not be')

        self._run_step(f'dont_see "{text}"', action, capture=False)

    def page_source(self) -> str:
        return self._session().page_source or ""

    def window_size(self) -> Dict[str, int]:
        return self._session().get_window_size()

    def save_screenshot(self, name: str) -> Path:
        """Save a screenshot under output/screenshots and attach it to the report."""
        file_name = name if name.endswith(".png") else f"{name}.png"
        path = self.config.screenshots_path / file_name

        def action():
            path.parent.mkdir(parents=True, exist_ok=True)
            self._session().get_screenshot_as_file(str(path))
            attach_screenshot(path, file_name)
            logger.info(f"Screenshot saved to {path}")
            return path

        return self._run_step(f"save_screenshot {file_name}", action, capture=False)

    def execute_script(self, command: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """Run a `mobile:` extension or any script command."""
        params = [] if args is None else [args]
        return self._run_step(
            f"execute_script {command}",
            lambda: self._session().execute_script(command, *params),
            capture=False,
        )

    # App lifecycle

    def _app_args(self, **extra) -> Dict[str, Any]:
        args = {self.config.app_id_key: self.config.app_id}
        args.update(extra)
        return args

    def is_app_installed(self) -> bool:
        return bool(self.execute_script("mobile: isAppInstalled", self._app_args()))

    def remove_app(self) -> bool:
        logger.info(f"Removing app {self.config.app_id}")
        return bool(self.execute_script("mobile: removeApp", self._app_args()))

    def install_app(self, app_path: Optional[str] = None) -> None:
        app_path = app_path or self.config.device.app
        if not app_path:
            raise ValueError("No app path configured for installation")
        local = Path(app_path)
        if local.exists():
            app_path = str(local.resolve())
        logger.info(f"Installing app from {app_path}")
        self.execute_script("mobile: installApp", {"appPath": app_path})

    def activate_app(self) -> None:
        self.execute_script("mobile: activateApp", self._app_args())

    def terminate_app(self) -> bool:
        return bool(self.execute_script("mobile: terminateApp", self._app_args()))

    def query_app_state(self) -> AppState:
        return AppState(int(self.execute_script("mobile: queryAppState", self._app_args())))

    def restart_app(self, pause: float = 2) -> None:
        """Terminate and relaunch the app under test."""
        self.terminate_app()
        time.sleep(pause)
        self.activate_app()

    def send_to_background(self) -> None:
        """Press the home button so the app moves to the background."""
        if self.is_android:
            self.execute_script("mobile: pressKey", {"keycode": 3})
        else:
            self.execute_script("mobile: pressButton", {"name": "home"})

    def set_connectivity(self, wifi: Optional[bool] = None, data: Optional[bool] = None,
                         airplane_mode: Optional[bool] = None) -> bool:
        """Toggle Android network state. Needs Appium started with --relaxed-security."""
        if not self.is_android:
            logger.warning("Connectivity changes are only supported on Android")
            return False
        args = {name: value for name, value in
                (("wifi", wifi), ("data", data), ("airplaneMode", airplane_mode)) if value is not None}
        self.execute_script("mobile: setConnectivity", args)
        return True

    @property
    def orientation(self) -> Orientation:
        return Orientation(str(self._session().orientation).upper())

    def set_orientation(self, orientation) -> None:
        value = Orientation(orientation.upper() if isinstance(orientation, str) else orientation)

        def action():
            self._session().orientation = value.value

        self._run_step(f"set_orientation {value.value}", action)


atexit.register(MobileDriver._cleanup_all)
