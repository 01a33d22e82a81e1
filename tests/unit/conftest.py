import pytest
from selenium.common.exceptions import NoSuchElementException, WebDriverException

from mobile_e2e.appium import driver as driver_module
from mobile_e2e.appium.driver import MobileDriver
from mobile_e2e.appium.gestures import Gestures
from mobile_e2e.config import Config, RunSettings, get_device_config


class FakeElement:
    """Stands in for an Appium WebElement."""

    def __init__(self, text="", displayed=True, enabled=True, rect=None, attributes=None):
        self.text = text
        self.displayed = displayed
        self.enabled = enabled
        self.rect = rect or {"x": 10, "y": 20, "width": 100, "height": 40}
        self.attributes = attributes or {}
        self.clicks = 0
        self.typed = []
        self.on_click = None

    def is_displayed(self):
        return self.displayed

    def is_enabled(self):
        return self.enabled

    def click(self):
        self.clicks += 1
        if self.on_click:
            self.on_click()

    def clear(self):
        self.text = ""

    def send_keys(self, value):
        self.typed.append(value)
        self.text += value

    def get_attribute(self, name):
        return self.attributes.get(name)


class FakeWebDriver:
    """Records the commands a MobileDriver sends to Appium."""

    def __init__(self):
        self.elements = {}
        self.page_source = "<hierarchy/>"
        self.scripts = []
        self.script_results = {}
        self.screenshots = []
        self.swipes = []
        self.taps = []
        self.w3c_actions = []
        self.orientation = "PORTRAIT"
        self.keyboard_shown = False
        self.back_presses = 0
        self.quit_called = False
        self.implicit_wait = None
        self.script_timeout = None
        self.network_connection = 6

    def add(self, by, value, *elements):
        self.elements.setdefault((by, value), []).extend(elements)
        return elements[0] if len(elements) == 1 else elements

    def find_elements(self, by, value):
        return list(self.elements.get((by, value), []))

    def find_element(self, by, value):
        found = self.find_elements(by, value)
        if not found:
            raise NoSuchElementException(f"{by}={value}")
        return found[0]

    def execute_script(self, command, *args):
        self.scripts.append((command, args[0] if args else None))
        result = self.script_results.get(command)
        if isinstance(result, Exception):
            raise result
        return result

    def execute(self, command, params=None):
        self.w3c_actions.append(params)
        return {"value": None}

    def get_screenshot_as_file(self, path):
        with open(path, "wb") as f:
            f.write(b"\x89PNG")
        self.screenshots.append(path)
        return True

    def get_window_size(self):
        return {"width": 1000, "height": 2000}

    def swipe(self, start_x, start_y, end_x, end_y, duration=0):
        self.swipes.append((start_x, start_y, end_x, end_y, duration))

    def tap(self, positions, duration=None):
        self.taps.append((positions, duration))

    def hide_keyboard(self):
        if not self.keyboard_shown:
            raise WebDriverException("Soft keyboard not present, cannot hide keyboard")
        self.keyboard_shown = False

    def is_keyboard_shown(self):
        return self.keyboard_shown

    def set_network_connection(self, value):
        self.network_connection = value

    def back(self):
        self.back_presses += 1

    def implicitly_wait(self, seconds):
        self.implicit_wait = seconds

    def set_script_timeout(self, seconds):
        self.script_timeout = seconds

    def quit(self):
        self.quit_called = True


@pytest.fixture
def config(tmp_path):
    return Config(
        output_dir=str(tmp_path / "output"),
        run=RunSettings(step_screenshots=False, step_retries=2),
        open_allure_report=False,
    )


@pytest.fixture
def ios_config(tmp_path):
    return Config(
        platform="ios",
        device_type="simulator",
        device=get_device_config("ios", "simulator", {}),
        output_dir=str(tmp_path / "output"),
        run=RunSettings(step_screenshots=False, step_retries=2),
        open_allure_report=False,
    )


@pytest.fixture
def fake_driver():
    return FakeWebDriver()


@pytest.fixture
def make_element():
    return FakeElement


@pytest.fixture(autouse=True)
def no_retry_delay(monkeypatch):
    monkeypatch.setattr(driver_module, "STEP_RETRY_DELAY", 0)


@pytest.fixture
def mobile(config, fake_driver):
    mobile = MobileDriver(config)
    mobile.driver = fake_driver
    yield mobile
    mobile.driver = None


@pytest.fixture
def ios_mobile(ios_config, fake_driver):
    mobile = MobileDriver(ios_config)
    mobile.driver = fake_driver
    yield mobile
    mobile.driver = None


@pytest.fixture
def gestures(mobile):
    return Gestures(mobile)
