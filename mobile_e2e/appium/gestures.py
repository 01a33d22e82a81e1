"""Touch gestures and device-level helpers on top of MobileDriver."""

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional

from appium.webdriver.connectiontype import ConnectionType
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.actions import interaction
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.actions.mouse_button import MouseButton
from selenium.webdriver.common.actions.pointer_input import PointerInput
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from .driver import MobileDriver, DEFAULT_WAIT
from .enums import Orientation, SwipeDirection
from .exceptions import ElementNotFoundError
from .locators import to_locator

logger = logging.getLogger(__name__)

SWIPE_DURATION_MS = 800
SCROLL_DISTANCE = 0.3
SCROLL_PAUSE = 0.5

# start_x, start_y, dx, dy: the end point is start + (dx, dy) * percentage
_SWIPE_ORIGINS = {
    SwipeDirection.UP: (0.5, 0.7, 0, -1),
    SwipeDirection.DOWN: (0.5, 0.3, 0, 1),
    SwipeDirection.LEFT: (0.8, 0.5, -1, 0),
    SwipeDirection.RIGHT: (0.2, 0.5, 1, 0),
}


class Gestures:
    def __init__(self, mobile: MobileDriver):
        self.mobile = mobile

    @property
    def driver(self):
        return self.mobile._session()

    def swipe(self, start_x: float, start_y: float, end_x: float, end_y: float,
              duration: int = SWIPE_DURATION_MS) -> None:
        """Swipe between two points given as fractions of the window size."""
        size = self.mobile.window_size()
        width, height = size['width'], size['height']
        points = (int(width * start_x), int(height * start_y), int(width * end_x), int(height * end_y))
        self.mobile._run_step(
            f"swipe ({start_x}, {start_y}) -> ({end_x}, {end_y})",
            lambda: self.driver.swipe(*points, duration),
            capture=False,
        )

    def swipe_direction(self, direction: SwipeDirection, percentage: float = 0.5) -> None:
        start_x, start_y, dx, dy = _SWIPE_ORIGINS[SwipeDirection(direction)]
        self.swipe(start_x, start_y,
                   round(start_x + dx * percentage, 4), round(start_y + dy * percentage, 4))

    def swipe_up(self, percentage: float = 0.5) -> None:
        self.swipe_direction(SwipeDirection.UP, percentage)

    def swipe_down(self, percentage: float = 0.5) -> None:
        self.swipe_direction(SwipeDirection.DOWN, percentage)

    def swipe_left(self, percentage: float = 0.5) -> None:
        self.swipe_direction(SwipeDirection.LEFT, percentage)

    def swipe_right(self, percentage: float = 0.5) -> None:
        self.swipe_direction(SwipeDirection.RIGHT, percentage)

    def scroll_to_element(self, locator, max_swipes: int = 10,
                          direction: SwipeDirection = SwipeDirection.UP) -> bool:
        """Swipe until the element is visible."""
        loc = to_locator(locator)
        for _ in range(max_swipes):
            if self.mobile.count_visible(loc) > 0:
                return True
            self.swipe_direction(direction, SCROLL_DISTANCE)
            time.sleep(SCROLL_PAUSE)
        raise ElementNotFoundError(loc, f"Element {loc} not found after {max_swipes} swipes")

    def _element_center(self, locator):
        rect = self.mobile.element_rect(locator)
        return int(rect['x'] + rect['width'] / 2), int(rect['y'] + rect['height'] / 2)

    def long_press(self, locator, duration: int = 2000) -> None:
        loc = to_locator(locator)
        x, y = self._element_center(loc)
        self.mobile._run_step(f"long_press {loc}", lambda: self.driver.tap([(x, y)], duration))

    def double_tap(self, locator) -> None:
        loc = to_locator(locator)
        x, y = self._element_center(loc)

        def action():
            self.driver.tap([(x, y)])
            time.sleep(0.1)
            self.driver.tap([(x, y)])

        self.mobile._run_step(f"double_tap {loc}", action)

    def _two_finger_gesture(self, name: str, starts, ends, duration: int = 500) -> None:
        def action():
            actions = ActionBuilder(self.driver)
            for index, ((sx, sy), (ex, ey)) in enumerate(zip(starts, ends), start=1):
                finger = actions.add_pointer_input(interaction.POINTER_TOUCH, f"finger{index}")
                finger.create_pointer_move(duration=0, x=sx, y=sy)
                finger.create_pointer_down(button=MouseButton.LEFT)
                finger.create_pointer_move(duration=duration, x=ex, y=ey)
                finger.create_pointer_up(button=MouseButton.LEFT)
            actions.perform()

        self.mobile._run_step(name, action)

    def pinch(self, scale: float = 0.5, distance: int = 100) -> None:
        """Two fingers move from the sides towards the centre."""
        size = self.mobile.window_size()
        cx, cy = size['width'] // 2, size['height'] // 2
        inner = int(distance * scale)
        self._two_finger_gesture(
            f"pinch {scale}",
            [(cx - distance, cy), (cx + distance, cy)],
            [(cx - inner, cy), (cx + inner, cy)],
        )

    def zoom(self, scale: float = 2, distance: int = 50) -> None:
        """Two fingers move from the centre outwards."""
        size = self.mobile.window_size()
        cx, cy = size['width'] // 2, size['height'] // 2
        outer = int(distance * scale)
        self._two_finger_gesture(
            f"zoom {scale}",
            [(cx - distance, cy), (cx + distance, cy)],
            [(cx - outer, cy), (cx + outer, cy)],
        )

    def tap_point(self, x: int, y: int) -> None:
        self.mobile._run_step(f"tap_point ({x}, {y})", lambda: self.driver.tap([(x, y)]))

    def drag(self, start_x: int, start_y: int, end_x: int, end_y: int, duration: int = 500) -> None:
        """Press, move and release with a single finger in absolute coordinates."""
        def action():
            actions = ActionBuilder(self.driver, mouse=PointerInput(interaction.POINTER_TOUCH, "finger"))
            actions.pointer_action.move_to_location(start_x, start_y)
            actions.pointer_action.pointer_down()
            actions.pointer_action.pause(0.1)
            actions.pointer_action.move_to_location(end_x, end_y)
            actions.pointer_action.release()
            actions.perform()

        self.mobile._run_step(f"drag ({start_x}, {start_y}) -> ({end_x}, {end_y})", action, capture=False)

    # Keyboard and orientation

    def hide_keyboard(self) -> None:
        try:
            self.mobile.hide_keyboard()
        except WebDriverException:
            logger.debug("Keyboard not shown or already hidden")

    def get_orientation(self) -> Orientation:
        return self.mobile.orientation

    def set_orientation(self, orientation) -> None:
        self.mobile.set_orientation(orientation)

    # Network

    def toggle_airplane_mode(self) -> None:
        current = int(self.driver.network_connection)
        self.driver.set_network_connection(current ^ ConnectionType.AIRPLANE_MODE)

    def toggle_wifi(self) -> None:
        self.driver.toggle_wifi()

    def toggle_location_services(self) -> None:
        self.driver.toggle_location_services()

    # Files and device commands

    def pull_file(self, remote_path: str) -> str:
        """Base64 encoded file content from the device."""
        return self.driver.pull_file(remote_path)

    def push_file(self, remote_path: str, local_path: str) -> None:
        self.driver.push_file(remote_path, source_path=str(Path(local_path)))

    def execute_mobile_command(self, command: str, args: Optional[Dict[str, Any]] = None) -> Any:
        if not command.startswith("mobile:"):
            command = f"mobile: {command}"
        return self.mobile.execute_script(command, args or {})

    def get_current_activity(self) -> str:
        return self.driver.current_activity

    def get_current_package(self) -> str:
        return self.driver.current_package

    def start_activity(self, app_package: str, app_activity: str) -> None:
        self.mobile.execute_script("mobile: startActivity", {"intent": f"{app_package}/{app_activity}"})

    def shake(self) -> None:
        self.driver.shake()

    def lock_device(self, seconds: int = 0) -> None:
        if seconds:
            self.driver.lock(seconds)
        else:
            self.driver.lock()

    def unlock_device(self) -> None:
        self.driver.unlock()

    def is_device_locked(self) -> bool:
        return bool(self.driver.is_locked())

    def press_back(self) -> None:
        self.mobile._run_step("press_back", lambda: self.driver.back())

    def press_home(self) -> None:
        self.mobile.send_to_background()

    # Element helpers

    def take_screenshot(self, name: str) -> Path:
        return self.mobile.save_screenshot(name)

    def wait_for_element_clickable(self, locator, timeout: float = DEFAULT_WAIT):
        loc = to_locator(locator)

        def action():
            try:
                return WebDriverWait(self.driver, timeout).until(EC.element_to_be_clickable(loc.as_tuple()))
            except TimeoutException:
                raise ElementNotFoundError(loc, f"Element {loc} was not clickable after {timeout} sec")

        return self.mobile._run_step(f"wait_for_clickable {loc}", action, capture=False)

    def get_element_text(self, locator) -> str:
        return self.mobile.grab_text(locator)

    def is_element_displayed(self, locator) -> bool:
        try:
            return self.mobile.count_visible(locator) > 0
        except WebDriverException:
            return False
