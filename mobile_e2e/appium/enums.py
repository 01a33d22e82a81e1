from enum import Enum, IntEnum

class Platform(str, Enum):
    """Target platforms."""
    ANDROID = "android"
    IOS = "ios"

class DeviceType(str, Enum):
    """Kinds of device a run can target."""
    EMULATOR = "emulator"
    SIMULATOR = "simulator"
    REAL = "real"

    @property
    def is_virtual(self) -> bool:
        return self in (DeviceType.EMULATOR, DeviceType.SIMULATOR)

class SwipeDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

class Orientation(str, Enum):
    PORTRAIT = "PORTRAIT"
    LANDSCAPE = "LANDSCAPE"


class AppState(IntEnum):
    """Values returned by mobile: queryAppState."""
    NOT_INSTALLED = 0
    NOT_RUNNING = 1
    RUNNING_IN_BACKGROUND_SUSPENDED = 2
    RUNNING_IN_BACKGROUND = 3
    RUNNING_IN_FOREGROUND = 4


class StepStatus(str, Enum):
    """Outcome of a recorded driver step."""
    PASSED = "passed"
    FAILED = "failed"
