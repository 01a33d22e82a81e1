from pydantic import BaseModel, Field, ValidationInfo, field_validator
from typing import Optional, Dict, Any, Mapping
from pathlib import Path
import os
import logging
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ANDROID_APP_PACKAGE = "com.saucelabs.mydemoapp.android"
ANDROID_APP_ACTIVITY = "com.saucelabs.mydemoapp.android.view.activities.SplashActivity"
ANDROID_APP_PATH = "./apps/android/mda-2.2.0-25.apk"
IOS_BUNDLE_ID = "com.saucelabs.mydemo.app.ios"

# Android and iOS default to different ports so both platforms can run side by side
DEFAULT_ANDROID_PORT = 4723
DEFAULT_IOS_PORT = 4724

SUPPORTED_PLATFORMS = ("android", "ios")
SUPPORTED_DEVICE_TYPES = ("emulator", "simulator", "real")


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("true", "1", "yes")


class AppiumConfig(BaseModel):
    """Appium server connection settings."""
    host: str = Field("127.0.0.1", description="Appium server host")
    port: int = Field(DEFAULT_ANDROID_PORT, description="Appium server port")
    path: str = Field("/wd/hub", description="Appium server base path")

    @field_validator('port')
    def port_must_be_valid(cls, v):
        if not (1024 <= v <= 65535):
            logger.warning(f"Invalid port: {v}, using default {DEFAULT_ANDROID_PORT}")
            return DEFAULT_ANDROID_PORT
        return v

    @field_validator('path')
    def path_must_be_absolute(cls, v):
        if not v:
            return "/"
        return v if v.startswith("/") else f"/{v}"

    @property
    def server_url(self) -> str:
        base = self.path.rstrip("/")
        return f"http://{self.host}:{self.port}{base}"


class DeviceConfig(BaseModel):
    """Target device and application under test."""
    device_name: str = Field(..., description="Device or AVD name")
    platform_version: str = Field(..., description="OS version on the device")
    automation_name: str = Field(..., description="Appium automation driver")
    udid: Optional[str] = Field(None, description="Real device UDID")
    app: Optional[str] = Field(None, description="Path to the app binary")
    app_package: Optional[str] = Field(None, description="Android application package")
    app_activity: Optional[str] = Field(None, description="Android launch activity")
    bundle_id: Optional[str] = Field(None, description="iOS bundle identifier")
    no_reset: bool = Field(False, description="Keep app state between sessions")
    full_reset: bool = Field(False, description="Uninstall the app between sessions")
    new_command_timeout: int = Field(300, description="Seconds Appium waits for a new command")

    @field_validator('udid')
    def blank_udid_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class RunSettings(BaseModel):
    """Timeouts and reporting switches for a test run."""
    implicit_wait_ms: int = Field(10000, description="Implicit element wait in milliseconds")
    default_timeout_ms: int = Field(30000, description="Script timeout in milliseconds")
    screenshot_on_failure: bool = Field(False, description="Save a screenshot when a test fails")
    step_screenshots: bool = Field(True, description="Capture a screenshot after every passed step")
    step_retries: int = Field(3, description="Retries for a failed driver step")

    @field_validator('implicit_wait_ms', 'default_timeout_ms')
    def timeout_must_be_positive(cls, v, info: ValidationInfo):
        if v <= 0:
            default = 10000 if info.field_name == 'implicit_wait_ms' else 30000
            logger.warning(f"{info.field_name} must be positive, using default {default}")
            return default
        return v

    @field_validator('step_retries')
    def retries_not_negative(cls, v):
        if v < 0:
            logger.warning("step_retries cannot be negative, using 0")
            return 0
        return v


def get_platform_name(platform: str) -> str:
    """Appium platformName for a PLATFORM value."""
    return "iOS" if (platform or "").lower() == "ios" else "Android"


def resolve_appium_port(env: Optional[Mapping[str, str]] = None) -> int:
    """Explicit APPIUM_PORT wins, otherwise the platform default."""
    env = os.environ if env is None else env
    explicit = env.get("APPIUM_PORT")
    if explicit:
        return int(explicit)
    if (env.get("PLATFORM") or "").lower() == "ios":
        return DEFAULT_IOS_PORT
    return DEFAULT_ANDROID_PORT


def _android_emulator(env: Mapping[str, str]) -> DeviceConfig:
    return DeviceConfig(
        device_name=env.get("ANDROID_EMU_DEVICE_NAME", "Medium_Phone_API_36.0"),
        platform_version=env.get("ANDROID_EMU_PLATFORM_VERSION", "16.0"),
        automation_name="UiAutomator2",
        app=env.get("ANDROID_EMU_APP_PATH", ANDROID_APP_PATH),
        app_package=env.get("ANDROID_EMU_APP_PACKAGE", ANDROID_APP_PACKAGE),
        app_activity=env.get("ANDROID_EMU_APP_ACTIVITY", ANDROID_APP_ACTIVITY),
        no_reset=False,
        full_reset=False,
    )


def _android_real(env: Mapping[str, str]) -> DeviceConfig:
    return DeviceConfig(
        device_name=env.get("ANDROID_REAL_DEVICE_NAME", "Android Device"),
        platform_version=env.get("ANDROID_REAL_PLATFORM_VERSION", "13.0"),
        automation_name="UiAutomator2",
        udid=env.get("ANDROID_REAL_UDID"),
        app=env.get("ANDROID_REAL_APP_PATH", ANDROID_APP_PATH),
        app_package=env.get("ANDROID_REAL_APP_PACKAGE", ANDROID_APP_PACKAGE),
        app_activity=env.get("ANDROID_REAL_APP_ACTIVITY", ANDROID_APP_ACTIVITY),
        no_reset=True,
    )


def _ios_simulator(env: Mapping[str, str]) -> DeviceConfig:
    return DeviceConfig(
        device_name=env.get("IOS_SIM_DEVICE_NAME", "iPhone 15 Pro"),
        platform_version=env.get("IOS_SIM_PLATFORM_VERSION", "17.2"),
        automation_name="XCUITest",
        app=env.get("IOS_SIM_APP_PATH", "./apps/ios/SauceLabs-Demo-App.app"),
        bundle_id=env.get("IOS_SIM_BUNDLE_ID", IOS_BUNDLE_ID),
        no_reset=False,
    )


def _ios_real(env: Mapping[str, str]) -> DeviceConfig:
    return DeviceConfig(
        device_name=env.get("IOS_REAL_DEVICE_NAME", "iPhone"),
        platform_version=env.get("IOS_REAL_PLATFORM_VERSION", "17.0"),
        automation_name="XCUITest",
        udid=env.get("IOS_REAL_UDID"),
        app=env.get("IOS_REAL_APP_PATH", "./apps/ios/SauceLabs-Demo-App.ipa"),
        bundle_id=env.get("IOS_REAL_BUNDLE_ID", IOS_BUNDLE_ID),
        no_reset=True,
    )


DEVICE_CONFIGS = {
    "android_emulator": _android_emulator,
    "android_real": _android_real,
    "ios_simulator": _ios_simulator,
    "ios_real": _ios_real,
}


def get_device_config(platform: str, device_type: str,
                      env: Optional[Mapping[str, str]] = None) -> DeviceConfig:
    """Device configuration for a platform/device type pair, Android emulator when unknown."""
    env = os.environ if env is None else env
    key = f"{platform}_{device_type}".lower()
    factory = DEVICE_CONFIGS.get(key)
    if factory is None:
        logger.warning(f"No device configuration for '{key}', falling back to android_emulator")
        factory = _android_emulator
    return factory(env)


class Config(BaseModel):
    """Global configuration."""
    platform: str = Field("android", description="Target platform: android or ios")
    device_type: str = Field("emulator", description="emulator, simulator or real")
    auto_manage_appium: bool = Field(True, description="Start and stop Appium around the run")
    appium: AppiumConfig = Field(default_factory=AppiumConfig, description="Appium configuration")
    device: DeviceConfig = Field(
        default_factory=lambda: get_device_config("android", "emulator", {}),
        description="Device configuration",
    )
    run: RunSettings = Field(default_factory=RunSettings, description="Run settings")
    output_dir: str = Field("output", description="Root directory for run artifacts")
    allure_results_dir: str = Field("allure-results", description="Allure results directory under output_dir")
    open_allure_report: bool = Field(True, description="Open the generated Allure report after the run")

    @field_validator('platform')
    def platform_must_be_supported(cls, v):
        value = (v or "").lower()
        if value not in SUPPORTED_PLATFORMS:
            logger.warning(f"Unsupported platform: {v}, using android")
            return "android"
        return value

    @field_validator('device_type')
    def device_type_must_be_supported(cls, v):
        value = (v or "").lower()
        if value not in SUPPORTED_DEVICE_TYPES:
            logger.warning(f"Unsupported device type: {v}, using emulator")
            return "emulator"
        return value

    @field_validator('output_dir')
    def output_dir_not_empty(cls, v):
        if not v:
            logger.warning("Empty output_dir, using default")
            return "output"
        return v

    @property
    def platform_name(self) -> str:
        return get_platform_name(self.platform)

    @property
    def is_android(self) -> bool:
        return self.platform == "android"

    @property
    def is_ios(self) -> bool:
        return self.platform == "ios"

    @property
    def app_id(self) -> Optional[str]:
        """Package name on Android, bundle id on iOS."""
        return self.device.app_package if self.is_android else self.device.bundle_id

    @property
    def app_id_key(self) -> str:
        """Argument name used by the mobile: app management commands."""
        return "appId" if self.is_android else "bundleId"

    @property
    def output_path(self) -> Path:
        return Path(self.output_dir)

    @property
    def allure_results_path(self) -> Path:
        return self.output_path / self.allure_results_dir

    @property
    def allure_report_path(self) -> Path:
        return self.output_path / "allure-report"

    @property
    def screenshots_path(self) -> Path:
        return self.output_path / "screenshots"

    @property
    def step_screenshots_path(self) -> Path:
        return self.output_path / "step-screenshots"

    @property
    def traces_path(self) -> Path:
        return self.output_path / "traces"

    @property
    def logs_path(self) -> Path:
        return self.output_path / "logs"


def build_capabilities(config: Config) -> Dict[str, Any]:
    """W3C capabilities for the configured platform and device."""
    device = config.device
    capabilities: Dict[str, Any] = {
        "platformName": config.platform_name,
        "appium:deviceName": device.device_name,
        "appium:platformVersion": device.platform_version,
        "appium:automationName": device.automation_name,
        "appium:noReset": device.no_reset,
        "appium:newCommandTimeout": device.new_command_timeout,
    }
    if device.udid:
        capabilities["appium:udid"] = device.udid

    if config.is_android:
        capabilities.update({
            "appium:app": device.app,
            "appium:appPackage": device.app_package,
            "appium:appActivity": device.app_activity,
            "appium:autoGrantPermissions": True,
            "appium:ignoreHiddenApiPolicyError": True,
        })
        if device.full_reset:
            capabilities["appium:fullReset"] = True
    else:
        capabilities.update({
            "appium:bundleId": device.bundle_id,
            "appium:showXcodeLog": True,
            "appium:wdaLaunchTimeout": 120000,
            "appium:useNewWDA": False,
        })
        # An empty path means the app is already installed on the device
        if device.app and device.app.strip():
            capabilities["appium:app"] = device.app
    return capabilities


def load_config(env: Optional[Mapping[str, str]] = None) -> Config:
    """Load configuration from environment variables and defaults."""
    try:
        logger.info("Loading configuration")
        if env is None:
            load_dotenv()
            env = os.environ

        platform = (env.get("PLATFORM") or "android").lower()
        default_device_type = "simulator" if platform == "ios" else "emulator"
        device_type = (env.get("DEVICE_TYPE") or default_device_type).lower()

        config = Config(
            platform=platform,
            device_type=device_type,
            auto_manage_appium=env.get("AUTO_APPIUM", "").lower() != "false",
            appium=AppiumConfig(
                host=env.get("APPIUM_HOST") or "127.0.0.1",
                port=resolve_appium_port(env),
                path=env.get("APPIUM_PATH") or "/wd/hub",
            ),
            device=get_device_config(platform, device_type, env),
            run=RunSettings(
                implicit_wait_ms=int(env.get("IMPLICIT_WAIT", "10000")),
                default_timeout_ms=int(env.get("DEFAULT_TIMEOUT", "30000")),
                screenshot_on_failure=env.get("SCREENSHOT_ON_FAILURE", "").lower() == "true",
                step_screenshots=_env_flag(env, "STEP_SCREENSHOTS", True),
                step_retries=int(env.get("STEP_RETRIES", "3")),
            ),
            output_dir=env.get("OUTPUT_DIR") or "output",
            allure_results_dir=env.get("ALLURE_RESULTS_DIR") or "allure-results",
            open_allure_report=_env_flag(env, "OPEN_ALLURE_REPORT", True),
        )

        logger.info(f"Configuration loaded successfully: {config.model_dump()}")
        return config
    except Exception as e:
        logger.error(f"Error loading configuration: {str(e)}")
        logger.info("Using default configuration")
        return Config()
