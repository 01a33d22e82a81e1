#!/usr/bin/env python3

import logging
import time
import traceback
from pathlib import Path
from typing import Optional, Sequence

from mobile_e2e.appium.devices import DeviceManager
from mobile_e2e.appium.server import AppiumServer
from mobile_e2e.config import Config, DEFAULT_ANDROID_PORT, DEFAULT_IOS_PORT
from mobile_e2e.reporting import allure_helper
from mobile_e2e.ui.console import (
    print_appium_status,
    print_banner,
    print_section,
    print_status,
    print_warning,
)

logger = logging.getLogger(__name__)

APPIUM_SETTLE_SECONDS = 2


def find_latest_report(reports_dir: Path, suffixes: Sequence[str] = (".html", ".xml")) -> Optional[Path]:
    """Most recently modified report file in a directory."""
    reports_dir = Path(reports_dir)
    if not reports_dir.is_dir():
        return None
    candidates = [p for p in reports_dir.iterdir() if p.is_file() and p.suffix in suffixes]
    if not candidates:
        return None
    return max(candidates, key=lambda p: p.stat().st_mtime)


class SessionEnvironment:
    """Prepares the device, Appium and the report directories around a test run."""

    def __init__(self, config: Config, server: Optional[AppiumServer] = None,
                 devices: Optional[DeviceManager] = None):
        self.config = config
        self.server = server or AppiumServer(config.appium, config.logs_path)
        self.devices = devices or DeviceManager(config.platform, config.device)
        self.started_appium = False

    def print_session_banner(self, title: str = "Mobile Automation Test Session Start"):
        default = "Android default" if self.config.is_android else "iOS default"
        print_banner(title, {
            "Platform": self.config.platform_name,
            "Device Type": self.config.device_type,
            "Device": self.config.device.device_name,
            "Appium Port": f"{self.config.appium.port} ({default})",
            "Auto Appium Management": "Enabled" if self.config.auto_manage_appium else "Disabled",
            "Port Assignment": f"Android uses {DEFAULT_ANDROID_PORT}, iOS uses {DEFAULT_IOS_PORT}",
        })

    def check_device(self):
        if self.config.device_type not in ("emulator", "simulator"):
            print_section("Real Device Mode")
            print_status("Skipping device auto-start (real device expected to be connected)")
            return

        print_section("Device Check")
        kind = "Android emulator" if self.config.is_android else "iOS simulator"
        if self.devices.is_device_running():
            print_status(f"{kind} is already running")
            return

        print_status(f"{kind} not detected", ok=False)
        if self.devices.start_device():
            print_status(f"{kind} started")
        else:
            print_warning(f"{kind} could not be started, tests may fail to create a session")

    def check_appium(self):
        port = self.config.appium.port
        if not self.config.auto_manage_appium:
            print_section("Appium Check")
            print_appium_status(f"Auto-start disabled, expecting an external Appium on port {port}")
            return

        print_section("Appium Check")
        if self.server.is_running():
            print_appium_status(f"Already running on port {port} ({self.config.platform_name}), using existing instance")
            return

        print_appium_status(f"Not detected on port {port}, starting for {self.config.platform_name}")
        self.started_appium = self.server.start()
        if self.started_appium:
            time.sleep(APPIUM_SETTLE_SECONDS)
        print_appium_status(f"Listening on {self.config.appium.server_url}")

    def clean_reports(self):
        print_section("Cleanup")
        allure_helper.clear_results(self.config.allure_results_path)
        allure_helper.remove_report(self.config.allure_report_path)

    def write_report_environment(self):
        allure_helper.add_environment(self.config.allure_results_path, {
            "Platform": self.config.platform_name,
            "Device.Type": self.config.device_type,
            "Device.Name": self.config.device.device_name,
            "Platform.Version": self.config.device.platform_version,
            "Automation": self.config.device.automation_name,
            "App": self.config.app_id,
            "Appium.URL": self.config.appium.server_url,
        })

    def bootstrap(self):
        """Run before the first test. Raises AppiumServerError when Appium cannot be spawned."""
        self.print_session_banner()
        self.check_device()
        self.check_appium()
        self.clean_reports()
        self.write_report_environment()

    def publish_report(self):
        results = self.config.allure_results_path
        report = self.config.allure_report_path
        if not allure_helper.has_results(results):
            logger.info("No Allure results to publish")
            return

        print_section("Generating Allure Report")
        if allure_helper.generate_report(results, report):
            print_status(f"Allure report generated at {report}")
            if self.config.open_allure_report and allure_helper.open_report(report):
                print_status("Allure report server started")
        else:
            print_status("Could not generate Allure report", ok=False)

        latest = find_latest_report(self.config.output_path / "reports")
        if latest:
            print_status(f"Test report: file://{latest.resolve()}")

    def stop_appium(self):
        print_section("Mobile Automation Test Session End")
        if self.config.auto_manage_appium:
            self.server.stop()
        else:
            print_appium_status("Auto-stop disabled, Appium server left running")

    def teardown(self):
        """Run after the last test has been reported."""
        self.stop_appium()
        try:
            self.publish_report()
        except OSError as e:
            logger.error(f"Failed to publish report: {str(e)}")
            logger.debug(f"Stack trace: {traceback.format_exc()}")
