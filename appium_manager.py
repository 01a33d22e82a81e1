#!/usr/bin/env python3

"""Manage Appium and the test device outside a test run.

Used together with AUTO_APPIUM=false, for example to run Android and iOS
suites side by side against two long-lived Appium servers:

    PLATFORM=android python appium_manager.py start
    PLATFORM=ios python appium_manager.py start
"""

import argparse
import os
import sys
import time

from mobile_e2e.appium.devices import DeviceManager
from mobile_e2e.appium.exceptions import AppiumServerError
from mobile_e2e.appium.server import AppiumServer
from mobile_e2e.config import load_config
from mobile_e2e.ui.console import (
    console,
    print_appium_status,
    print_banner,
    print_error,
    print_status,
    print_success,
    print_warning,
)


class AppiumManager:
    def __init__(self, platform: str = None):
        if platform:
            os.environ["PLATFORM"] = platform
        self.config = load_config()
        self.server = AppiumServer(self.config.appium, self.config.logs_path)
        self.devices = DeviceManager(self.config.platform, self.config.device)

    def start(self, with_device: bool = False) -> int:
        """Start Appium in the foreground and keep it running until interrupted."""
        port = self.config.appium.port
        if with_device:
            self.devices.ensure_device(self.config.device_type)

        if self.server.is_running():
            print_appium_status(f"Already running on port {port}")
            return 0

        try:
            if not self.server.start():
                print_appium_status(f"Port {port} is already served by another Appium instance")
                return 0
        except AppiumServerError as e:
            print_error(str(e))
            return 1

        print_success(f"Appium listening on {self.config.appium.server_url} (log: {self.server.log_file})")
        console.print("Press Ctrl+C to stop")
        try:
            while self.server.process and self.server.process.poll() is None:
                time.sleep(1)
            print_warning("Appium exited")
        except KeyboardInterrupt:
            console.print("\nShutting down...")
        finally:
            self.server.stop()
        return 0

    def stop(self) -> int:
        if self.server.stop_external():
            print_success(f"Appium on port {self.config.appium.port} stopped")
        else:
            print_warning(f"No Appium listening on port {self.config.appium.port}")
        return 0

    def status(self) -> int:
        running = self.server.is_running()
        print_banner("Appium Status", {
            "Platform": self.config.platform_name,
            "URL": self.config.appium.server_url,
            "Port in use": "yes" if running else "no",
            "Responding": "yes" if running and self.server.is_responding() else "no",
            "Device running": "yes" if self.devices.is_device_running() else "no",
        })
        return 0 if running else 1

    def list_devices(self) -> int:
        devices = self.devices.list_connected_devices()
        if not devices:
            print_warning(f"No {self.config.platform_name} devices found")
            return 1
        for device in devices:
            print_status(device)
        return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Appium server and device manager")
    parser.add_argument("command", choices=["start", "stop", "status", "devices"])
    parser.add_argument("--platform", choices=["android", "ios"], help="Overrides PLATFORM")
    parser.add_argument("--with-device", action="store_true",
                        help="Boot the emulator/simulator before starting Appium")
    args = parser.parse_args()

    manager = AppiumManager(args.platform)
    if args.command == "start":
        return manager.start(with_device=args.with_device)
    if args.command == "stop":
        return manager.stop()
    if args.command == "status":
        return manager.status()
    return manager.list_devices()


if __name__ == "__main__":
    sys.exit(main())
