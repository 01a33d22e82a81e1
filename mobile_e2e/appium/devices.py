#!/usr/bin/env python3

import logging
import os
import time
from typing import List, Optional

from mobile_e2e.config import DeviceConfig
from mobile_e2e.shell import run_command, spawn_detached
from .enums import DeviceType, Platform

logger = logging.getLogger(__name__)

ALREADY_BOOTED = "Unable to boot device in current state: Booted"


class DeviceManager:
    """Detects and boots the Android emulator or iOS simulator for a run."""

    def __init__(self, platform: str, device: DeviceConfig):
        self.platform = Platform((platform or "android").lower())
        self.device = device

    @property
    def emulator_binary(self) -> str:
        android_home = os.environ.get("ANDROID_HOME")
        if android_home:
            return os.path.join(android_home, "emulator", "emulator")
        return "emulator"

    # Android

    def list_android_devices(self) -> List[str]:
        """Serials of attached, online Android devices."""
        code, out, _ = run_command(['adb', 'devices'])
        if code != 0:
            return []
        serials = []
        for line in out.splitlines():
            if not line.strip() or line.startswith("List of devices"):
                continue
            if "device" in line and "offline" not in line:
                serials.append(line.split()[0])
        return serials

    def is_android_emulator_running(self) -> bool:
        return len(self.list_android_devices()) > 0

    def list_avds(self) -> List[str]:
        code, out, err = run_command([self.emulator_binary, '-list-avds'])
        if code != 0:
            logger.warning(f"Could not list Android virtual devices: {err}")
            return []
        return [line.strip() for line in out.splitlines() if line.strip()]

    def start_android_emulator(self, boot_timeout: int = 60) -> bool:
        """Boot the first available AVD and wait for it to come online."""
        avds = self.list_avds()
        if not avds:
            logger.warning("No Android Virtual Devices found, continuing without emulator")
            return False

        avd = avds[0]
        logger.info(f"Starting Android emulator: {avd}")
        process = spawn_detached([self.emulator_binary, '-avd', avd, '-no-snapshot-load', '-no-boot-anim'])
        if process is None:
            return False

        for attempt in range(boot_timeout):
            time.sleep(1)
            if self.is_android_emulator_running():
                logger.info(f"Emulator detected after {attempt + 1}s, waiting for boot to complete")
                time.sleep(10)
                code, out, _ = run_command(['adb', 'wait-for-device', 'shell', 'getprop', 'sys.boot_completed'],
                                           timeout=60)
                if code == 0 and out.strip() == "1":
                    logger.info("Android emulator is ready")
                else:
                    logger.info("Boot not reported complete yet, waiting a little longer")
                    time.sleep(5)
                return True

        logger.warning(f"Emulator did not come online within {boot_timeout}s, continuing")
        return False

    # iOS

    def list_booted_simulators(self) -> List[str]:
        code, out, _ = run_command(['xcrun', 'simctl', 'list', 'devices'])
        if code != 0:
            return []
        return [line.strip() for line in out.splitlines() if "(Booted)" in line]

    def is_ios_simulator_running(self) -> bool:
        code, out, _ = run_command(['xcrun', 'simctl', 'list', 'devices'])
        return code == 0 and "Booted" in out

    def start_ios_simulator(self, boot_wait: int = 15) -> bool:
        name = self.device.device_name
        logger.info(f"Booting iOS simulator: {name}")
        code, _, err = run_command(['xcrun', 'simctl', 'boot', name])
        if code != 0 and ALREADY_BOOTED not in err:
            logger.warning(f"Failed to boot simulator {name}: {err}")
            return False

        run_command(['open', '-a', 'Simulator'])
        time.sleep(boot_wait)
        if self.is_ios_simulator_running():
            logger.info("iOS simulator is ready")
            return True
        logger.warning("iOS simulator did not report as booted, continuing")
        return False

    # Dispatch

    def is_device_running(self) -> bool:
        if self.platform == Platform.ANDROID:
            return self.is_android_emulator_running()
        return self.is_ios_simulator_running()

    def start_device(self) -> bool:
        if self.platform == Platform.ANDROID:
            return self.start_android_emulator()
        return self.start_ios_simulator()

    def ensure_device(self, device_type: str) -> Optional[bool]:
        """
        Make sure a virtual device is running. Real devices are expected to
        be connected already; None is returned for them.
        """
        kind = DeviceType((device_type or "emulator").lower())
        if not kind.is_virtual:
            logger.info("Real device configured, skipping emulator/simulator management")
            return None

        if self.is_device_running():
            logger.info(f"{self.platform.value} virtual device already running")
            return True

        logger.info(f"No running {self.platform.value} virtual device found, starting one")
        return self.start_device()

    def list_connected_devices(self) -> List[str]:
        if self.platform == Platform.ANDROID:
            return self.list_android_devices()
        return self.list_booted_simulators()
