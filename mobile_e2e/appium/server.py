#!/usr/bin/env python3

import logging
import os
import signal
import subprocess
import threading
import time
from collections import deque
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import requests

from mobile_e2e.config import AppiumConfig
from mobile_e2e.shell import run_command, COMMAND_NOT_FOUND
from .exceptions import AppiumServerError

logger = logging.getLogger(__name__)

READY_MARKER = "Appium REST http interface listener started"
ADDRESS_IN_USE = "EADDRINUSE"


class AppiumServer:
    """Starts, detects and stops a local Appium server."""

    def __init__(self, config: AppiumConfig, log_dir: Optional[Path] = None):
        self.config = config
        self.log_dir = Path(log_dir) if log_dir else Path("output") / "logs"
        self.log_file: Optional[Path] = None
        self.process: Optional[subprocess.Popen] = None
        self.output = deque(maxlen=200)
        self._ready = threading.Event()
        self._address_in_use = threading.Event()
        self._readers: List[threading.Thread] = []

    @property
    def port(self) -> int:
        return self.config.port

    @property
    def status_url(self) -> str:
        return f"{self.config.server_url}/status"

    def find_pid(self) -> Optional[int]:
        """PID listening on the Appium port, if any."""
        code, out, _ = run_command(['lsof', f'-ti:{self.port}'])
        if code != 0 or not out:
            return None
        try:
            return int(out.splitlines()[0])
        except ValueError:
            return None

    def is_running(self) -> bool:
        """Check whether something serves the Appium port."""
        code, out, _ = run_command(['lsof', f'-ti:{self.port}'])
        if code == COMMAND_NOT_FOUND:
            logger.debug("lsof not available, probing Appium status endpoint")
            return self.is_responding()
        return code == 0 and bool(out)

    def is_responding(self, timeout: float = 2) -> bool:
        try:
            response = requests.get(self.status_url, timeout=timeout)
            return response.status_code == 200
        except requests.RequestException:
            return False

    def build_command(self) -> List[str]:
        command = [
            'appium',
            '--base-path', self.config.path,
            '--port', str(self.port),
            '--relaxed-security',
        ]
        if self.log_file:
            command += ['--log', str(self.log_file)]
        return command

    def _pump(self, stream) -> None:
        for line in iter(stream.readline, ''):
            line = line.rstrip()
            self.output.append(line)
            if READY_MARKER in line:
                self._ready.set()
            if ADDRESS_IN_USE in line:
                self._address_in_use.set()
        stream.close()

    def start(self, timeout: float = 10) -> bool:
        """
        Start Appium and wait for its listener to come up.

        Returns True when this call started the server, False when the port
        was already served by another Appium instance.
        """
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f'appium_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        command = self.build_command()
        logger.info(f"Starting Appium server on port {self.port}: {' '.join(command)}")

        self._ready.clear()
        self._address_in_use.clear()
        try:
            self.process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                bufsize=1,
            )
        except OSError as e:
            self.process = None
            raise AppiumServerError(f"Failed to start Appium: {str(e)}") from e

        self._readers = [
            threading.Thread(target=self._pump, args=(stream,), daemon=True)
            for stream in (self.process.stdout, self.process.stderr)
        ]
        for reader in self._readers:
            reader.start()

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if self._ready.is_set() or self._address_in_use.is_set():
                break
            if self.process.poll() is not None:
                break
            time.sleep(0.1)

        if self.process.poll() is not None:
            for reader in self._readers:
                reader.join(timeout=1)

        if self._address_in_use.is_set():
            logger.warning(f"Port {self.port} already in use, assuming Appium is already running")
            self._kill_child()
            return False

        if self._ready.is_set():
            logger.info(f"Appium server started on port {self.port} (logs: {self.log_file})")
            return True

        if self.process.poll() is not None:
            code = self.process.returncode
            tail = "\n".join(list(self.output)[-10:])
            self.process = None
            raise AppiumServerError(f"Appium exited with code {code} before it was ready:\n{tail}")

        logger.warning(f"Appium did not report readiness within {timeout}s, assuming it is up")
        return True

    def _kill_child(self) -> None:
        if self.process and self.process.poll() is None:
            self.process.kill()
            self.process.wait()
        self.process = None

    def stop(self, grace: float = 5) -> None:
        """Stop the server started by this instance: SIGTERM, then SIGKILL after `grace` seconds."""
        if not self.process:
            logger.info("No Appium process to stop")
            return

        if self.process.poll() is None:
            logger.info("Stopping Appium server")
            self.process.send_signal(signal.SIGTERM)
            try:
                self.process.wait(timeout=grace)
            except subprocess.TimeoutExpired:
                logger.warning(f"Appium did not exit within {grace}s, killing it")
                self.process.kill()
                self.process.wait()
        logger.info("Appium server stopped")
        self.process = None

    def stop_external(self) -> bool:
        """Stop whatever process listens on the Appium port."""
        pid = self.find_pid()
        if not pid:
            logger.info(f"Nothing is listening on port {self.port}")
            return False
        try:
            os.kill(pid, signal.SIGTERM)
            time.sleep(1)
            if self.find_pid():
                os.kill(pid, signal.SIGKILL)
            logger.info(f"Killed process {pid} on port {self.port}")
        except ProcessLookupError:
            logger.debug(f"Process {pid} already exited")
        return True
