from __future__ import annotations

import json
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional, List

from mobile_e2e.reporting.allure_helper import sanitize_file_name
from .enums import StepStatus

logger = logging.getLogger(__name__)

class StepTracer:
    """
    Records every driver step of a test into a JSON trace file and keeps
    a numbered pass/fail summary for the report.
    """
    def __init__(self, traces_dir: Path, platform: str = "android"):
        self.traces_dir = Path(traces_dir)
        self.platform = platform
        self.steps: List[Dict[str, Any]] = []
        self.summary: List[str] = []
        self.test_name: Optional[str] = None
        self.active_trace_path: Optional[Path] = None
        self.session_start_time = datetime.now()

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def start_new_trace(self, test_name: str) -> Path:
        """
        Start a new trace for a test.

        Args:
            test_name: Name of the test, used in the trace file name
        """
        self.steps = []
        self.summary = []
        self.test_name = test_name
        self.session_start_time = datetime.now()

        timestamp = self.session_start_time.strftime("%Y%m%d_%H%M%S")
        file_name = f"{sanitize_file_name(test_name)}_{timestamp}.json"
        self.active_trace_path = self.traces_dir / file_name
        self._write_trace_to_file()

        logger.info(f"Started new step trace at {self.active_trace_path}")
        return self.active_trace_path

    def log_step(self, step: str, status: StepStatus, details: Optional[Dict[str, Any]] = None) -> int:
        """
        Record a step and return its number.

        Args:
            step: Human readable step name, e.g. "tap ~Product Image"
            status: Whether the step passed or failed
            details: Extra information such as the error message
        """
        number = len(self.steps) + 1
        entry = {
            "timestamp": datetime.now().isoformat(),
            "timestamp_millis": int(time.time() * 1000),
            "number": number,
            "step": step,
            "status": status.value,
            "details": details or {},
        }
        self.steps.append(entry)
        marker = "PASS" if status == StepStatus.PASSED else "FAIL"
        self.summary.append(f"[{marker}] {number}. {step}")

        if self.active_trace_path:
            self._write_trace_to_file()
        logger.debug(f"Logged step {number}: {step} ({status.value})")
        return number

    def summary_text(self) -> str:
        return "\n".join(self.summary)

    def _write_trace_to_file(self) -> None:
        """Write the current trace data to file."""
        try:
            self.active_trace_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.active_trace_path, 'w', encoding='utf-8') as f:
                json.dump({
                    "test": self.test_name,
                    "platform": self.platform,
                    "session_start": self.session_start_time.isoformat(),
                    "steps": self.steps,
                }, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to write step trace: {str(e)}")

    def end_trace(self) -> str:
        """End the current trace and return the step summary."""
        if not self.active_trace_path:
            logger.warning("Cannot end trace: No active trace")
            return self.summary_text()

        duration = (datetime.now() - self.session_start_time).total_seconds()
        try:
            self.active_trace_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.active_trace_path, 'w', encoding='utf-8') as f:
                json.dump({
                    "test": self.test_name,
                    "platform": self.platform,
                    "session_start": self.session_start_time.isoformat(),
                    "duration_seconds": duration,
                    "steps": self.steps,
                }, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to write step trace: {str(e)}")

        logger.info(f"Ended step trace at {self.active_trace_path} ({len(self.steps)} steps)")
        self.active_trace_path = None
        return self.summary_text()
