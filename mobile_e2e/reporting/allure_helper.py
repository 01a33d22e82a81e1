"""Allure helpers: attachments, dynamic labels and report generation."""

import logging
import re
import shutil
from pathlib import Path
from typing import Dict, Optional, Union

import allure

from mobile_e2e.shell import run_command, spawn_detached, COMMAND_NOT_FOUND

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

ENVIRONMENT_FILE = "environment.properties"


def sanitize_file_name(name: str) -> str:
    """Make a step or test name safe for use as a file name (max 50 chars)."""
    cleaned = re.sub(r'[^a-zA-Z0-9\s]', '_', name)
    cleaned = re.sub(r'\s+', '_', cleaned)
    return cleaned[:50]


def attach_screenshot(path: PathLike, name: Optional[str] = None) -> None:
    path = Path(path)
    allure.attach.file(str(path), name=name or path.name, attachment_type=allure.attachment_type.PNG)


def attach_text(content: str, name: str) -> None:
    allure.attach(content, name=name, attachment_type=allure.attachment_type.TEXT)


def attach_xml(content: str, name: str) -> None:
    allure.attach(content, name=name, attachment_type=allure.attachment_type.XML)


def add_description(description: str) -> None:
    allure.dynamic.description(description)


def add_label(name: str, value: str) -> None:
    allure.dynamic.label(name, value)


def add_issue(issue_id: str, url: Optional[str] = None) -> None:
    allure.dynamic.issue(url or issue_id, name=issue_id)


def add_feature(feature: str) -> None:
    allure.dynamic.feature(feature)


def add_story(story: str) -> None:
    allure.dynamic.story(story)


def add_epic(epic: str) -> None:
    allure.dynamic.epic(epic)


def add_owner(owner: str) -> None:
    allure.dynamic.label("owner", owner)


def add_test_id(test_id: str) -> None:
    allure.dynamic.label("as_id", test_id)


def add_parameter(name: str, value) -> None:
    allure.dynamic.parameter(name, value)


def add_severity(severity: str) -> None:
    """Set severity: blocker, critical, normal, minor or trivial."""
    try:
        level = allure.severity_level(severity.lower())
    except ValueError:
        logger.warning(f"Unknown severity '{severity}', using normal")
        level = allure.severity_level.NORMAL
    allure.dynamic.severity(level)


def add_environment(results_dir: PathLike, values: Dict[str, str]) -> Path:
    """Write environment.properties shown on the report overview page."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    path = results_dir / ENVIRONMENT_FILE
    lines = [f"{key}={value}" for key, value in values.items() if value is not None]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.debug(f"Wrote Allure environment to {path}")
    return path


def clear_results(results_dir: PathLike) -> int:
    """Delete result files from a previous run. Creates the directory when missing."""
    results_dir = Path(results_dir)
    if not results_dir.exists():
        results_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created Allure results directory: {results_dir}")
        return 0

    removed = 0
    for entry in results_dir.iterdir():
        if entry.is_file():
            entry.unlink()
            removed += 1
    logger.info(f"Cleared {removed} previous Allure result files")
    return removed


def remove_report(report_dir: PathLike) -> None:
    report_dir = Path(report_dir)
    if report_dir.exists():
        shutil.rmtree(report_dir)
        logger.info(f"Removed previous Allure report: {report_dir}")


def has_results(results_dir: PathLike) -> bool:
    """True when the directory holds test results, not just environment.properties."""
    results_dir = Path(results_dir)
    if not results_dir.is_dir():
        return False
    return any(entry.is_file() and entry.name != ENVIRONMENT_FILE for entry in results_dir.iterdir())


def generate_report(results_dir: PathLike, report_dir: PathLike) -> bool:
    """Run `allure generate`; False when the CLI is missing or fails."""
    code, out, err = run_command(['allure', 'generate', str(results_dir), '-o', str(report_dir), '--clean'])
    if code == COMMAND_NOT_FOUND:
        logger.warning("Allure CLI not found, skipping report generation")
        return False
    if code != 0:
        logger.error(f"Allure report generation failed: {err or out}")
        return False
    logger.info(f"Allure report generated at {report_dir}")
    return True


def open_report(report_dir: PathLike) -> bool:
    """Serve the generated report in the background."""
    process = spawn_detached(['allure', 'open', str(report_dir)])
    if process is None:
        return False
    logger.info(f"Opening Allure report from {report_dir}")
    return True
