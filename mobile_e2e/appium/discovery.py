"""Locator discovery helpers.

Used by the maintainer scenarios under ``tests/e2e/discovery`` to find out
which locator expressions actually match on the current screen after the
demo app changes its accessibility labels or view ids.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from lxml import etree
from selenium.common.exceptions import WebDriverException

from mobile_e2e.reporting.allure_helper import attach_xml, sanitize_file_name
from .enums import Platform
from .exceptions import MobileAutomationError

logger = logging.getLogger(__name__)

PAGE_SOURCES_DIR = "page-sources"

# Attribute carrying the element label, in the order candidates are produced
ANDROID_ATTRIBUTES = ("content-desc", "resource-id", "text")
IOS_ATTRIBUTES = ("name", "label")


@dataclass
class ProbeResult:
    """Outcome of probing a list of named locator candidates."""
    counts: Dict[str, int] = field(default_factory=dict)
    found: Optional[Tuple[str, str]] = None

    @property
    def matched(self) -> List[str]:
        return [name for name, count in self.counts.items() if count > 0]


def clean_page_source(source: str) -> str:
    """Clean XML source before parsing."""
    if not source.strip().startswith('<?xml'):
        source = '<?xml version="1.0" encoding="UTF-8"?>\n' + source

    source = source.replace('\x00', '')

    # Drop lone surrogates
    return ''.join(char for char in source if ord(char) < 0xD800 or ord(char) > 0xDFFF)


def parse_page_source(source: str):
    """Parse a page source dump, tolerating the malformed XML some drivers return."""
    parser = etree.XMLParser(recover=True, encoding='utf-8')
    root = etree.fromstring(clean_page_source(source).encode('utf-8'), parser=parser)

    if len(parser.error_log) > 0:
        errors = [str(error) for error in parser.error_log]
        logger.warning(f"XML parsing warnings: {errors}")
    return root


def _android_candidates(element) -> Iterable[str]:
    description = element.get("content-desc")
    if description:
        yield f"~{description}"
    resource_id = element.get("resource-id")
    if resource_id:
        yield f'android=new UiSelector().resourceId("{resource_id}")'
    text = element.get("text")
    if text and '"' not in text:
        yield f'//{element.tag}[@text="{text}"]'


def _ios_candidates(element) -> Iterable[str]:
    name = element.get("name")
    if name:
        yield f"~{name}"
    label = element.get("label")
    if label and label != name and '`' not in label:
        yield f'**/{element.tag}[`label == "{label}"`]'


def candidate_locators(source: str, platform: str) -> List[str]:
    """Locator expressions for every labelled element of a page source, without duplicates."""
    root = parse_page_source(source)
    if root is None:
        return []

    produce = _ios_candidates if platform.lower() == Platform.IOS.value else _android_candidates
    candidates: List[str] = []
    for element in root.iter():
        if not isinstance(element.tag, str):
            continue
        for candidate in produce(element):
            if candidate not in candidates:
                candidates.append(candidate)
    logger.debug(f"Found {len(candidates)} candidate locators")
    return candidates


def probe_locators(mobile, candidates: Dict[str, str]) -> ProbeResult:
    """Count visible matches of each named locator; remember the first one that matched."""
    result = ProbeResult()
    for name, locator in candidates.items():
        try:
            count = mobile.count_visible(locator)
        except (WebDriverException, MobileAutomationError) as e:
            logger.debug(f"Probe of {locator} failed: {str(e)}")
            count = 0

        result.counts[name] = count
        if count > 0:
            logger.info(f"[OK] {name}: Found {count} element(s) with {locator}")
            if result.found is None:
                result.found = (name, locator)
        else:
            logger.info(f"[NOT FOUND] {name}: {locator}")
    return result


def dump_page_source(mobile, name: str) -> Path:
    """Save the current page source under output/page-sources and attach it to the report."""
    source = mobile.page_source()
    path = mobile.config.output_path / PAGE_SOURCES_DIR / f"{sanitize_file_name(name)}.xml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    attach_xml(source, name)
    logger.info(f"Page source saved to {path}")
    return path
