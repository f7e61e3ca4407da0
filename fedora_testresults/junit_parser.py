"""
JUnit XML parsing for Fedora image test reports.

Two code paths with different guarantees:

- ``JUnitParser`` builds a full ``TestResult`` with per-suite and per-case
  detail. Suite counts are recomputed from the classified cases; the counts
  declared in the XML are never trusted.
- ``scan_counts`` is a regex scan of the root tag used when many files are
  summarised at once. It trusts the declared top-level counts and carries no
  case detail.
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from .models import TestCase, TestResult, TestStatus, TestSuite, TestSummary

logger = logging.getLogger(__name__)

ROOT_TAG_RE = re.compile(r'<testsuites?\b[^>]*>')
SKIPPED_TAG_RE = re.compile(r'<skipped\b[^>]*>')
TIMESTAMP_RE = re.compile(r'timestamp="([^"]+)"')


class JUnitParseError(ValueError):
    """Raised when a document is not well-formed JUnit XML."""


def _parse_float(value: Optional[str], default: float = 0.0) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logger.debug(f"Non-numeric time value {value!r}, using {default}")
        return default


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        logger.debug(f"Unparsable timestamp {value!r}")
        return None


def _message(element: ET.Element) -> Optional[str]:
    text = (element.text or '').strip()
    return text or element.get('message')


class JUnitParser:
    """Parser for JUnit XML as emitted by LISA and similar runners."""

    def parse_string(self, xml: Union[str, bytes], compose_id: str,
                     architecture: str,
                     timestamp: Optional[datetime] = None) -> TestResult:
        """
        Parse JUnit XML content into a TestResult.

        Args:
            xml: Document text or raw bytes
            compose_id: Compose the report belongs to
            architecture: CPU architecture the compose was tested on
            timestamp: Fallback timestamp when the document carries none

        Raises:
            JUnitParseError: malformed XML or a root that is neither
                <testsuites> nor <testsuite>
        """
        try:
            root = ET.fromstring(xml)
        except ET.ParseError as e:
            raise JUnitParseError(f"Malformed JUnit XML for {compose_id}/{architecture}: {e}") from e

        suites = [self._parse_suite(node) for node in self._suite_nodes(root)]

        return TestResult(
            compose_id=compose_id,
            architecture=architecture,
            timestamp=self._document_timestamp(root) or timestamp,
            suites=tuple(suites),
            summary=TestSummary.from_suites(suites),
        )

    def parse_file(self, path: Path, compose_id: str, architecture: str) -> TestResult:
        """Parse a JUnit XML file from disk."""
        return self.parse_string(Path(path).read_bytes(), compose_id, architecture)

    def _suite_nodes(self, root: ET.Element) -> list[ET.Element]:
        if root.tag == 'testsuite':
            return [root]
        if root.tag == 'testsuites':
            # A collection without nested suites is read as one suite
            return root.findall('testsuite') or [root]
        raise JUnitParseError(f"Unexpected JUnit root element <{root.tag}>")

    def _document_timestamp(self, root: ET.Element) -> Optional[datetime]:
        ts = _parse_timestamp(root.get('timestamp'))
        if ts is None:
            first = root.find('testsuite')
            if first is not None:
                ts = _parse_timestamp(first.get('timestamp'))
        return ts

    def _parse_suite(self, node: ET.Element) -> TestSuite:
        cases = tuple(self._parse_case(tc) for tc in node.findall('testcase'))
        declared_time = node.get('time')
        if declared_time is None:
            time_seconds = sum(tc.duration_seconds for tc in cases)
        else:
            time_seconds = _parse_float(declared_time)

        return TestSuite(
            name=node.get('name') or 'Unknown Suite',
            tests=len(cases),
            failures=sum(1 for tc in cases if tc.status == TestStatus.FAILED),
            errors=sum(1 for tc in cases if tc.status == TestStatus.ERROR),
            skipped=sum(1 for tc in cases if tc.status == TestStatus.SKIPPED),
            time_seconds=time_seconds,
            test_cases=cases,
        )

    def _parse_case(self, node: ET.Element) -> TestCase:
        # Order matters: skipped wins over error, error over failure
        status = TestStatus.PASSED
        message = None
        skipped = node.find('skipped')
        error = node.find('error')
        failure = node.find('failure')
        if skipped is not None:
            status = TestStatus.SKIPPED
        elif error is not None:
            status = TestStatus.ERROR
            message = _message(error)
        elif failure is not None:
            status = TestStatus.FAILED
            message = _message(failure)

        return TestCase(
            name=node.get('name') or 'Unknown Test',
            classname=node.get('classname') or '',
            status=status,
            duration_seconds=_parse_float(node.get('time')),
            message=message,
        )


def _int_attr(tag: str, name: str) -> Optional[int]:
    match = re.search(rf'\b{name}="(\d+)"', tag)
    return int(match.group(1)) if match else None


def scan_counts(xml: str) -> Optional[dict]:
    """
    Read the declared top-level counters without building a tree.

    Returns:
        Dict with total, failures, errors, skipped, passed and failed
        (failures + errors), or None if the root tag or its ``tests``
        attribute is missing.
    """
    root_match = ROOT_TAG_RE.search(xml)
    if not root_match:
        return None
    root_tag = root_match.group(0)
    total = _int_attr(root_tag, 'tests')
    if total is None:
        return None

    failures = _int_attr(root_tag, 'failures') or 0
    errors = _int_attr(root_tag, 'errors') or 0
    skipped = len(SKIPPED_TAG_RE.findall(xml))
    failed = failures + errors

    return {
        "total": total,
        "failures": failures,
        "errors": errors,
        "skipped": skipped,
        "failed": failed,
        "passed": total - failed - skipped,
    }


def scan_timestamp(xml: str) -> Optional[datetime]:
    """First ``timestamp="..."`` attribute in the document, if parsable."""
    match = TIMESTAMP_RE.search(xml)
    return _parse_timestamp(match.group(1)) if match else None
