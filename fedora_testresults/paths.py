"""Naming conventions for blobs, compose IDs and LISA run directories."""

import logging
import re
from datetime import date, datetime
from typing import Optional

logger = logging.getLogger(__name__)

JUNIT_FILENAME = "junit.xml"
LISA_JUNIT_FILENAME = "lisa.junit.xml"

MONTHS = {
    'January': 1, 'February': 2, 'March': 3, 'April': 4,
    'May': 5, 'June': 6, 'July': 7, 'August': 8,
    'September': 9, 'October': 10, 'November': 11, 'December': 12,
    'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4,
    'Jun': 6, 'Jul': 7, 'Aug': 8, 'Sep': 9,
    'Oct': 10, 'Nov': 11, 'Dec': 12,
}

# e.g. "January22-2026-1430" or "Jan22-2026-1430"
RUN_NAME_RE = re.compile(r'^([A-Z][A-Za-z]*)(\d{2})-(\d{4})-(\d{4})$')
COMPOSE_DATE_RE = re.compile(r'(\d{8})')
COMPOSE_VERSION_RE = re.compile(r'^Fedora-(?:Cloud-)?(\d+|Rawhide|eln)\b', re.IGNORECASE)

EPOCH = date(1970, 1, 1)


def blob_path(compose_id: str, architecture: str, filename: str = JUNIT_FILENAME) -> str:
    """Build the blob path for a compose/architecture pair."""
    return f"{compose_id}/{architecture}/{filename}"


def parse_blob_path(path: str) -> Optional[dict]:
    """
    Split a blob path like "Fedora-Cloud-42-20260122.0/x86_64/junit.xml".

    Returns:
        Dict with composeId, architecture, filename, isJunit, isHtml; or None
        if the path has fewer than two segments.
    """
    parts = path.split('/')
    if len(parts) < 2:
        return None
    return {
        "composeId": parts[0],
        "architecture": parts[1],
        "filename": parts[2] if len(parts) > 2 else '',
        "isJunit": path.endswith(JUNIT_FILENAME),
        "isHtml": path.endswith('index.html'),
    }


def extract_version(compose_id: str) -> str:
    """Fedora version from a compose ID: "42", "Rawhide", "eln" or "Unknown"."""
    match = COMPOSE_VERSION_RE.match(compose_id)
    return match.group(1) if match else 'Unknown'


def extract_compose_date(compose_id: str) -> date:
    """Date embedded in a compose ID; the epoch when missing or invalid."""
    match = COMPOSE_DATE_RE.search(compose_id)
    if not match:
        return EPOCH
    try:
        return datetime.strptime(match.group(1), '%Y%m%d').date()
    except ValueError:
        return EPOCH


def get_month_number(month: str) -> int:
    """Month number for a full or abbreviated English month name.

    Unknown names map to January. This is a known leniency kept for
    compatibility with existing result trees.
    """
    number = MONTHS.get(month)
    if number is None:
        logger.warning(f"Unknown month name '{month}', assuming January")
        return 1
    return number


def parse_run_name(name: str) -> Optional[datetime]:
    """
    Parse a LISA run directory name like "January22-2026-1430".

    Returns:
        Naive datetime of the run, or None if the name does not follow the
        <MonthName><DD>-<YYYY>-<HHMM> convention or names an impossible time.
    """
    match = RUN_NAME_RE.match(name)
    if not match:
        return None
    month, day, year, hhmm = match.groups()
    try:
        return datetime(int(year), get_month_number(month), int(day),
                        int(hhmm[:2]), int(hhmm[2:]))
    except ValueError:
        logger.debug(f"Run directory {name} has an invalid date, skipping")
        return None
