"""Discovery and ordering of Fedora compose IDs and version directories."""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from .paths import blob_path, extract_compose_date, parse_blob_path

logger = logging.getLogger(__name__)

DEFAULT_DAYS_BACK = 30
DEFAULT_BATCH_SIZE = 10
ACTIVE_VERSIONS = (43, 42, 41)
BUILD_NUMBERS = (0, 1, 2)
PROBE_ARCHITECTURE = "x86_64"
ROLLING_CHANNEL = "rawhide"

# Curated fallback, used when probing is undesirable
KNOWN_COMPOSES = [
    'Fedora-Rawhide-20260122.n.0',
    'Fedora-Rawhide-20260121.n.1',
    'Fedora-eln-20260122.n.3',
    'Fedora-eln-20260121.n.2',
    'Fedora-Cloud-43-20260122.0',
    'Fedora-Cloud-43-20260121.0',
    'Fedora-Cloud-42-20260122.0',
    'Fedora-Cloud-42-20260121.0',
]


def sort_composes_by_date(compose_ids: list[str]) -> list[str]:
    """Newest first by embedded YYYYMMDD date; undated IDs sort last."""
    return sorted(compose_ids, key=extract_compose_date, reverse=True)


def generate_candidates(days_back: int = DEFAULT_DAYS_BACK,
                        today: Optional[date] = None,
                        versions=ACTIVE_VERSIONS,
                        build_numbers=BUILD_NUMBERS) -> list[str]:
    """
    Generate potential compose IDs for the trailing window.

    Rawhide and ELN use the "<date>.n.<build>" form; numbered releases use
    "Fedora-Cloud-<version>-<date>.<build>".
    """
    today = today or date.today()
    candidates = []
    for offset in range(days_back):
        date_str = (today - timedelta(days=offset)).strftime('%Y%m%d')
        for build in build_numbers:
            candidates.append(f"Fedora-Rawhide-{date_str}.n.{build}")
        for build in build_numbers:
            candidates.append(f"Fedora-eln-{date_str}.n.{build}")
        for version in versions:
            for build in build_numbers:
                candidates.append(f"Fedora-Cloud-{version}-{date_str}.{build}")
    return candidates


def discover_composes(store, days_back: int = DEFAULT_DAYS_BACK,
                      batch_size: int = DEFAULT_BATCH_SIZE,
                      today: Optional[date] = None) -> list[str]:
    """
    Find composes that have results by probing candidate IDs.

    Candidates are checked in batches of ``batch_size`` concurrent existence
    checks; each batch completes before the next starts.

    Args:
        store: Blob store with an ``exists(path)`` method
        days_back: Size of the trailing window in days
        batch_size: Maximum outstanding checks
        today: Last day of the window (defaults to today)
    """
    candidates = generate_candidates(days_back, today=today)
    logger.info(f"Probing {len(candidates)} candidate composes in batches of {batch_size}")

    def _check(compose_id: str) -> Optional[str]:
        return compose_id if store.exists(blob_path(compose_id, PROBE_ARCHITECTURE)) else None

    found = []
    with ThreadPoolExecutor(max_workers=batch_size) as executor:
        for i in range(0, len(candidates), batch_size):
            batch = candidates[i:i + batch_size]
            found.extend(c for c in executor.map(_check, batch) if c)

    logger.info(f"Discovered {len(found)} composes")
    return sort_composes_by_date(found)


def composes_from_listing(store, prefix: str = "") -> list[str]:
    """Compose IDs that have at least one junit.xml in the container listing."""
    composes = set()
    for name in store.list_blobs(prefix):
        parsed = parse_blob_path(name)
        if parsed and parsed["isJunit"]:
            composes.add(parsed["composeId"])
    return sort_composes_by_date(sorted(composes))


def get_available_composes(store=None, strategy: str = "known",
                           days_back: int = DEFAULT_DAYS_BACK,
                           batch_size: int = DEFAULT_BATCH_SIZE) -> list[str]:
    """
    Get available compose IDs.

    Args:
        store: Blob store, required for "probe" and "listing"
        strategy: "known" (curated list), "probe" (existence checks) or
            "listing" (container listing). Probing and listing fall back to
            the curated list when they find nothing.
    """
    if strategy not in ("known", "probe", "listing"):
        raise ValueError(f"Unknown compose discovery strategy: {strategy}")
    if strategy == "known" or store is None:
        return sort_composes_by_date(list(KNOWN_COMPOSES))

    try:
        if strategy == "probe":
            found = discover_composes(store, days_back=days_back, batch_size=batch_size)
        else:
            found = composes_from_listing(store)
    except Exception as e:
        logger.error(f"Discovery failed, using known composes: {e}")
        return sort_composes_by_date(list(KNOWN_COMPOSES))

    return found or sort_composes_by_date(list(KNOWN_COMPOSES))


def _version_priority(name: str) -> int:
    if ROLLING_CHANNEL in name.lower():
        return 1000
    match = re.search(r'(\d+)', name)
    return int(match.group(1)) if match else 0


def sort_versions(names: list[str]) -> list[str]:
    """Rawhide first, then by descending version number."""
    return sorted(names, key=_version_priority, reverse=True)


def list_version_dirs(root: Path, prefix: str) -> list[str]:
    """
    List version directories under a LISA results root.

    Raises:
        FileNotFoundError: root does not exist
    """
    names = [p.name for p in Path(root).iterdir() if p.is_dir() and p.name.startswith(prefix)]
    return sort_versions(names)
