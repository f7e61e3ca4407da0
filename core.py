#!/usr/bin/env python3
"""
Core operations shared between the HTTP API, MCP server and CLI.
Contains the business logic for compose listing and result aggregation.
"""

import logging
from datetime import date
from typing import Optional, Union

from fedora_testresults.data_collector import DEFAULT_DISTRO, DataCollector
from fedora_testresults.paths import extract_version

logger = logging.getLogger(__name__)

# Distributions with a LISA results tree; only Fedora is collected today
DISTROS = (DEFAULT_DISTRO,)

# Global data collector (singleton)
_collector = None


def get_collector() -> DataCollector:
    """Get or create the DataCollector singleton."""
    global _collector
    if _collector is None:
        _collector = DataCollector()
    return _collector


def set_collector(collector: Optional[DataCollector]):
    """Replace the singleton (None resets it to lazy creation)."""
    global _collector
    _collector = collector


def get_composes(strategy: str = "known") -> dict:
    """
    List available compose IDs.

    Args:
        strategy: "known", "probe" or "listing"

    Returns:
        dict with success flag, count and the compose IDs, newest first
    """
    composes = get_collector().get_compose_ids(strategy)
    return {
        "success": True,
        "count": len(composes),
        "composes": composes,
    }


def get_compose_report(compose_id: str) -> Optional[dict]:
    """
    Parsed results of every architecture of a compose.

    Returns:
        dict with composeId, version and results, or None if no
        architecture has results
    """
    results = get_collector().get_compose_results(compose_id)
    if not results:
        return None
    return {
        "composeId": compose_id,
        "version": extract_version(compose_id),
        "results": [r.to_dict() for r in results],
    }


def get_fedora_data(today: Optional[date] = None) -> list[dict]:
    """Version records of the Fedora results tree, without the distro field."""
    data = get_collector().collect_distro(DEFAULT_DISTRO, today=today)
    return [v.to_dict(include_distro=False) for v in data.versions]


def available_distros() -> list[str]:
    return list(DISTROS)


def get_distro_data(distro: str, fmt: str = "grouped",
                    today: Optional[date] = None) -> Optional[Union[dict, list]]:
    """
    Aggregated results for a distribution.

    Args:
        distro: Distribution name, matched case-insensitively
        fmt: "grouped" for versions plus summary, "flat" for the bare list
        today: Last day of the trailing window (defaults to today)

    Returns:
        Grouped dict or flat list, or None for an unknown distro
    """
    name = distro.lower()
    if name not in DISTROS:
        return None

    data = get_collector().collect_distro(name, today=today)
    if fmt == "flat":
        return [v.to_dict() for v in data.versions]
    return data.to_dict()


def get_version_series(version: str, today: Optional[date] = None) -> dict:
    """Latest snapshot and weekly series of one version directory."""
    series = get_collector().collect_version(version, distro=DEFAULT_DISTRO, today=today)
    return series.to_dict()
