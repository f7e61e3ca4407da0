"""Data collector for Fedora image tests - reads results from blob storage and LISA run trees."""

import logging
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Optional

from .blob_client import LocalBlobStore, make_blob_store
from .cache import TTLCache
from .compose_discovery import get_available_composes, list_version_dirs
from .config import StorageConfig, get_storage_config
from .junit_parser import JUnitParser, JUnitParseError, scan_counts, scan_timestamp
from .models import DistroData, RunSummary, TestResult, VersionSeries
from .paths import LISA_JUNIT_FILENAME, blob_path, parse_run_name

logger = logging.getLogger(__name__)

ARCHITECTURES = ("x86_64", "aarch64")
WINDOW_DAYS = 7
DEFAULT_DISTRO = "fedora"


class ResultsRootNotFoundError(FileNotFoundError):
    """The configured LISA results root does not exist."""


class VersionProcessingError(RuntimeError):
    """A whole version directory could not be read."""


class DataCollector:
    """Collects Fedora test data from blob storage and local LISA results."""

    def __init__(self, config: Optional[StorageConfig] = None,
                 cache: Optional[TTLCache] = None, store=None):
        self.config = config or get_storage_config()
        self.cache = cache if cache is not None else TTLCache()
        self.store = store if store is not None else make_blob_store(self.config, self.cache)
        self.results = LocalBlobStore(self.config.results_root)
        self.junit = JUnitParser()

    # -- compose results -------------------------------------------------

    def get_compose_ids(self, strategy: str = "known") -> list[str]:
        """Available compose IDs, newest first."""
        return get_available_composes(self.store, strategy=strategy)

    def get_test_result(self, compose_id: str, architecture: str) -> Optional[TestResult]:
        """Fetch and parse the junit.xml of one compose/architecture pair."""
        path = blob_path(compose_id, architecture)
        content = self.store.fetch(path)
        if content is None:
            return None
        try:
            return self.junit.parse_string(content, compose_id, architecture)
        except JUnitParseError as e:
            logger.error(f"Failed to parse test result for {compose_id}/{architecture}: {e}")
            return None

    def get_compose_results(self, compose_id: str, architectures=ARCHITECTURES) -> list[TestResult]:
        """All available architecture results for a compose."""
        results = [self.get_test_result(compose_id, arch) for arch in architectures]
        return [r for r in results if r is not None]

    def get_latest_results(self, limit: int = 10, strategy: str = "known") -> list[TestResult]:
        """Results of the newest ``limit`` composes, flattened across architectures."""
        results = []
        for compose_id in self.get_compose_ids(strategy)[:limit]:
            results.extend(self.get_compose_results(compose_id))
        return results

    def compose_exists(self, compose_id: str, architectures=ARCHITECTURES) -> bool:
        """True if at least one architecture has a junit.xml."""
        return any(self.store.exists(blob_path(compose_id, arch)) for arch in architectures)

    # -- LISA run trees ----------------------------------------------------

    def list_versions(self) -> list[str]:
        """
        Version directories under the results root, Rawhide first.

        Raises:
            ResultsRootNotFoundError: the results root does not exist
        """
        root = self.config.results_root
        if not root.is_dir():
            raise ResultsRootNotFoundError(f"Results root does not exist: {root}")
        return list_version_dirs(root, self.config.version_prefix)

    def list_runs(self, version: str) -> list[tuple[str, datetime]]:
        """Run directories of a version with their parsed times, newest first.

        Entries that do not follow the run naming convention are excluded.
        """
        version_path = self.config.results_root / version
        runs = []
        for entry in version_path.iterdir():
            if not entry.is_dir():
                continue
            run_time = parse_run_name(entry.name)
            if run_time is None:
                logger.debug(f"Skipping non-run entry {version}/{entry.name}")
                continue
            runs.append((entry.name, run_time))
        runs.sort(key=lambda run: run[1], reverse=True)
        return runs

    def read_run_summary(self, version: str, run_name: str,
                         run_time: datetime) -> Optional[RunSummary]:
        """Summarise one run's lisa.junit.xml with the counter scan.

        Returns None when the file is missing or has no usable root tag.
        """
        path = f"{version}/{run_name}/{LISA_JUNIT_FILENAME}"
        try:
            xml = self.results.fetch_text(path)
        except OSError as e:
            logger.error(f"Failed to read {path}: {e}")
            return None
        if xml is None:
            logger.warning(f"No {LISA_JUNIT_FILENAME} in {version}/{run_name}")
            return None

        counts = scan_counts(xml)
        if counts is None:
            logger.warning(f"No JUnit root counters found in {path}")
            return None

        timestamp = scan_timestamp(xml) or run_time
        return RunSummary(
            timestamp=timestamp.isoformat(),
            total=counts["total"],
            passed=counts["passed"],
            failed=counts["failed"],
            skipped=counts["skipped"],
        )

    def collect_version(self, version: str, distro: Optional[str] = None,
                        today: Optional[date] = None) -> VersionSeries:
        """
        Build the latest snapshot and trailing 7-day series for a version.

        Each day of the window uses the latest run of that calendar day.
        Days without a parsable run are left out of the series.

        Raises:
            VersionProcessingError: the version directory cannot be listed
        """
        today = today or date.today()
        if version in ("", ".", "..") or "/" in version or "\\" in version:
            raise VersionProcessingError(f"Failed to process version {version}: not a directory name")
        try:
            runs = self.list_runs(version)
        except OSError as e:
            raise VersionProcessingError(f"Failed to process version {version}: {e}") from e

        summaries: dict[str, Optional[RunSummary]] = {}

        def _summary(run_name: str, run_time: datetime) -> Optional[RunSummary]:
            if run_name not in summaries:
                summaries[run_name] = self.read_run_summary(version, run_name, run_time)
            return summaries[run_name]

        if runs:
            latest_name, latest_time = runs[0]
            latest = _summary(latest_name, latest_time) or RunSummary(timestamp=latest_time.isoformat())
        else:
            latest = RunSummary(timestamp=datetime.now().isoformat())

        window = tuple(today - timedelta(days=offset) for offset in range(WINDOW_DAYS - 1, -1, -1))
        latest_per_day: dict[date, tuple[str, datetime]] = {}
        for run_name, run_time in runs:
            # runs are newest first, so the first hit per day is that day's latest
            latest_per_day.setdefault(run_time.date(), (run_name, run_time))

        weekly = {}
        for day in window:
            if day not in latest_per_day:
                continue
            summary = _summary(*latest_per_day[day])
            if summary is not None:
                weekly[day] = summary

        return VersionSeries(version=version, latest=latest, window=window,
                             weekly=MappingProxyType(weekly), distro=distro)

    def collect_distro(self, distro: str = DEFAULT_DISTRO,
                       today: Optional[date] = None) -> DistroData:
        """Collect every version directory of a distribution."""
        versions = tuple(self.collect_version(v, distro=distro, today=today)
                         for v in self.list_versions())
        return DistroData(distro=distro, versions=versions)
