"""Shared fixtures: sample JUnit documents and LISA result trees."""

from datetime import datetime
from pathlib import Path

import pytest

from fedora_testresults.blob_client import LocalBlobStore
from fedora_testresults.cache import TTLCache
from fedora_testresults.config import StorageConfig
from fedora_testresults.data_collector import DataCollector

SUITES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites name="lisa" tests="99" failures="0" errors="0">
  <testsuite name="provisioning" tests="3" time="4.5" timestamp="2026-01-22T10:30:00">
    <testcase name="boot" classname="smoke.Boot" time="1.5"/>
    <testcase name="ssh" classname="smoke.Ssh" time="2.0">
      <failure message="connection refused">Traceback: port 22 closed</failure>
    </testcase>
    <testcase name="gpu" classname="smoke.Gpu" time="1.0">
      <skipped message="no gpu"/>
    </testcase>
  </testsuite>
  <testsuite name="storage" time="2.0">
    <testcase name="disk" classname="storage.Disk" time="1.0">
      <error message="disk missing"/>
    </testcase>
    <testcase name="nvme" classname="storage.Nvme" time="1.0"/>
  </testsuite>
</testsuites>
"""

LISA_XML = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites tests="5" failures="1" errors="1" time="12.0">
  <testsuite name="lisa" tests="5" failures="1" errors="1" timestamp="2026-01-22T10:30:00">
    <testcase name="a"/>
    <testcase name="b"/>
    <testcase name="c"><failure message="boom"/></testcase>
    <testcase name="d"><error message="crash"/></testcase>
    <testcase name="e"><skipped/></testcase>
  </testsuite>
</testsuites>
"""


def run_dir_name(when: datetime, abbreviated: bool = False) -> str:
    """LISA run directory name, e.g. "January22-2026-1430"."""
    month = when.strftime('%b' if abbreviated else '%B')
    return f"{month}{when:%d}-{when:%Y}-{when:%H%M}"


def lisa_xml(tests: int, failures: int = 0, errors: int = 0, skipped: int = 0,
             timestamp: str = None) -> str:
    """Minimal LISA report with the given root counters."""
    ts = f' timestamp="{timestamp}"' if timestamp else ''
    skipped_cases = "".join(f'<testcase name="s{i}"><skipped/></testcase>' for i in range(skipped))
    return (f'<testsuites tests="{tests}" failures="{failures}" errors="{errors}"{ts}>'
            f'<testsuite name="lisa">{skipped_cases}</testsuite></testsuites>')


@pytest.fixture
def results_root(tmp_path: Path) -> Path:
    root = tmp_path / "lisa_results"
    root.mkdir()
    return root


@pytest.fixture
def write_run(results_root: Path):
    """Create <root>/<version>/<run>/lisa.junit.xml and return the run directory."""
    def _write(version: str, run_name: str, xml: str = LISA_XML) -> Path:
        run_path = results_root / version / run_name
        run_path.mkdir(parents=True)
        (run_path / "lisa.junit.xml").write_text(xml)
        return run_path
    return _write


@pytest.fixture
def blob_root(tmp_path: Path) -> Path:
    root = tmp_path / "blobs"
    root.mkdir()
    return root


@pytest.fixture
def collector(results_root: Path, blob_root: Path) -> DataCollector:
    config = StorageConfig(results_root=results_root, local_cache_dir=blob_root,
                           use_local_cache=True)
    return DataCollector(config=config, cache=TTLCache(), store=LocalBlobStore(blob_root))
