"""
Data models for Fedora image test results.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Mapping, Optional


class TestStatus(Enum):
    """Status of a single test case."""
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    ERROR = "error"


@dataclass(frozen=True)
class TestCase:
    """Represents a single test case result."""
    name: str
    classname: str
    status: TestStatus
    duration_seconds: float = 0.0
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "classname": self.classname,
            "time": self.duration_seconds,
            "status": self.status.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class TestSuite:
    """Represents a test suite (collection of test cases)."""
    name: str
    tests: int = 0
    failures: int = 0
    errors: int = 0
    skipped: int = 0
    time_seconds: float = 0.0
    test_cases: tuple[TestCase, ...] = ()

    @property
    def passed(self) -> int:
        return self.tests - self.failures - self.errors - self.skipped

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "tests": self.tests,
            "failures": self.failures,
            "errors": self.errors,
            "skipped": self.skipped,
            "time": self.time_seconds,
            "testcases": [tc.to_dict() for tc in self.test_cases],
        }


@dataclass(frozen=True)
class TestSummary:
    """Totals across all suites of one result. ``passed`` is the residual."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    errors: int = 0
    duration: float = 0.0

    @classmethod
    def from_suites(cls, suites) -> "TestSummary":
        total = sum(s.tests for s in suites)
        failed = sum(s.failures for s in suites)
        skipped = sum(s.skipped for s in suites)
        errors = sum(s.errors for s in suites)
        return cls(
            total=total,
            passed=total - failed - skipped - errors,
            failed=failed,
            skipped=skipped,
            errors=errors,
            duration=sum(s.time_seconds for s in suites),
        )

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": self.errors,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class TestResult:
    """Parsed JUnit report for one (compose, architecture) pair."""
    compose_id: str
    architecture: str
    timestamp: Optional[datetime]
    suites: tuple[TestSuite, ...]
    summary: TestSummary

    def failed_cases(self) -> list[TestCase]:
        """Cases that failed or errored, in document order."""
        return [tc for s in self.suites for tc in s.test_cases
                if tc.status in (TestStatus.FAILED, TestStatus.ERROR)]

    def to_dict(self) -> dict:
        return {
            "composeId": self.compose_id,
            "architecture": self.architecture,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "suites": [s.to_dict() for s in self.suites],
            "summary": self.summary.to_dict(),
        }


@dataclass(frozen=True)
class RunSummary:
    """Top-level counters of one LISA run, as read by the counter scan.

    ``failed`` already folds in errors.
    """
    timestamp: str
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def success_rate(self) -> int:
        if self.total <= 0:
            return 0
        return round_half_up(self.passed / self.total * 100)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "skipped": self.skipped,
            "successRate": self.success_rate,
        }


@dataclass(frozen=True)
class VersionSeries:
    """Latest run plus the trailing 7-day window for one version directory.

    ``weekly`` only holds days that had a parsable run; a day missing from it
    means "no data", never "zero tests".
    """
    version: str
    latest: RunSummary
    window: tuple[date, ...] = ()
    weekly: Mapping[date, RunSummary] = field(default_factory=dict)
    distro: Optional[str] = None

    def slots(self) -> list[tuple[date, Optional[RunSummary]]]:
        """All window days in order, ``None`` where no run exists."""
        return [(day, self.weekly.get(day)) for day in self.window]

    def weekly_data(self) -> list[dict]:
        data = []
        for day, run in self.slots():
            if run is None:
                continue
            entry = {"date": day.isoformat()}
            entry.update({k: v for k, v in run.to_dict().items() if k != "timestamp"})
            data.append(entry)
        return data

    def to_dict(self, include_distro: bool = True) -> dict:
        data = {"version": self.version}
        if self.distro and include_distro:
            data["distro"] = self.distro
        data["latestResults"] = self.latest.to_dict()
        data["weeklyData"] = self.weekly_data()
        return data


@dataclass(frozen=True)
class DistroData:
    """All versions of one distribution with a roll-up summary."""
    distro: str
    versions: tuple[VersionSeries, ...] = ()

    def summary(self) -> dict:
        count = len(self.versions)
        rates = [v.latest.success_rate for v in self.versions]
        return {
            "totalVersions": count,
            "averageSuccessRate": round_half_up(sum(rates) / count) if count else 0,
            "totalTests": sum(v.latest.total for v in self.versions),
            "totalPassed": sum(v.latest.passed for v in self.versions),
        }

    def to_dict(self) -> dict:
        return {
            "distro": self.distro,
            "versions": [v.to_dict() for v in self.versions],
            "summary": self.summary(),
        }


def round_half_up(value: float) -> int:
    # Half-up, not banker's rounding; inputs are never negative
    return int(value + 0.5)
