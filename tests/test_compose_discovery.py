import threading
from datetime import date
from pathlib import Path

import pytest

from fedora_testresults.compose_discovery import (
    KNOWN_COMPOSES,
    composes_from_listing,
    discover_composes,
    generate_candidates,
    get_available_composes,
    list_version_dirs,
    sort_composes_by_date,
    sort_versions,
)


class FakeStore:
    """Blob store stub recording existence checks."""

    def __init__(self, existing=(), blobs=(), fail: bool = False) -> None:
        self.existing = set(existing)
        self.blobs = list(blobs)
        self.fail = fail
        self.checked = []
        self.lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def exists(self, path: str) -> bool:
        if self.fail:
            raise RuntimeError("storage unavailable")
        with self.lock:
            self.checked.append(path)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            return path in self.existing
        finally:
            with self.lock:
                self.active -= 1

    def list_blobs(self, prefix: str = "") -> list[str]:
        return [b for b in self.blobs if b.startswith(prefix)]


class TestSortComposes:
    def test_descending_by_date(self) -> None:
        result = sort_composes_by_date(["Fedora-Cloud-42-20260121.0", "Fedora-Cloud-42-20260122.0"])

        assert result == ["Fedora-Cloud-42-20260122.0", "Fedora-Cloud-42-20260121.0"]

    def test_undated_sort_last(self) -> None:
        result = sort_composes_by_date(["Fedora-Cloud-42-nightly", "Fedora-Rawhide-20250101.n.0",
                                        "Fedora-eln-20260103.n.1"])

        assert result == ["Fedora-eln-20260103.n.1", "Fedora-Rawhide-20250101.n.0", "Fedora-Cloud-42-nightly"]

    def test_does_not_mutate_input(self) -> None:
        ids = ["Fedora-Cloud-42-20260121.0", "Fedora-Cloud-42-20260122.0"]
        sort_composes_by_date(ids)

        assert ids[0] == "Fedora-Cloud-42-20260121.0"


class TestGenerateCandidates:
    def test_candidates_per_day(self) -> None:
        candidates = generate_candidates(days_back=1, today=date(2026, 1, 22))

        assert len(candidates) == 15
        assert candidates[:3] == [
            "Fedora-Rawhide-20260122.n.0",
            "Fedora-Rawhide-20260122.n.1",
            "Fedora-Rawhide-20260122.n.2",
        ]
        assert "Fedora-eln-20260122.n.2" in candidates
        assert "Fedora-Cloud-41-20260122.0" in candidates

    def test_window_reaches_back(self) -> None:
        candidates = generate_candidates(days_back=30, today=date(2026, 1, 22))

        assert len(candidates) == 30 * 15
        assert "Fedora-Cloud-43-20251224.1" in candidates
        assert not any("20251223" in c for c in candidates)


class TestDiscoverComposes:
    def test_keeps_only_existing(self) -> None:
        store = FakeStore(existing={
            "Fedora-Cloud-42-20260121.0/x86_64/junit.xml",
            "Fedora-Rawhide-20260122.n.0/x86_64/junit.xml",
        })

        found = discover_composes(store, days_back=3, today=date(2026, 1, 22))

        assert found == ["Fedora-Rawhide-20260122.n.0", "Fedora-Cloud-42-20260121.0"]
        assert len(store.checked) == 45

    def test_batches_bound_outstanding_checks(self) -> None:
        store = FakeStore()

        discover_composes(store, days_back=2, batch_size=4, today=date(2026, 1, 22))

        assert store.max_active <= 4


class TestGetAvailableComposes:
    def test_known_list(self) -> None:
        result = get_available_composes()

        assert sorted(result) == sorted(KNOWN_COMPOSES)
        assert result[0] == "Fedora-Rawhide-20260122.n.0"
        assert result[-1] == "Fedora-Cloud-42-20260121.0"

    def test_probe_falls_back_when_nothing_found(self) -> None:
        result = get_available_composes(FakeStore(), strategy="probe", days_back=1)

        assert sorted(result) == sorted(KNOWN_COMPOSES)

    def test_probe_falls_back_on_failure(self) -> None:
        result = get_available_composes(FakeStore(fail=True), strategy="probe", days_back=1)

        assert sorted(result) == sorted(KNOWN_COMPOSES)

    def test_listing(self) -> None:
        store = FakeStore(blobs=[
            "Fedora-Cloud-42-20260121.0/x86_64/junit.xml",
            "Fedora-Cloud-42-20260121.0/aarch64/junit.xml",
            "Fedora-Cloud-43-20260122.0/x86_64/junit.xml",
            "Fedora-Cloud-44-20260123.0/x86_64/index.html",
            "README.md",
        ])

        assert get_available_composes(store, strategy="listing") == [
            "Fedora-Cloud-43-20260122.0",
            "Fedora-Cloud-42-20260121.0",
        ]

    def test_composes_from_listing_empty(self) -> None:
        assert composes_from_listing(FakeStore()) == []

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError):
            get_available_composes(FakeStore(), strategy="guess")


class TestVersionDirectories:
    def test_rawhide_first_then_descending(self) -> None:
        names = ["Fedora-Cloud-41", "Fedora-Cloud-43", "Fedora-Cloud-Rawhide", "Fedora-Cloud-42"]

        assert sort_versions(names) == ["Fedora-Cloud-Rawhide", "Fedora-Cloud-43", "Fedora-Cloud-42",
                                        "Fedora-Cloud-41"]

    def test_list_version_dirs_filters_prefix(self, tmp_path: Path) -> None:
        for name in ("Fedora-Cloud-41", "Fedora-Cloud-42", "Ubuntu-24", "chroma_db"):
            (tmp_path / name).mkdir()
        (tmp_path / "Fedora-Cloud-notes.txt").write_text("")

        assert list_version_dirs(tmp_path, "Fedora-Cloud") == ["Fedora-Cloud-42", "Fedora-Cloud-41"]

    def test_list_version_dirs_missing_root(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            list_version_dirs(tmp_path / "missing", "Fedora-Cloud")
