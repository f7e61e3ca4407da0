from datetime import date, datetime

import pytest

from fedora_testresults.paths import (
    EPOCH,
    blob_path,
    extract_compose_date,
    extract_version,
    get_month_number,
    parse_blob_path,
    parse_run_name,
)


class TestBlobPaths:
    def test_blob_path(self) -> None:
        assert blob_path("Fedora-Cloud-42-20260122.0", "x86_64") == "Fedora-Cloud-42-20260122.0/x86_64/junit.xml"

    def test_parse_blob_path(self) -> None:
        parsed = parse_blob_path("Fedora-Cloud-42-20260122.0/x86_64/junit.xml")

        assert parsed == {
            "composeId": "Fedora-Cloud-42-20260122.0",
            "architecture": "x86_64",
            "filename": "junit.xml",
            "isJunit": True,
            "isHtml": False,
        }

    def test_parse_blob_path_html(self) -> None:
        parsed = parse_blob_path("Fedora-Rawhide-20260122.n.0/aarch64/index.html")

        assert parsed["isHtml"] is True
        assert parsed["isJunit"] is False

    def test_parse_blob_path_too_short(self) -> None:
        assert parse_blob_path("junit.xml") is None


class TestComposeIdentity:
    @pytest.mark.parametrize("compose_id, expected", [
        ("Fedora-Cloud-42-20260122.0", "42"),
        ("Fedora-Cloud-43-20260121.1", "43"),
        ("Fedora-Rawhide-20260122.n.0", "Rawhide"),
        ("Fedora-eln-20260122.n.3", "eln"),
        ("CentOS-Stream-10", "Unknown"),
    ])
    def test_extract_version(self, compose_id: str, expected: str) -> None:
        assert extract_version(compose_id) == expected

    def test_extract_compose_date(self) -> None:
        assert extract_compose_date("Fedora-Cloud-42-20260122.0") == date(2026, 1, 22)
        assert extract_compose_date("Fedora-Rawhide-20251231.n.2") == date(2025, 12, 31)

    def test_extract_compose_date_fallback(self) -> None:
        assert extract_compose_date("Fedora-Cloud-42-latest") == EPOCH
        assert extract_compose_date("Fedora-Cloud-42-20261399.0") == EPOCH


class TestRunNames:
    def test_full_month_name(self) -> None:
        assert parse_run_name("January22-2026-1430") == datetime(2026, 1, 22, 14, 30)

    def test_abbreviated_month_name(self) -> None:
        assert parse_run_name("Sep05-2025-0905") == datetime(2025, 9, 5, 9, 5)

    def test_unknown_month_defaults_to_january(self) -> None:
        assert get_month_number("Smarch") == 1
        assert parse_run_name("Smarch03-2026-1200") == datetime(2026, 1, 3, 12, 0)

    @pytest.mark.parametrize("name", [
        "latest",
        "january22-2026-1430",
        "January2-2026-1430",
        "January22-2026-143",
        "January22-2026-1430-extra",
        "February30-2026-1200",
        "January22-2026-2460",
    ])
    def test_rejected_names(self, name: str) -> None:
        assert parse_run_name(name) is None
