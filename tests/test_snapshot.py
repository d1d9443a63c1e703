"""Tests for the offline severity snapshot."""

import pytest

from vulngate.policy.errors import SnapshotError
from vulngate.policy.models import Severity, SeverityMethod
from vulngate.policy.snapshot import load_severity_snapshot, parse_snapshot


class TestLoadSeveritySnapshot:
    """Tests for load_severity_snapshot."""

    def test_blank_path_is_empty(self):
        assert load_severity_snapshot(None) == {}
        assert load_severity_snapshot("  ") == {}

    def test_loads_and_normalizes(self, write_json):
        path = write_json(
            "snapshot.json",
            {"cves": {"cve-2024-1": {"severity": "high", "score": 7.5}, "CVE-2024-2": {"score": 9.1}}},
        )
        snapshot = load_severity_snapshot(str(path))

        assert snapshot["CVE-2024-1"].severity == Severity.HIGH
        assert snapshot["CVE-2024-1"].method == SeverityMethod.NVD
        assert snapshot["CVE-2024-1"].source == "CVE-2024-1"
        assert snapshot["CVE-2024-2"].severity == Severity.CRITICAL

    def test_rejects_non_cve_key(self):
        with pytest.raises(SnapshotError, match="must start with CVE-"):
            parse_snapshot({"cves": {"GHSA-1": {"severity": "LOW"}}})

    def test_malformed_json(self, temp_dir):
        path = temp_dir / "snapshot.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(SnapshotError):
            load_severity_snapshot(path)

    def test_null_cves_is_empty(self):
        assert parse_snapshot({"cves": None}) == {}
        assert parse_snapshot({}) == {}


class TestSnapshotTypes:
    """A mistyped snapshot is rejected as a whole."""

    @pytest.mark.parametrize(
        "document,message",
        [
            ({"cves": []}, "'cves' must be a JSON object"),
            ({"cves": {"CVE-1": {"severity": 5}}}, "'severity' must be a string"),
            ({"cves": {"CVE-1": {"severity": "HIGH", "score": "abc"}}}, "'score' must be a number"),
            ({"cves": {"CVE-1": {"severity": "HIGH", "score": "7.5"}}}, "'score' must be a number"),
            ({"cves": {"CVE-1": {"score": True}}}, "'score' must be a number"),
            ({"cves": {"CVE-1": "HIGH"}}, "must be a JSON object"),
        ],
    )
    def test_rejects_mistyped_fields(self, document, message):
        with pytest.raises(SnapshotError, match=message):
            parse_snapshot(document)

    def test_mistyped_file_fails_load(self, write_json):
        path = write_json("snapshot.json", {"cves": {"CVE-1": {"severity": 5, "score": "high"}}})
        with pytest.raises(SnapshotError, match="CVE-1"):
            load_severity_snapshot(path)

    def test_integer_score_is_accepted(self):
        snapshot = parse_snapshot({"cves": {"CVE-1": {"score": 7}}})
        assert snapshot["CVE-1"].score == 7.0
        assert snapshot["CVE-1"].severity == Severity.HIGH
