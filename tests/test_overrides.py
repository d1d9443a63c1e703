"""Tests for the override registry."""

from datetime import date

import pytest

from vulngate.policy.errors import OverrideError
from vulngate.policy.models import Finding
from vulngate.policy.overrides import load_overrides, match_override, parse_overrides


class TestLoadOverrides:
    """Tests for load_overrides."""

    def test_loads_valid_entries(self, write_json):
        path = write_json(
            "overrides.json",
            {
                "overrides": [
                    {"id": " cve-2024-1 ", "reason": " vendored, unused ", "expires_on": "2026-03-01"},
                    {"id": "GO-9", "reason": "x", "expires_on": "2026-01-01"},
                ]
            },
        )
        overrides = load_overrides(path)

        assert set(overrides) == {"CVE-2024-1", "GO-9"}
        assert overrides["CVE-2024-1"].reason == "vendored, unused"
        assert overrides["CVE-2024-1"].expires_on == date(2026, 3, 1)

    def test_empty_registry(self, write_json):
        assert load_overrides(write_json("o.json", {"overrides": []})) == {}

    def test_malformed_json(self, temp_dir):
        path = temp_dir / "o.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(OverrideError, match="invalid override JSON"):
            load_overrides(path)

    def test_missing_file(self, temp_dir):
        with pytest.raises(OSError):
            load_overrides(temp_dir / "missing.json")


class TestParseOverridesErrors:
    """Every invalid entry rejects the whole registry."""

    @pytest.mark.parametrize(
        "entry,message",
        [
            ({"id": " ", "reason": "x", "expires_on": "2026-01-01"}, "override id is required"),
            ({"id": "GO-1", "reason": "", "expires_on": "2026-01-01"}, "must include a reason"),
            ({"id": "GO-1", "reason": "x", "expires_on": " "}, "must include expires_on"),
            ({"id": "GO-1", "reason": "x", "expires_on": "01/02/2026"}, "invalid expires_on"),
            ({"id": "GO-1", "reason": "x", "expires_on": "20260101"}, "invalid expires_on"),
            ({"id": "GO-1", "reason": "x", "expires_on": "2026-02-30"}, "invalid expires_on"),
        ],
    )
    def test_invalid_entry(self, entry, message):
        with pytest.raises(OverrideError, match=message):
            parse_overrides({"overrides": [entry]})

    def test_duplicate_is_case_insensitive(self):
        with pytest.raises(OverrideError, match="duplicate override id: GO-1"):
            parse_overrides(
                {
                    "overrides": [
                        {"id": "go-1", "reason": "x", "expires_on": "2026-01-01"},
                        {"id": "GO-1", "reason": "y", "expires_on": "2026-01-01"},
                    ]
                }
            )

    def test_not_an_object(self):
        with pytest.raises(OverrideError):
            parse_overrides([])


class TestMatchOverride:
    """Tests for match_override."""

    def test_own_id_first_then_aliases(self):
        overrides = parse_overrides(
            {
                "overrides": [
                    {"id": "CVE-2", "reason": "x", "expires_on": "2026-01-01"},
                    {"id": "GHSA-1", "reason": "y", "expires_on": "2026-01-01"},
                ]
            }
        )
        finding = Finding(id="GO-1", aliases=["CVE-2", "GHSA-1"])
        override, matched = match_override(finding, overrides)
        assert override.id == "CVE-2"
        assert matched == "CVE-2"

        overrides["GO-1"] = overrides["GHSA-1"]
        _, matched = match_override(finding, overrides)
        assert matched == "GO-1"

    def test_no_match(self):
        assert match_override(Finding(id="GO-1"), {}) == (None, "")
