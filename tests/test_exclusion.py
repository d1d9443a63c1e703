"""Tests for baseline exclusion filtering."""

from pathlib import Path

from vulngate.policy.exclusion import (
    build_exclusion_set,
    collect_excluded_ids,
    filter_excluded,
    match_exclusion,
)
from vulngate.policy.models import ExclusionSet, Finding


def _finding(finding_id: str, aliases=(), reachable=False) -> Finding:
    return Finding(id=finding_id, aliases=list(aliases), reachable=reachable)


class TestBuildExclusionSet:
    """Tests for build_exclusion_set."""

    def test_collects_ids_and_aliases(self):
        excluded = build_exclusion_set(
            [
                _finding("GO-1", ["cve-1"], reachable=True),
                _finding("GO-2", ["GHSA-x"]),
            ]
        )
        assert excluded.all == {"GO-1", "CVE-1", "GO-2", "GHSA-X"}
        assert excluded.reachable == {"GO-1", "CVE-1"}

    def test_collect_from_file(self, write_events):
        path: Path = write_events(
            "baseline.json",
            [
                {"osv": {"id": "GO-1", "aliases": ["CVE-1"]}},
                {"finding": {"osv": "GO-1", "trace": [{"package": "p", "function": "f"}]}},
                {"osv": {"id": "GO-2"}},
            ],
        )
        excluded = collect_excluded_ids(path)
        assert excluded.all == {"GO-1", "CVE-1", "GO-2"}
        assert excluded.reachable == {"GO-1", "CVE-1"}


class TestFilterExcluded:
    """Tests for filter_excluded."""

    def test_empty_set_returns_input_unchanged(self):
        findings = [_finding("GO-1")]
        assert filter_excluded(findings, ExclusionSet()) is findings

    def test_reachable_baseline_match_is_dropped(self):
        excluded = ExclusionSet(all=frozenset({"CVE-1"}), reachable=frozenset({"CVE-1"}))
        findings = [_finding("GO-1", ["CVE-1"], reachable=True), _finding("GO-9")]
        assert [f.id for f in filter_excluded(findings, excluded)] == ["GO-9"]

    def test_unreachable_match_is_dropped(self):
        excluded = ExclusionSet(all=frozenset({"GO-1"}))
        findings = [_finding("GO-1", reachable=False)]
        assert filter_excluded(findings, excluded) == []

    def test_newly_reachable_finding_survives(self):
        excluded = ExclusionSet(all=frozenset({"GO-1"}))
        findings = [_finding("GO-1", reachable=True)]
        assert filter_excluded(findings, excluded) == findings

    def test_match_is_case_insensitive(self):
        excluded = ExclusionSet(all=frozenset({"GHSA-ABC"}), reachable=frozenset({"GHSA-ABC"}))
        assert match_exclusion(_finding("GO-1", ["ghsa-abc "]), excluded) == (True, True)
