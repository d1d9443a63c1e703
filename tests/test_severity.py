"""Tests for severity normalization and ordering."""

import itertools

import pytest

from vulngate.policy.models import Severity, SeverityAssessment
from vulngate.policy.severity import (
    better_severity,
    json_number,
    normalize_id,
    normalize_severity,
    osv_severity_candidates,
    parse_score,
    resolve_osv_severity,
    score_from_cvss_text,
)


class TestNormalizeSeverity:
    """Tests for normalize_severity."""

    @pytest.mark.parametrize(
        "raw,score,expected",
        [
            ("critical", 0, Severity.CRITICAL),
            (" High ", 0, Severity.HIGH),
            ("MEDIUM", 9.9, Severity.MEDIUM),
            ("low", 0, Severity.LOW),
            ("", 9.0, Severity.CRITICAL),
            ("moderate", 7.0, Severity.HIGH),
            (None, 4.0, Severity.MEDIUM),
            ("", 0.1, Severity.LOW),
            ("", 0, Severity.UNKNOWN),
            ("unknown", 0, Severity.UNKNOWN),
        ],
    )
    def test_matrix(self, raw, score, expected):
        assert normalize_severity(raw, score) == expected

    def test_rank_order(self):
        ranks = [level.rank for level in Severity]
        assert ranks == sorted(ranks)
        assert Severity.CRITICAL.rank > Severity.HIGH.rank > Severity.UNKNOWN.rank


class TestBetterSeverity:
    """Tests for better_severity."""

    def test_level_wins_over_score(self):
        high = SeverityAssessment(severity=Severity.HIGH, score=7.0)
        medium = SeverityAssessment(severity=Severity.MEDIUM, score=9.0)
        assert better_severity(high, medium)
        assert not better_severity(medium, high)

    def test_score_breaks_ties(self):
        left = SeverityAssessment(severity=Severity.HIGH, score=8.1)
        right = SeverityAssessment(severity=Severity.HIGH, score=7.5)
        assert better_severity(left, right)
        assert not better_severity(right, left)

    def test_equal_is_not_better(self):
        value = SeverityAssessment(severity=Severity.LOW, score=2.0)
        assert not better_severity(value, value)

    def test_strict_weak_order(self):
        samples = [
            SeverityAssessment(severity=level, score=score)
            for level in Severity
            for score in (0.0, 5.0, 9.5)
        ]
        for a, b, c in itertools.product(samples, repeat=3):
            assert not (better_severity(a, b) and better_severity(b, a))
            if better_severity(a, b) and better_severity(b, c):
                assert better_severity(a, c)


class TestScoreParsing:
    """Tests for score helpers."""

    @pytest.mark.parametrize(
        "value,expected",
        [(7.5, 7.5), (9, 9.0), (" 4.2 ", 4.2), ("n/a", None), (None, None), (True, None)],
    )
    def test_parse_score(self, value, expected):
        assert parse_score(value) == expected

    def test_json_number_is_strict(self):
        assert json_number(None, "score") is None
        assert json_number(4, "score") == 4.0
        for value in ("4.0", True, [4]):
            with pytest.raises(ValueError, match="'score' must be a number"):
                json_number(value, "score")

    def test_score_from_cvss_text(self):
        assert score_from_cvss_text("CVSS:3.1/AV:N/SCORE:7.5") == 7.5
        assert score_from_cvss_text("CVSS:3.1/AV:N/AC:L") == 0.0
        assert score_from_cvss_text("SCORE:bad/SCORE:3.0") == 3.0


class TestOSVSeverity:
    """Tests for OSV payload extraction."""

    def test_candidates_from_string_mapping_and_list(self):
        assert osv_severity_candidates("HIGH") == [("HIGH", 0.0)]
        assert osv_severity_candidates({"severity": "LOW", "score": "2.5"}) == [("LOW", 2.5)]
        assert osv_severity_candidates(["MEDIUM", {"score": 9.1}, 42]) == [
            ("MEDIUM", 0.0),
            ("", 9.1),
        ]
        assert osv_severity_candidates(None) == []

    def test_resolve_rejects_string_database_score(self):
        with pytest.raises(ValueError, match="database_specific.score"):
            resolve_osv_severity({"id": "GO-1", "database_specific": {"score": "7.5"}})

    def test_resolve_returns_none_without_data(self):
        assert resolve_osv_severity({"id": "GO-1"}) is None

    def test_resolve_prefers_best(self):
        result = resolve_osv_severity(
            {
                "id": "go-1",
                "database_specific": {"severity": "HIGH", "score": 7.2},
                "severity": {"severity": "HIGH", "score": 8.0},
            }
        )
        assert result is not None
        assert result.severity == Severity.HIGH
        assert result.score == 8.0
        assert result.source == "GO-1"


def test_normalize_id():
    assert normalize_id("  ghsa-abcd-1234 ") == "GHSA-ABCD-1234"
