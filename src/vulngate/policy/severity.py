"""Severity normalization and ordering helpers."""

from typing import Any

from .models import Severity, SeverityAssessment, SeverityMethod


def normalize_id(value: str) -> str:
    """Return the canonical (trimmed, uppercase) form of an identifier."""
    return value.strip().upper()


def normalize_severity(raw: str | None, score: float = 0.0) -> Severity:
    """Map a level string, falling back to the CVSS score bands."""
    label = (raw or "").strip().upper()
    if label in (Severity.CRITICAL, Severity.HIGH, Severity.MEDIUM, Severity.LOW):
        return Severity(label)

    if score >= 9.0:
        return Severity.CRITICAL
    if score >= 7.0:
        return Severity.HIGH
    if score >= 4.0:
        return Severity.MEDIUM
    if score > 0:
        return Severity.LOW
    return Severity.UNKNOWN


def better_severity(left: SeverityAssessment, right: SeverityAssessment) -> bool:
    """Return True if ``left`` outranks ``right`` (level first, then score)."""
    if left.severity.rank != right.severity.rank:
        return left.severity.rank > right.severity.rank
    return left.score > right.score


def parse_score(value: Any) -> float | None:
    """Parse a numeric score from JSON; ``None`` when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def json_number(value: Any, field: str) -> float | None:
    """Strict JSON number: ``None`` when absent, ValueError for any other type."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"{field!r} must be a number")
    return float(value)


def score_from_cvss_text(raw: str) -> float:
    """Extract the ``SCORE:`` segment from a CVSS-style vector string."""
    for part in raw.split("/"):
        part = part.strip()
        if not part.startswith("SCORE:"):
            continue
        try:
            return float(part.removeprefix("SCORE:"))
        except ValueError:
            continue
    return 0.0


def _candidate_from_mapping(value: dict[str, Any]) -> tuple[str, float]:
    raw_severity = value.get("severity")
    if not isinstance(raw_severity, str):
        raw_severity = ""
    raw_score = value.get("score")
    score = parse_score(raw_score)
    if score is not None:
        return raw_severity, score
    if isinstance(raw_score, str):
        return raw_severity, score_from_cvss_text(raw_score)
    return raw_severity, 0.0


def osv_severity_candidates(value: Any) -> list[tuple[str, float]]:
    """Flatten the polymorphic OSV ``severity`` field into (label, score) pairs."""
    if isinstance(value, str):
        return [(value, 0.0)]
    if isinstance(value, dict):
        return [_candidate_from_mapping(value)]
    if isinstance(value, list):
        candidates: list[tuple[str, float]] = []
        for item in value:
            if isinstance(item, str):
                candidates.append((item, 0.0))
            elif isinstance(item, dict):
                candidates.append(_candidate_from_mapping(item))
        return candidates
    return []


def resolve_osv_severity(osv: dict[str, Any]) -> SeverityAssessment | None:
    """Pick the best severity embedded in an OSV advisory payload.

    Raises ValueError when ``database_specific`` carries a mistyped field.
    """
    source = normalize_id(str(osv.get("id") or ""))
    best = SeverityAssessment(source=source, method=SeverityMethod.OSV)

    database_specific = osv.get("database_specific")
    if not isinstance(database_specific, dict):
        database_specific = {}
    raw_severity = database_specific.get("severity")
    if raw_severity is not None and not isinstance(raw_severity, str):
        raise ValueError("'database_specific.severity' must be a string")
    database_score = json_number(database_specific.get("score"), "database_specific.score")
    candidates = [(raw_severity or "", database_score or 0.0)]
    candidates.extend(osv_severity_candidates(osv.get("severity")))

    for label, score in candidates:
        candidate = SeverityAssessment(
            severity=normalize_severity(label, score),
            score=score,
            source=source,
            method=SeverityMethod.OSV,
        )
        if better_severity(candidate, best):
            best = candidate

    if not best.is_known:
        return None
    return best


def unknown_assessment(
    source: str, reason: str = "", method: SeverityMethod = SeverityMethod.UNKNOWN
) -> SeverityAssessment:
    return SeverityAssessment(
        severity=Severity.UNKNOWN, source=source, method=method, reason=reason
    )
