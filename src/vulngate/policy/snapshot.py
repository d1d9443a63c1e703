"""Pinned NVD severity snapshot used for offline runs."""

import json
from pathlib import Path
from typing import Any

from .errors import SnapshotError
from .models import SeverityAssessment, SeverityMethod
from .severity import json_number, normalize_id, normalize_severity


def _parse_entry(raw_id: str, entry: Any) -> tuple[str, float]:
    if not isinstance(entry, dict):
        raise SnapshotError(f"snapshot entry for {raw_id} must be a JSON object")
    raw_severity = entry.get("severity")
    if raw_severity is not None and not isinstance(raw_severity, str):
        raise SnapshotError(f"snapshot entry for {raw_id}: 'severity' must be a string")
    try:
        score = json_number(entry.get("score"), "score")
    except ValueError as exc:
        raise SnapshotError(f"snapshot entry for {raw_id}: {exc}") from exc
    return raw_severity or "", score or 0.0


def parse_snapshot(document: Any) -> dict[str, SeverityAssessment]:
    """Validate a decoded ``{"cves": {...}}`` snapshot document.

    Any mistyped field rejects the whole snapshot.
    """
    if not isinstance(document, dict):
        raise SnapshotError("severity snapshot must be a JSON object")
    entries = document.get("cves")
    if entries is None:
        entries = {}
    if not isinstance(entries, dict):
        raise SnapshotError("'cves' must be a JSON object")

    result: dict[str, SeverityAssessment] = {}
    for raw_id, entry in entries.items():
        cve_id = normalize_id(raw_id)
        if not cve_id.startswith("CVE-"):
            raise SnapshotError(f"snapshot id must start with CVE-: {raw_id}")
        label, score = _parse_entry(raw_id, entry)
        result[cve_id] = SeverityAssessment(
            severity=normalize_severity(label, score),
            score=score,
            source=cve_id,
            method=SeverityMethod.NVD,
        )
    return result


def load_severity_snapshot(path: Path | str | None) -> dict[str, SeverityAssessment]:
    """Load a snapshot file; a blank path yields an empty snapshot."""
    if path is None or not str(path).strip():
        return {}
    with open(Path(str(path).strip()), encoding="utf-8") as handle:
        try:
            document = json.load(handle)
        except json.JSONDecodeError as exc:
            raise SnapshotError(f"invalid severity snapshot JSON: {exc}") from exc
    return parse_snapshot(document)
