"""Risk-acceptance override registry."""

import json
import re
from datetime import date
from pathlib import Path
from typing import Any

from .errors import OverrideError
from .models import Finding, RiskOverride
from .severity import normalize_id

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _text(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise OverrideError(f"override field {key!r} must be a string")
    return value.strip()


def _parse_expiry(override_id: str, value: str) -> date:
    if not _DATE_PATTERN.match(value):
        raise OverrideError(
            f"override {override_id} has invalid expires_on {value!r}: expected YYYY-MM-DD"
        )
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise OverrideError(
            f"override {override_id} has invalid expires_on {value!r}: {exc}"
        ) from exc


def parse_overrides(config: Any) -> dict[str, RiskOverride]:
    """Validate a decoded ``{"overrides": [...]}`` document.

    The whole registry is rejected on the first invalid entry.
    """
    if not isinstance(config, dict):
        raise OverrideError("override config must be a JSON object")
    items = config.get("overrides") or []
    if not isinstance(items, list):
        raise OverrideError("'overrides' must be a list")

    overrides: dict[str, RiskOverride] = {}
    for item in items:
        if not isinstance(item, dict):
            raise OverrideError("each override must be a JSON object")
        override_id = normalize_id(_text(item, "id"))
        if not override_id:
            raise OverrideError("override id is required")
        if override_id in overrides:
            raise OverrideError(f"duplicate override id: {override_id}")
        reason = _text(item, "reason")
        if not reason:
            raise OverrideError(f"override {override_id} must include a reason")
        expires_on = _text(item, "expires_on")
        if not expires_on:
            raise OverrideError(f"override {override_id} must include expires_on")
        expiry = _parse_expiry(override_id, expires_on)
        overrides[override_id] = RiskOverride(id=override_id, reason=reason, expires_on=expiry)

    return overrides


def load_overrides(path: Path | str) -> dict[str, RiskOverride]:
    """Load and validate the override registry file."""
    with open(path, encoding="utf-8") as handle:
        try:
            config = json.load(handle)
        except json.JSONDecodeError as exc:
            raise OverrideError(f"invalid override JSON: {exc}") from exc
    return parse_overrides(config)


def match_override(
    finding: Finding, overrides: dict[str, RiskOverride]
) -> tuple[RiskOverride | None, str]:
    """Find the override for a finding by its ID, then by its aliases in order."""
    for candidate in finding.candidate_ids:
        normalized = normalize_id(candidate)
        override = overrides.get(normalized)
        if override is not None:
            return override, normalized
    return None, ""
