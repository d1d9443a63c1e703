"""Fold scanner JSON events into canonical findings.

The scanner emits a stream of JSON objects, one per event. Objects may be
written one per line or pretty-printed across several lines; both are
accepted. Two event kinds matter here:

* ``{"osv": {...}}`` describes an advisory (ID, aliases, summary, severity).
* ``{"finding": {...}}`` reports that an advisory affects the scanned code,
  with an optional fixed version and a call-stack trace.

All other event kinds (``config``, ``progress``, ...) are ignored.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from typing import Any, TextIO

from .errors import ScanModeError, ScanParseError
from .models import Finding
from .severity import better_severity, normalize_id, resolve_osv_severity

logger = logging.getLogger(__name__)

SCAN_MODE_SOURCE = "source"
SCAN_MODE_BINARY = "binary"
SCAN_MODES = (SCAN_MODE_SOURCE, SCAN_MODE_BINARY)

_decoder = json.JSONDecoder()


def normalize_scan_mode(value: str) -> str:
    """Validate a scan mode, case-insensitively."""
    normalized = value.strip().lower()
    if normalized not in SCAN_MODES:
        raise ScanModeError(
            f"unsupported scan mode {value!r} (valid values: {', '.join(SCAN_MODES)})"
        )
    return normalized


def unique_strings(values: Iterable[str]) -> list[str]:
    """Trim values, dropping blanks and duplicates while keeping order."""
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        normalized = value.strip()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        result.append(normalized)
    return result


def iter_events(text: str) -> Iterator[tuple[int, dict[str, Any]]]:
    """Decode a stream of concatenated JSON objects.

    Yields ``(line_number, event)`` pairs, where the line is the one the
    object starts on.

    Raises ScanParseError on the first malformed value; nothing decoded
    before it is usable on its own.
    """
    position = 0
    counted = 0
    line_number = 1
    length = len(text)
    while True:
        while position < length and text[position].isspace():
            position += 1
        if position >= length:
            return
        line_number += text.count("\n", counted, position)
        counted = position
        try:
            event, position = _decoder.raw_decode(text, position)
        except json.JSONDecodeError as exc:
            raise ScanParseError(exc.lineno, exc.msg) from exc
        if not isinstance(event, dict):
            raise ScanParseError(line_number, "expected a JSON object")
        yield line_number, event


def _event_section(event: dict[str, Any], key: str) -> dict[str, Any] | None:
    section = event.get(key)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ValueError(f"{key!r} must be a JSON object")
    return section


def _string_field(section: dict[str, Any], key: str) -> str:
    value = section.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key!r} must be a string")
    return value


def _string_list(section: dict[str, Any], key: str) -> list[str]:
    value = section.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key!r} must be a list of strings")
    return value


def trace_is_reachable(trace: list[Any]) -> bool:
    """Decide source-mode reachability from a finding's call-stack trace.

    A single frame with no package or function means the scanner found no
    concrete call path.
    """
    if len(trace) > 1:
        return True
    if len(trace) == 1:
        frame = trace[0] if isinstance(trace[0], dict) else {}
        package = str(frame.get("package") or "").strip()
        function = str(frame.get("function") or "").strip()
        return bool(package and function)
    return False


class FindingAggregator:
    """Accumulates scanner events into findings keyed by canonical ID."""

    def __init__(self, scan_mode: str = SCAN_MODE_SOURCE):
        self.scan_mode = normalize_scan_mode(scan_mode)
        self._findings: dict[str, Finding] = {}

    def _ensure(self, raw_id: str) -> Finding:
        finding_id = normalize_id(raw_id)
        entry = self._findings.get(finding_id)
        if entry is None:
            entry = Finding(id=finding_id)
            self._findings[finding_id] = entry
        return entry

    def add_event(self, event: dict[str, Any]) -> None:
        """Apply one decoded event."""
        osv = _event_section(event, "osv")
        if osv is not None:
            self._apply_osv(osv)

        finding = _event_section(event, "finding")
        if finding is not None:
            self._apply_finding(finding)

    def _apply_osv(self, osv: dict[str, Any]) -> None:
        entry = self._ensure(_string_field(osv, "id"))
        entry.aliases = unique_strings([*entry.aliases, *_string_list(osv, "aliases")])

        summary = _string_field(osv, "summary").strip()
        if summary:
            entry.summary = summary

        database_specific = _event_section(osv, "database_specific") or {}
        url = _string_field(database_specific, "url").strip()
        if url:
            entry.url = url

        candidate = resolve_osv_severity(osv)
        if candidate is not None and better_severity(candidate, entry.osv_severity):
            entry.osv_severity = candidate

    def _apply_finding(self, finding: dict[str, Any]) -> None:
        entry = self._ensure(_string_field(finding, "osv"))

        fixed = _string_field(finding, "fixed_version").strip()
        if fixed:
            entry.fixed_versions = unique_strings([*entry.fixed_versions, fixed])

        trace = finding.get("trace") or []
        if not isinstance(trace, list):
            raise ValueError("'trace' must be a list")
        if self.scan_mode == SCAN_MODE_BINARY or trace_is_reachable(trace):
            entry.reachable = True

    def findings(self) -> list[Finding]:
        """Return the accumulated findings sorted by canonical ID."""
        result = []
        for entry in self._findings.values():
            entry.aliases.sort()
            entry.fixed_versions.sort()
            result.append(entry)
        result.sort(key=lambda item: item.id)
        return result


def parse_scan_output(source: str | TextIO, scan_mode: str = SCAN_MODE_SOURCE) -> list[Finding]:
    """Parse scanner output into findings sorted by canonical ID."""
    text = source if isinstance(source, str) else source.read()
    aggregator = FindingAggregator(scan_mode)
    for line_number, event in iter_events(text):
        try:
            aggregator.add_event(event)
        except ValueError as exc:
            raise ScanParseError(line_number, str(exc)) from exc
    findings = aggregator.findings()
    logger.debug("Parsed %d findings (%s mode)", len(findings), aggregator.scan_mode)
    return findings
