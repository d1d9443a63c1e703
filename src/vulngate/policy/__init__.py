"""Vulnerability policy gate core."""

from .aggregator import SCAN_MODE_BINARY, SCAN_MODE_SOURCE, normalize_scan_mode, parse_scan_output
from .errors import (
    AuthorizationFailure,
    LookupFailure,
    OverrideError,
    PolicyInputError,
    RateLimitFailure,
    ResolutionCancelled,
    ResolutionErrors,
    ScanModeError,
    ScanParseError,
    SnapshotError,
    VulnGateError,
)
from .evaluator import evaluate_findings
from .exclusion import build_exclusion_set, collect_excluded_ids, filter_excluded
from .models import (
    EvaluatedFinding,
    EvaluationResult,
    ExclusionSet,
    Finding,
    RiskOverride,
    Severity,
    SeverityAssessment,
    SeverityMethod,
)
from .overrides import load_overrides, match_override, parse_overrides
from .report import render_result
from .snapshot import load_severity_snapshot, parse_snapshot

__all__ = [
    "SCAN_MODE_BINARY",
    "SCAN_MODE_SOURCE",
    "AuthorizationFailure",
    "EvaluatedFinding",
    "EvaluationResult",
    "ExclusionSet",
    "Finding",
    "LookupFailure",
    "OverrideError",
    "PolicyInputError",
    "RateLimitFailure",
    "ResolutionCancelled",
    "ResolutionErrors",
    "RiskOverride",
    "ScanModeError",
    "ScanParseError",
    "Severity",
    "SeverityAssessment",
    "SeverityMethod",
    "SnapshotError",
    "VulnGateError",
    "build_exclusion_set",
    "collect_excluded_ids",
    "evaluate_findings",
    "filter_excluded",
    "load_overrides",
    "load_severity_snapshot",
    "match_override",
    "normalize_scan_mode",
    "parse_overrides",
    "parse_scan_output",
    "parse_snapshot",
    "render_result",
]
