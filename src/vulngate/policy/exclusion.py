"""Drop findings already known from a baseline scan."""

from pathlib import Path

from .aggregator import SCAN_MODE_SOURCE, parse_scan_output
from .models import ExclusionSet, Finding
from .severity import normalize_id


def build_exclusion_set(findings: list[Finding]) -> ExclusionSet:
    """Collect every ID and alias of a baseline scan, and the reachable subset."""
    all_ids: set[str] = set()
    reachable_ids: set[str] = set()
    for finding in findings:
        for candidate in finding.candidate_ids:
            normalized = normalize_id(candidate)
            if not normalized:
                continue
            all_ids.add(normalized)
            if finding.reachable:
                reachable_ids.add(normalized)
    return ExclusionSet(all=frozenset(all_ids), reachable=frozenset(reachable_ids))


def collect_excluded_ids(path: Path | str) -> ExclusionSet:
    """Parse a baseline scan file into an exclusion set."""
    with open(Path(str(path).strip()), encoding="utf-8") as handle:
        findings = parse_scan_output(handle, SCAN_MODE_SOURCE)
    return build_exclusion_set(findings)


def match_exclusion(finding: Finding, excluded: ExclusionSet) -> tuple[bool, bool]:
    """Return whether the finding matches the ``all`` and ``reachable`` sets."""
    matched_all = False
    matched_reachable = False
    for candidate in finding.candidate_ids:
        normalized = normalize_id(candidate)
        if not normalized:
            continue
        matched_all = matched_all or normalized in excluded.all
        matched_reachable = matched_reachable or normalized in excluded.reachable
    return matched_all, matched_reachable


def filter_excluded(findings: list[Finding], excluded: ExclusionSet) -> list[Finding]:
    """Remove baseline findings.

    A finding that was unreachable in the baseline but is reachable now is
    kept.
    """
    if not excluded:
        return findings

    result = []
    for finding in findings:
        matched_all, matched_reachable = match_exclusion(finding, excluded)
        if matched_reachable or (matched_all and not finding.reachable):
            continue
        result.append(finding)
    return result
