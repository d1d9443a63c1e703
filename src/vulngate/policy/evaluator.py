"""Classify findings into the policy verdict buckets."""

import logging
import threading
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING

from .models import EvaluatedFinding, EvaluationResult, Finding, RiskOverride, Severity
from .overrides import match_override

if TYPE_CHECKING:
    from vulngate.resolver.base import SeverityResolver

logger = logging.getLogger(__name__)

_FAILING_LEVELS = (Severity.CRITICAL, Severity.HIGH, Severity.UNKNOWN)


def utc_date(now: datetime) -> date:
    """Calendar date of ``now`` in UTC; naive datetimes are taken as UTC."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(UTC).date()


def sort_evaluated(items: list[EvaluatedFinding]) -> None:
    """Order by severity level descending, then canonical ID ascending."""
    items.sort(key=lambda item: (-item.severity_rank, item.finding.id))


def evaluate_findings(
    findings: list[Finding],
    overrides: dict[str, RiskOverride],
    resolver: "SeverityResolver",
    now: datetime,
    cancel: threading.Event | None = None,
) -> EvaluationResult:
    """Partition findings into fail, warn, info, accepted and expired.

    A matching override always wins. Unreachable findings are never sent to
    the resolver. An UNKNOWN rating fails the gate.
    """
    today = utc_date(now)
    result = EvaluationResult()

    for finding in findings:
        override, matched_by_id = match_override(finding, overrides)
        if override is not None:
            evaluated = EvaluatedFinding(
                finding=finding, override=override, matched_by_id=matched_by_id
            )
            if override.is_expired(today):
                result.expired.append(evaluated)
            else:
                result.accepted.append(evaluated)
            continue

        if not finding.reachable:
            result.info.append(EvaluatedFinding(finding=finding))
            continue

        assessment, error = resolver.resolve(finding, cancel)
        evaluated = EvaluatedFinding(finding=finding, severity=assessment, resolver_error=error)
        if assessment.severity in _FAILING_LEVELS:
            result.fail.append(evaluated)
        else:
            result.warn.append(evaluated)

    for bucket in result.buckets().values():
        sort_evaluated(bucket)

    logger.debug(
        "Evaluated %d findings: %s",
        len(findings),
        ", ".join(f"{name}={len(items)}" for name, items in result.buckets().items()),
    )
    return result
