"""Data models for the vulnerability policy gate."""

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum


class Severity(StrEnum):
    """Severity levels, ordered by ``rank``."""

    UNKNOWN = "UNKNOWN"
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.UNKNOWN: 0,
    Severity.LOW: 1,
    Severity.MEDIUM: 2,
    Severity.HIGH: 3,
    Severity.CRITICAL: 4,
}


class SeverityMethod(StrEnum):
    """Where a severity rating came from."""

    UNKNOWN = "unknown"
    OSV = "osv"
    GHSA = "ghsa"
    NVD = "nvd"


@dataclass(frozen=True)
class SeverityAssessment:
    """A severity rating for one advisory record.

    ``score`` is CVSS-like in [0, 10]; 0 means no score was provided.
    ``reason`` is only set for UNKNOWN ratings.
    """

    severity: Severity = Severity.UNKNOWN
    score: float = 0.0
    source: str = ""
    method: SeverityMethod = SeverityMethod.UNKNOWN
    reason: str = ""

    @property
    def is_known(self) -> bool:
        return self.severity != Severity.UNKNOWN


@dataclass
class Finding:
    """One vulnerability as reported by the scanner."""

    id: str
    aliases: list[str] = field(default_factory=list)
    summary: str = ""
    url: str = ""
    fixed_versions: list[str] = field(default_factory=list)
    reachable: bool = False
    osv_severity: SeverityAssessment = field(default_factory=SeverityAssessment)

    @property
    def candidate_ids(self) -> list[str]:
        """The finding's own ID followed by its aliases."""
        return [self.id, *self.aliases]


@dataclass(frozen=True)
class RiskOverride:
    """A justified, time-bounded risk acceptance."""

    id: str
    reason: str
    expires_on: date

    def is_expired(self, today: date) -> bool:
        """An override stays valid through its expiry day."""
        return today > self.expires_on


@dataclass
class EvaluatedFinding:
    """A finding joined with either its override or its resolved severity."""

    finding: Finding
    severity: SeverityAssessment | None = None
    override: RiskOverride | None = None
    matched_by_id: str = ""
    resolver_error: Exception | None = None

    @property
    def severity_rank(self) -> int:
        if self.severity is None:
            return 0
        return self.severity.severity.rank


@dataclass
class EvaluationResult:
    """Five disjoint buckets produced by the policy evaluator."""

    fail: list[EvaluatedFinding] = field(default_factory=list)
    warn: list[EvaluatedFinding] = field(default_factory=list)
    info: list[EvaluatedFinding] = field(default_factory=list)
    accepted: list[EvaluatedFinding] = field(default_factory=list)
    expired: list[EvaluatedFinding] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        """True when the gate should fail the build."""
        return bool(self.fail or self.expired)

    def buckets(self) -> dict[str, list[EvaluatedFinding]]:
        return {
            "fail": self.fail,
            "warn": self.warn,
            "info": self.info,
            "accepted": self.accepted,
            "expired": self.expired,
        }


@dataclass(frozen=True)
class ExclusionSet:
    """Identifiers seen in a baseline scan, and those reachable in it."""

    all: frozenset[str] = frozenset()
    reachable: frozenset[str] = frozenset()

    def __bool__(self) -> bool:
        return bool(self.all)
