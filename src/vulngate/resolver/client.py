"""Multi-source severity resolver."""

import dataclasses
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

import httpx

from vulngate.policy.errors import LookupFailure, ResolutionErrors
from vulngate.policy.models import Finding, SeverityAssessment, SeverityMethod
from vulngate.policy.severity import better_severity, normalize_id, unknown_assessment

from .base import SeverityResolver
from .cache_mixin import CachedLookup, ResolverCacheMixin
from .ghsa_mixin import GHSALookupMixin
from .nvd_mixin import NVDLookupMixin
from .settings import ResolverSettings

logger = logging.getLogger(__name__)

OSV_UNAVAILABLE = "OSV severity unavailable in scanner input"


@dataclass
class SourceResolution:
    """Best rating one source produced across all of a finding's candidates."""

    best: SeverityAssessment
    errors: ResolutionErrors | None = None
    has_candidates: bool = False
    resolved: bool = False
    returned_unknown: bool = False


def collect_ids_with_prefix(finding: Finding, prefix: str) -> list[str]:
    """Canonical IDs (own ID and aliases) carrying ``prefix``, deduplicated and sorted."""
    return sorted(
        {
            normalized
            for candidate in finding.candidate_ids
            if (normalized := normalize_id(candidate)).startswith(prefix)
        }
    )


def embedded_osv_severity(finding: Finding) -> SeverityAssessment | None:
    """The scanner's own rating, when it is known."""
    if not finding.osv_severity.is_known:
        return None
    return dataclasses.replace(
        finding.osv_severity,
        source=finding.osv_severity.source or normalize_id(finding.id),
        method=SeverityMethod.OSV,
    )


def source_unknown_reason(name: str, result: SourceResolution, no_alias_message: str) -> str:
    if not result.has_candidates:
        return no_alias_message
    if result.returned_unknown:
        return f"{name} lookup returned no severity data"
    return f"{name} lookup failed"


def build_unknown_reason(ghsa: SourceResolution, nvd: SourceResolution) -> str:
    """Explain why no source produced a rating."""
    if not ghsa.has_candidates and not nvd.has_candidates:
        return f"{OSV_UNAVAILABLE}, no CVE/GHSA aliases found"
    return ", ".join(
        [
            OSV_UNAVAILABLE,
            source_unknown_reason("GHSA", ghsa, "no GHSA aliases found"),
            source_unknown_reason("NVD", nvd, "no CVE aliases found"),
        ]
    )


class AdvisoryResolver(SeverityResolver, GHSALookupMixin, NVDLookupMixin, ResolverCacheMixin):
    """Rates findings from OSV data, then GHSA, then NVD.

    One instance serves one policy run. ``resolve`` may be called from
    several threads at once; lookups share a cache of per-identifier
    outcomes, failures included.
    """

    def __init__(
        self, settings: ResolverSettings | None = None, client: httpx.Client | None = None
    ):
        self.settings = settings or ResolverSettings()
        self.client = client or httpx.Client(timeout=self.settings.timeout)
        self._owns_client = client is None
        self._init_cache()

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "AdvisoryResolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def resolve(
        self, finding: Finding, cancel: threading.Event | None = None
    ) -> tuple[SeverityAssessment, ResolutionErrors | None]:
        osv = embedded_osv_severity(finding)
        if osv is not None:
            return osv, None

        ghsa_candidates = collect_ids_with_prefix(finding, "GHSA-")
        ghsa = self._resolve_best(ghsa_candidates, self.lookup_ghsa, cancel)
        if ghsa.resolved:
            return ghsa.best, ghsa.errors

        cve_candidates = collect_ids_with_prefix(finding, "CVE-")
        nvd = self._resolve_best(cve_candidates, self.lookup_cve, cancel)
        errors = ResolutionErrors.join(ghsa.errors, nvd.errors)
        if nvd.resolved:
            return nvd.best, errors

        if ghsa_candidates:
            source = ghsa_candidates[0]
        elif cve_candidates:
            source = cve_candidates[0]
        else:
            source = normalize_id(finding.id)
        reason = build_unknown_reason(ghsa, nvd)
        logger.debug("No severity for %s: %s", finding.id, reason)
        return unknown_assessment(source, reason), errors

    def _resolve_best(
        self,
        candidates: list[str],
        lookup: Callable[[str, threading.Event | None], CachedLookup],
        cancel: threading.Event | None,
    ) -> SourceResolution:
        result = SourceResolution(best=unknown_assessment(""), has_candidates=bool(candidates))
        failures: list[tuple[str, LookupFailure]] = []
        for candidate in candidates:
            assessment, error = lookup(candidate, cancel)
            if error is not None:
                failures.append((error.source, error))
                continue
            if not assessment.is_known:
                result.returned_unknown = True
                continue
            if not result.resolved or better_severity(assessment, result.best):
                result.best = assessment
            result.resolved = True
        if failures:
            result.errors = ResolutionErrors(failures)
        return result
