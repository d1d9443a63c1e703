"""NVD (CVE) severity lookups."""

import logging
import threading
from typing import Any

from vulngate.policy.errors import AuthorizationFailure, LookupFailure, RateLimitFailure
from vulngate.policy.models import Severity, SeverityAssessment, SeverityMethod
from vulngate.policy.severity import normalize_id, normalize_severity, parse_score

from .cache_mixin import CachedLookup
from .helpers import as_dict, as_list, parse_base_url
from .retry import fetch_with_retry

logger = logging.getLogger(__name__)

SOURCE = "nvd"

NVD_401_MESSAGE = "Missing or invalid NVD API key. Please configure a valid API key."
NVD_403_MESSAGE = (
    "NVD API key valid but lacks required permissions. Please check your API key configuration."
)

_METRIC_FAMILIES = ("cvssMetricV31", "cvssMetricV30", "cvssMetricV2")


def nvd_lookup_url(base_url: str, cve_id: str) -> str:
    """Set the ``cveId`` query parameter on the NVD base URL."""
    url = parse_base_url(base_url)
    return str(url.copy_set_param("cveId", cve_id))


def best_nvd_severity(payload: Any) -> tuple[Severity, float]:
    """Pick the highest-rated CVSS metric across all returned records.

    Metric families are scanned v3.1, v3.0, v2; ties on level go to the
    higher base score.
    """
    best_severity = Severity.UNKNOWN
    best_score = -1.0

    for vulnerability in as_list(as_dict(payload).get("vulnerabilities")):
        metrics = as_dict(as_dict(as_dict(vulnerability).get("cve")).get("metrics"))
        for family in _METRIC_FAMILIES:
            for metric in as_list(metrics.get(family)):
                metric = as_dict(metric)
                cvss_data = as_dict(metric.get("cvssData"))
                score = parse_score(cvss_data.get("baseScore")) or 0.0
                # v2 metrics carry baseSeverity next to cvssData
                label = cvss_data.get("baseSeverity") or metric.get("baseSeverity")
                severity = normalize_severity(label if isinstance(label, str) else "", score)
                if severity.rank > best_severity.rank:
                    best_severity = severity
                    best_score = score
                elif severity.rank == best_severity.rank and score > best_score:
                    best_score = score

    return best_severity, max(best_score, 0.0)


class NVDLookupMixin:
    """Resolve CVE identifiers through the snapshot or the NVD API."""

    def lookup_cve(self, cve_id: str, cancel: threading.Event | None = None) -> CachedLookup:
        """Rate one CVE; failures come back as (UNKNOWN, error) and are cached."""
        cve = normalize_id(cve_id)
        cached = self.read_cache(cve)
        if cached is not None:
            logger.debug("NVD cache hit for %s", cve)
            return cached

        snapshot_entry = self.settings.snapshot.get(cve)
        if snapshot_entry is not None:
            return self.write_cache(cve, snapshot_entry, None)

        if self.settings.offline:
            return self.cache_failure(
                cve,
                LookupFailure(
                    SOURCE, cve, f"offline mode enabled and {cve} is missing from severity snapshot"
                ),
            )

        try:
            url = nvd_lookup_url(self.settings.nvd_base_url, cve)
        except ValueError as exc:
            return self.cache_failure(cve, LookupFailure(SOURCE, cve, str(exc)))

        headers = {"Accept": "application/json", "User-Agent": self.settings.user_agent}
        if self.settings.nvd_api_key:
            headers["apiKey"] = self.settings.nvd_api_key

        result = fetch_with_retry(
            self.client,
            url,
            headers,
            self.settings.retry,
            credentialed=bool(self.settings.nvd_api_key),
            cancel=cancel,
        )
        if result.error is not None:
            return self.cache_failure(
                cve, LookupFailure(SOURCE, cve, f"NVD request for {cve} failed: {result.error}")
            )

        response = result.response
        status = response.status_code
        if status in (401, 403):
            message = NVD_401_MESSAGE if status == 401 else NVD_403_MESSAGE
            logger.warning("NVD API returned HTTP %d for %s", status, cve)
            return self.cache_failure(cve, AuthorizationFailure(SOURCE, cve, status, message))
        if status == 429:
            return self.cache_failure(
                cve,
                RateLimitFailure(
                    SOURCE,
                    cve,
                    f"NVD API returned HTTP 429 for {cve}. This indicates rate limiting. "
                    "Retry later, or configure NVD_API_KEY_FILE or NVD_API_KEY for higher "
                    "request limits",
                ),
            )
        if status != 200:
            return self.cache_failure(
                cve, LookupFailure(SOURCE, cve, f"NVD API returned HTTP {status} for {cve}")
            )

        try:
            payload = response.json()
        except ValueError as exc:
            return self.cache_failure(
                cve, LookupFailure(SOURCE, cve, f"NVD API returned invalid JSON for {cve}: {exc}")
            )

        severity, score = best_nvd_severity(payload)
        assessment = SeverityAssessment(
            severity=severity, score=score, source=cve, method=SeverityMethod.NVD
        )
        if not assessment.is_known:
            return self.write_cache(
                cve,
                assessment,
                LookupFailure(SOURCE, cve, f"NVD API returned no severity data for {cve}"),
            )
        return self.write_cache(cve, assessment, None)
