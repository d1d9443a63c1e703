"""GitHub Security Advisory severity lookups."""

import logging
import threading
from typing import Any
from urllib.parse import quote

from vulngate.policy.errors import AuthorizationFailure, LookupFailure, RateLimitFailure
from vulngate.policy.models import SeverityAssessment, SeverityMethod
from vulngate.policy.severity import better_severity, normalize_id, normalize_severity, parse_score

from .cache_mixin import CachedLookup
from .helpers import as_dict, parse_base_url
from .retry import fetch_with_retry

logger = logging.getLogger(__name__)

SOURCE = "ghsa"

GITHUB_API_VERSION = "2022-11-28"
GHSA_401_MESSAGE = (
    "Missing or invalid GHSA token. Remove GHSA_TOKEN_FILE to use unauthenticated access, "
    "or configure a valid token."
)
GHSA_403_MESSAGE = (
    "GHSA token is valid but access is forbidden. Check token scope and account permissions."
)


def advisory_lookup_url(base_url: str, advisory_id: str) -> str:
    """Append the path-escaped advisory ID to the base URL path."""
    url = parse_base_url(base_url)
    path = url.path.rstrip("/") + "/" + quote(advisory_id, safe="")
    return str(url.copy_with(path=path))


def best_ghsa_severity(payload: Any, fallback_source: str) -> SeverityAssessment:
    """Pick the best rating from a GHSA advisory body.

    Candidates are the top-level ``severity`` (with ``cvss.score`` when
    present) and the ``cvss_severities`` v4 and v3 entries.
    """
    payload = as_dict(payload)
    ghsa_id = payload.get("ghsa_id")
    source = normalize_id(ghsa_id) if isinstance(ghsa_id, str) else ""
    if not source:
        source = normalize_id(fallback_source)

    def _candidate(raw_severity: Any, score: float) -> SeverityAssessment:
        label = raw_severity if isinstance(raw_severity, str) else ""
        return SeverityAssessment(
            severity=normalize_severity(label, score),
            score=score,
            source=source,
            method=SeverityMethod.GHSA,
        )

    best = SeverityAssessment(source=source, method=SeverityMethod.GHSA)
    top_level_score = parse_score(as_dict(payload.get("cvss")).get("score"))
    candidates = [_candidate(payload.get("severity"), top_level_score or 0.0)]

    cvss_severities = as_dict(payload.get("cvss_severities"))
    for key in ("cvss_v4", "cvss_v3"):
        entry = as_dict(cvss_severities.get(key))
        candidates.append(_candidate(entry.get("severity"), parse_score(entry.get("score")) or 0.0))

    for candidate in candidates:
        if better_severity(candidate, best):
            best = candidate
    return best


class GHSALookupMixin:
    """Resolve GHSA identifiers through the GitHub advisory API."""

    def lookup_ghsa(self, ghsa_id: str, cancel: threading.Event | None = None) -> CachedLookup:
        """Rate one GHSA advisory; failures come back as (UNKNOWN, error) and are cached.

        There is no offline snapshot for GHSA, so offline mode always fails.
        """
        advisory = normalize_id(ghsa_id)
        cached = self.read_cache(advisory)
        if cached is not None:
            logger.debug("GHSA cache hit for %s", advisory)
            return cached

        if self.settings.offline:
            return self.cache_failure(
                advisory,
                LookupFailure(
                    SOURCE,
                    advisory,
                    f"offline mode enabled and {advisory} requires live GHSA lookup",
                ),
            )

        try:
            url = advisory_lookup_url(self.settings.ghsa_base_url, advisory)
        except ValueError as exc:
            return self.cache_failure(advisory, LookupFailure(SOURCE, advisory, str(exc)))

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
            "User-Agent": self.settings.user_agent,
        }
        if self.settings.ghsa_token:
            headers["Authorization"] = f"Bearer {self.settings.ghsa_token}"

        result = fetch_with_retry(
            self.client,
            url,
            headers,
            self.settings.retry,
            credentialed=bool(self.settings.ghsa_token),
            cancel=cancel,
        )
        if result.error is not None:
            return self.cache_failure(
                advisory,
                LookupFailure(
                    SOURCE, advisory, f"GHSA request for {advisory} failed: {result.error}"
                ),
            )

        response = result.response
        status = response.status_code
        if status in (401, 403):
            message = GHSA_401_MESSAGE if status == 401 else GHSA_403_MESSAGE
            logger.warning("GHSA API returned HTTP %d for %s", status, advisory)
            return self.cache_failure(
                advisory, AuthorizationFailure(SOURCE, advisory, status, message)
            )
        if status == 429:
            return self.cache_failure(
                advisory,
                RateLimitFailure(
                    SOURCE,
                    advisory,
                    f"GHSA API returned HTTP 429 for {advisory}. This indicates rate limiting. "
                    "Retry later, use unauthenticated fallback, or configure GHSA_TOKEN_FILE "
                    "for higher request limits",
                ),
            )
        if status != 200:
            return self.cache_failure(
                advisory,
                LookupFailure(SOURCE, advisory, f"GHSA API returned HTTP {status} for {advisory}"),
            )

        try:
            payload = response.json()
        except ValueError as exc:
            return self.cache_failure(
                advisory,
                LookupFailure(
                    SOURCE, advisory, f"GHSA API returned invalid JSON for {advisory}: {exc}"
                ),
            )

        assessment = best_ghsa_severity(payload, advisory)
        if not assessment.is_known:
            return self.write_cache(
                advisory,
                assessment,
                LookupFailure(
                    SOURCE, advisory, f"GHSA API returned no severity data for {advisory}"
                ),
            )
        return self.write_cache(advisory, assessment, None)
