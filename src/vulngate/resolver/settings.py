"""Runtime settings for the advisory resolver."""

import random
from dataclasses import dataclass, field

from vulngate.policy.models import SeverityAssessment

DEFAULT_NVD_API_BASE_URL = "https://services.nvd.nist.gov/rest/json/cves/2.0"
DEFAULT_GHSA_API_BASE_URL = "https://api.github.com/advisories"
DEFAULT_USER_AGENT = "vulngate-policy/1.0"


@dataclass
class RetryPolicy:
    """Bounded exponential backoff for retryable lookups."""

    max_attempts: int = 3
    credentialed_base_delay: float = 0.3
    anonymous_base_delay: float = 0.75

    def delay(self, attempt: int, credentialed: bool) -> float:
        """Seconds to wait after a failed ``attempt`` (1-based)."""
        base = self.credentialed_base_delay if credentialed else self.anonymous_base_delay
        jitter = random.uniform(0, base / 2) if base > 0 else 0.0
        return base * (2 ** (attempt - 1)) + jitter


@dataclass
class ResolverSettings:
    """Endpoints, credentials and behaviour of an ``AdvisoryResolver``."""

    nvd_base_url: str = DEFAULT_NVD_API_BASE_URL
    nvd_api_key: str = ""
    ghsa_base_url: str = DEFAULT_GHSA_API_BASE_URL
    ghsa_token: str = ""
    timeout: float = 15.0
    offline: bool = False
    snapshot: dict[str, SeverityAssessment] = field(default_factory=dict)
    user_agent: str = DEFAULT_USER_AGENT
    retry: RetryPolicy = field(default_factory=RetryPolicy)
