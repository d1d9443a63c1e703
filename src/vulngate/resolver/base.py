"""Base contract for severity resolvers."""

import threading
from abc import ABC, abstractmethod

from vulngate.policy.errors import ResolutionErrors
from vulngate.policy.models import Finding, SeverityAssessment


class SeverityResolver(ABC):
    """Resolves a severity rating for one finding.

    ``resolve`` always returns an assessment; the second element carries
    non-fatal lookup errors, if any. Cancellation is raised as
    ``ResolutionCancelled``.
    """

    @abstractmethod
    def resolve(
        self, finding: Finding, cancel: threading.Event | None = None
    ) -> tuple[SeverityAssessment, ResolutionErrors | None]:
        """Rate one finding."""
