"""Exception taxonomy for the vulnerability policy gate."""


class VulnGateError(Exception):
    """Base class for all policy gate errors."""


class PolicyInputError(VulnGateError):
    """A fatal problem with an input file; the run cannot produce a verdict."""


class ScanParseError(PolicyInputError):
    """Scanner output could not be decoded."""

    def __init__(self, line_number: int, message: str):
        self.line_number = line_number
        super().__init__(f"line {line_number}: {message}")


class OverrideError(PolicyInputError):
    """The override registry is malformed or contains an invalid entry."""


class SnapshotError(PolicyInputError):
    """The offline severity snapshot is malformed."""


class ScanModeError(PolicyInputError):
    """An unsupported scan mode was requested."""


class LookupFailure(VulnGateError):
    """Severity lookup for a single identifier failed."""

    def __init__(self, source: str, identifier: str, message: str):
        self.source = source
        self.identifier = identifier
        super().__init__(message)


class AuthorizationFailure(LookupFailure):
    """The advisory API rejected our credentials (HTTP 401/403)."""

    def __init__(self, source: str, identifier: str, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(source, identifier, message)


class RateLimitFailure(LookupFailure):
    """The advisory API kept answering HTTP 429."""


class ResolutionCancelled(VulnGateError):
    """Resolution was aborted by the caller's cancellation signal."""


class ResolutionErrors(VulnGateError):
    """Non-fatal lookup errors collected across severity sources.

    ``errors`` keeps the ``(source, exception)`` pairs in the order they
    happened so callers can inspect each cause.
    """

    def __init__(self, errors: list[tuple[str, Exception]]):
        self.errors = list(errors)
        super().__init__("\n".join(str(error) for _, error in self.errors))

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    @classmethod
    def join(cls, *groups: "ResolutionErrors | None") -> "ResolutionErrors | None":
        """Merge several optional error groups, returning None when all are empty."""
        merged: list[tuple[str, Exception]] = []
        for group in groups:
            if group:
                merged.extend(group.errors)
        if not merged:
            return None
        return cls(merged)
