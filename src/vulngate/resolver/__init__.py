"""Severity resolution against OSV, GHSA and NVD data."""

from .base import SeverityResolver
from .client import AdvisoryResolver
from .settings import (
    DEFAULT_GHSA_API_BASE_URL,
    DEFAULT_NVD_API_BASE_URL,
    ResolverSettings,
    RetryPolicy,
)

__all__ = [
    "AdvisoryResolver",
    "DEFAULT_GHSA_API_BASE_URL",
    "DEFAULT_NVD_API_BASE_URL",
    "ResolverSettings",
    "RetryPolicy",
    "SeverityResolver",
]
