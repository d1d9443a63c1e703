"""Test configuration and fixtures for vulngate."""

import json
import tempfile
import threading
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest

from vulngate.policy.errors import ResolutionErrors
from vulngate.policy.models import Finding, Severity, SeverityAssessment, SeverityMethod
from vulngate.resolver import AdvisoryResolver, ResolverSettings, RetryPolicy
from vulngate.resolver.base import SeverityResolver

NVD_URL = "https://nvd.test/rest/json/cves/2.0"
GHSA_URL = "https://ghsa.test/advisories"


class FakeResolver(SeverityResolver):
    """Returns canned assessments and records which findings were rated."""

    def __init__(
        self,
        ratings: dict[str, SeverityAssessment] | None = None,
        errors: dict[str, ResolutionErrors] | None = None,
    ):
        self.ratings = ratings or {}
        self.errors = errors or {}
        self.calls: list[str] = []

    def resolve(self, finding: Finding, cancel: threading.Event | None = None):
        self.calls.append(finding.id)
        assessment = self.ratings.get(finding.id, SeverityAssessment(source=finding.id))
        return assessment, self.errors.get(finding.id)


def rating(level: Severity, score: float = 0.0, source: str = "", method=SeverityMethod.NVD):
    return SeverityAssessment(severity=level, score=score, source=source, method=method)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_json(temp_dir: Path) -> Callable[[str, Any], Path]:
    """Write a JSON document into the temp dir and return its path."""

    def _write(name: str, document: Any) -> Path:
        path = temp_dir / name
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_events(temp_dir: Path) -> Callable[[str, list[dict[str, Any]]], Path]:
    """Write scanner events as JSON lines and return the file path."""

    def _write(name: str, events: list[dict[str, Any]]) -> Path:
        path = temp_dir / name
        path.write_text("\n".join(json.dumps(event) for event in events) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def instant_retry() -> RetryPolicy:
    """Retry policy without backoff delays."""
    return RetryPolicy(credentialed_base_delay=0.0, anonymous_base_delay=0.0)


@pytest.fixture
def make_resolver(instant_retry: RetryPolicy) -> Generator[Callable[..., AdvisoryResolver], None, None]:
    """Build resolvers pointed at the mocked test endpoints."""
    created: list[AdvisoryResolver] = []

    def _make(**overrides: Any) -> AdvisoryResolver:
        options: dict[str, Any] = {
            "nvd_base_url": NVD_URL,
            "ghsa_base_url": GHSA_URL,
            "retry": instant_retry,
        }
        options.update(overrides)
        resolver = AdvisoryResolver(ResolverSettings(**options))
        created.append(resolver)
        return resolver

    yield _make
    for resolver in created:
        resolver.close()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, temp_dir: Path) -> Path:
    """Isolate config lookups from the developer's environment."""
    for key in (
        "NVD_API_KEY",
        "GHSA_TOKEN",
        "GITHUB_TOKEN",
        "VULNGATE_NVD_API_BASE_URL",
        "VULNGATE_GHSA_API_BASE_URL",
        "VULNGATE_REQUEST_TIMEOUT",
    ):
        monkeypatch.delenv(key, raising=False)
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setattr(Path, "home", lambda: home)
    workdir = temp_dir / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir
