"""Retrying HTTP fetch with cancellable exponential backoff."""

import logging
import threading
from dataclasses import dataclass
from enum import Enum

import httpx

from vulngate.policy.errors import ResolutionCancelled

from .settings import RetryPolicy

logger = logging.getLogger(__name__)


class FetchState(Enum):
    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    DONE = "done"
    CANCELLED = "cancelled"


@dataclass
class FetchResult:
    """Outcome of a retried GET.

    Exactly one of ``response`` and ``error`` is set. A response may still
    carry a retryable status (429/5xx) when attempts ran out.
    """

    response: httpx.Response | None = None
    error: httpx.TransportError | None = None
    attempts: int = 0


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500


def fetch_with_retry(
    client: httpx.Client,
    url: str,
    headers: dict[str, str],
    policy: RetryPolicy,
    credentialed: bool,
    cancel: threading.Event | None = None,
) -> FetchResult:
    """GET ``url``, retrying transport errors and HTTP 429/5xx.

    401/403 and every other status are returned straight away. Raises
    ResolutionCancelled when ``cancel`` fires before an attempt or during a
    backoff wait. A request already in flight is not interrupted; it is
    bounded by the client timeout, and a signal set meanwhile takes effect
    at the next backoff wait.
    """
    signal = cancel if cancel is not None else threading.Event()
    state = FetchState.ATTEMPTING
    result = FetchResult()
    attempt = 1

    while True:
        if state is FetchState.ATTEMPTING:
            if signal.is_set():
                state = FetchState.CANCELLED
                continue
            result = FetchResult(attempts=attempt)
            logger.debug("GET %s (attempt %d/%d)", url, attempt, policy.max_attempts)
            try:
                response = client.get(url, headers=headers)
            except httpx.TransportError as exc:
                result.error = exc
            else:
                result.response = response
                if not is_retryable_status(response.status_code):
                    state = FetchState.DONE
                    continue
            state = FetchState.BACKOFF if attempt < policy.max_attempts else FetchState.DONE

        elif state is FetchState.BACKOFF:
            delay = policy.delay(attempt, credentialed)
            logger.debug("Backing off %.2fs before retrying %s", delay, url)
            if signal.wait(delay):
                state = FetchState.CANCELLED
                continue
            attempt += 1
            state = FetchState.ATTEMPTING

        elif state is FetchState.CANCELLED:
            raise ResolutionCancelled(f"severity lookup cancelled: {url}")

        else:
            if attempt >= policy.max_attempts and (
                result.error is not None or is_retryable_status(result.response.status_code)
            ):
                logger.warning("Giving up on %s after %d attempts", url, attempt)
            return result
