"""Shared helpers for advisory API lookups."""

from typing import Any

import httpx


def parse_base_url(base_url: str) -> httpx.URL:
    """Validate an advisory API base URL, raising ValueError when unusable."""
    trimmed = base_url.strip()
    if not trimmed:
        raise ValueError("advisory base URL is required")
    try:
        url = httpx.URL(trimmed)
    except httpx.InvalidURL as exc:
        raise ValueError(f"invalid advisory base URL {trimmed!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ValueError(f"invalid advisory base URL {trimmed!r}")
    return url


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}
