"""
Exception types and error helpers for user-facing diagnostics.
"""

from collections.abc import Mapping
from typing import Any, Optional


class LegmatchError(Exception):
    """Base class for all legmatch errors."""


class CatalogError(LegmatchError, ValueError):
    """The combination catalog source is missing or malformed."""


class CatalogNotLoadedError(LegmatchError, RuntimeError):
    """Classification was attempted against a catalog that never loaded."""


def build_error(
    error: str,
    *,
    details: Optional[str] = None,
    hint: Optional[str] = None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"error": error}
    if details:
        payload["details"] = details
    if hint:
        payload["hint"] = hint
    return payload


def error_lines(payload: Mapping[str, Any]) -> list[str]:
    lines = []
    error = payload.get("error") or "Unknown error."
    lines.append(f"Error: {error}")
    details = payload.get("details")
    if details:
        lines.append(f"Details: {details}")
    hint = payload.get("hint")
    if hint:
        lines.append(f"Hint: {hint}")
    return lines
