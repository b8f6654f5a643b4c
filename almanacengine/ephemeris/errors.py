"""Errors raised by position providers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

__all__ = ["EphemerisError", "EphemerisFormatError", "EphemerisRangeError"]


class EphemerisError(RuntimeError):
    """Structured error raised when a provider cannot satisfy a request."""

    def __init__(
        self,
        message: str,
        *,
        error_code: str | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.context = dict(context or {})


class EphemerisRangeError(EphemerisError):
    """Raised when a date lies outside the span covered by the ephemeris."""

    def __init__(
        self,
        jd: float,
        earliest: float,
        latest: float,
        *,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        payload = {"jd": jd, "earliest": earliest, "latest": latest}
        payload.update(context or {})
        super().__init__(
            f"date {jd:.6f} outside ephemeris range [{earliest:.1f}, {latest:.1f}]",
            error_code="EPHEMERIS_RANGE",
            context=payload,
        )
        self.jd = jd
        self.earliest = earliest
        self.latest = latest


class EphemerisFormatError(EphemerisError):
    """Raised when ephemeris data cannot be read or is malformed."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(message, error_code="EPHEMERIS_FORMAT", context=context)
