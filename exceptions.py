#!/usr/bin/env python3
"""Errors raised by the GitHub platform client."""

from __future__ import annotations

from typing import Optional


class PlatformError(Exception):
    """Base exception for failed platform calls."""

    def __init__(self, reason: str, target: Optional[str] = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.target = target


class PlatformAuthError(PlatformError):
    """Raised when the token is missing, invalid or lacks access."""


class DiscoveryError(PlatformError):
    """Raised when listing repositories fails (transport or parse)."""


class ForkError(PlatformError):
    """Raised when a repository cannot be forked into the destination."""


class EditError(PlatformError):
    """Raised when repository topics cannot be updated."""


class ApiError(PlatformError):
    """Raised when a raw REST call is rejected or cannot be sent."""

    def __init__(
        self,
        reason: str,
        target: Optional[str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(reason, target)
        self.status_code = status_code
