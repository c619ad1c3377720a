"""
Ledger Client — Error Taxonomy
================================

Every failure raised across the ledger boundary. Authorization failures
(NoSigner, UserRejected) are kept apart from transport failures so callers
can render an accurate message.
"""

from __future__ import annotations

from typing import Any, Optional


class SkillGraphError(Exception):
    """Base exception for all SkillGraph errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class LedgerError(SkillGraphError):
    """Raised when a ledger operation fails."""


class LedgerUnavailable(LedgerError):
    """Raised when the ledger reports itself not ready."""


class LedgerReadError(LedgerError):
    """Raised on transport failure during a read."""


class LedgerWriteError(LedgerError):
    """Raised on transport or execution failure during a write."""


class AuthorizationError(LedgerError):
    """Raised when a write cannot be authorized."""


class NoSigner(AuthorizationError):
    """Raised when a write is attempted without a signing identity."""


class UserRejected(AuthorizationError):
    """Raised when the signing identity declines to authorize a write."""
