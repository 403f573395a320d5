"""
Error signals of the authorization engine.

Resolution and evaluation report failures as AuthError values; only the
stores raise, and only StoreUnavailable, which the resolver turns into a
RESOLUTION_FAILURE.
"""
import enum
from dataclasses import dataclass


class AuthErrorKind(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    RESOLUTION_FAILURE = "resolution_failure"


# Reason strings handed to callers. Kept small and fixed.
REASON_NOT_AUTHENTICATED = "not authenticated"
REASON_INSUFFICIENT_PERMISSIONS = "insufficient permissions"
REASON_NO_PROJECT_ACCESS = "no project access"
REASON_CHECK_FAILED = "authorization check failed"


@dataclass(frozen=True)
class AuthError:
    """A denied or failed authorization step."""
    kind: AuthErrorKind
    reason: str

    @classmethod
    def unauthenticated(cls) -> "AuthError":
        return cls(AuthErrorKind.UNAUTHENTICATED, REASON_NOT_AUTHENTICATED)

    @classmethod
    def forbidden(cls, reason: str = REASON_INSUFFICIENT_PERMISSIONS) -> "AuthError":
        return cls(AuthErrorKind.FORBIDDEN, reason)

    @classmethod
    def resolution_failure(cls) -> "AuthError":
        return cls(AuthErrorKind.RESOLUTION_FAILURE, REASON_CHECK_FAILED)


class StoreUnavailable(Exception):
    """A user or membership lookup could not be completed."""

    def __init__(self, store: str, message: str):
        self.store = store
        super().__init__(f"{store}: {message}")
