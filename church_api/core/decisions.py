"""Structured authorization outcomes."""

from dataclasses import dataclass, field
from enum import Enum as PyEnum


class DenyReason(str, PyEnum):
    """Why an authorization decision was denied. All map to HTTP 403."""

    INSUFFICIENT_ROLE = "INSUFFICIENT_ROLE"
    OUT_OF_SCOPE = "OUT_OF_SCOPE"
    SELF_EMAIL_FORBIDDEN = "SELF_EMAIL_FORBIDDEN"
    RESTRICTED_PERMISSION_REQUIRES_COORDINATOR = "RESTRICTED_PERMISSION_REQUIRES_COORDINATOR"
    SYSTEM_ONLY_ROLE = "SYSTEM_ONLY_ROLE"


@dataclass(frozen=True)
class AccessDecision:
    """
    Result of an authorization check.

    Denials are returned, not raised, so callers must look at ``allowed``.
    ``details`` lists the offending items when a rule is about specific
    values (e.g. which requested permissions are restricted).
    """

    allowed: bool
    reason: DenyReason | None = None
    message: str | None = None
    details: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def allow(cls) -> "AccessDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str, details=()) -> "AccessDecision":
        return cls(allowed=False, reason=reason, message=message, details=tuple(details))

    def __bool__(self) -> bool:
        return self.allowed
