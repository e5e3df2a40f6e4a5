"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - Creator values are always normalized (stripped, casefolded) before use
    - ExpiresIn is the whitelist of token lifetimes: nothing else can be minted
    - VerificationStatus has one transition: UNVERIFIED -> VERIFIED

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
Creator = NewType("Creator", str)


def normalize_creator(raw: str) -> Creator:
    """Trim and case-fold a caller identity."""
    return Creator(raw.strip().casefold())


# ─── Enums ───────────────────────────────────────────────────────

class ExpiresIn(str, Enum):
    """Whitelisted verification token lifetimes."""
    ONE_HOUR = "1h"
    TWO_HOURS = "2h"
    THREE_HOURS = "3h"
    SIX_HOURS = "6h"
    TWELVE_HOURS = "12h"
    ONE_DAY = "1d"

    @property
    def delta(self) -> timedelta:
        amount, unit = int(self.value[:-1]), self.value[-1]
        if unit == "d":
            return timedelta(days=amount)
        return timedelta(hours=amount)

    @classmethod
    def literals(cls) -> list[str]:
        return [member.value for member in cls]


class DispatchStatus(str, Enum):
    """Outcome of a single send attempt."""
    SENT = "sent"
    NOT_SENT = "not_sent"


class VerificationStatus(str, Enum):
    """Per-user email verification state. VERIFIED is terminal."""
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


# ─── Records ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class UserRecord:
    """Read-only view of a user owned by the user store."""
    id: UserId
    email: str
    firstname: str
    lastname: str
    email_verified: bool

    @property
    def fullname(self) -> str:
        return f"{self.firstname} {self.lastname}".strip()

    @property
    def status(self) -> VerificationStatus:
        if self.email_verified:
            return VerificationStatus.VERIFIED
        return VerificationStatus.UNVERIFIED

    @classmethod
    def from_mapping(cls, raw: dict[str, Any]) -> "UserRecord":
        """Build from the user store wire shape (camelCase emailVerified)."""
        return cls(
            id=UserId(str(raw["id"])),
            email=raw.get("email", ""),
            firstname=raw.get("firstname") or "",
            lastname=raw.get("lastname") or "",
            email_verified=bool(raw.get("emailVerified", False)),
        )
