"""Verification Tokens - mint and decode signed, time-limited email verification tokens.

Invariants:
    - Claims are exactly {user, creator, iat, exp}; creator is already normalized
    - Lifetime comes only from the ExpiresIn whitelist
    - Every decode failure (signature, format, expiry, missing claim) raises
      InvalidTokenError; the underlying reason is only logged

Design Decisions:
    - HS256 JWT via python-jose: shared secret from EMAIL_VERIFICATION_CONFIG,
      no key versioning (rotating the secret invalidates outstanding tokens)
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from jose import JWTError, jwt

from verimail.core.domain_types import Creator, ExpiresIn, UserId
from verimail.core.errors import InvalidTokenError

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class TokenClaims:
    user: UserId
    creator: Creator


def mint_token(
    user_id: UserId,
    creator: Creator,
    secret: str,
    expires_in: ExpiresIn,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    now: datetime | None = None,
) -> str:
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "user": str(user_id),
        "creator": creator,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + expires_in.delta).timestamp()),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(
    token: str, secret: str, *, algorithm: str = DEFAULT_ALGORITHM,
) -> TokenClaims:
    """Verify signature and expiry, return the bound claims."""
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.debug(f"Token rejected: {type(e).__name__}")
        raise InvalidTokenError()
    user, creator = payload.get("user"), payload.get("creator")
    if not isinstance(user, str) or not isinstance(creator, str):
        logger.debug("Token rejected: missing user/creator claim")
        raise InvalidTokenError()
    return TokenClaims(user=UserId(user), creator=Creator(creator))
