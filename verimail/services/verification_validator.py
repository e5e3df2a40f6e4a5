"""Verification Validator - check a token and commit the Unverified -> Verified transition.

Invariants:
    - The user record is only read after signature, expiry and creator checks pass
    - BAD_CREATOR and INVALID_TOKEN never touch the user store
    - The transition is a conditional update guarded on emailVerified=False;
      losing that race reads as EMAIL_ALREADY_VERIFIED, like a sequential retry
    - Any other collaborator failure is forwarded verbatim
"""

import logging

from verimail.config import get_settings
from verimail.core.config_bundle import SigningConfig, bundle_from_value, validate_bundle
from verimail.core.domain_types import Creator, UserRecord, VerificationStatus
from verimail.core.envelope import Envelope
from verimail.core.errors import (
    BadCreatorError, DownstreamError, EmailAlreadyVerifiedError,
)
from verimail.core.repository_protocols import (
    UPDATE_CONFLICT_CODE, UPDATE_CONFLICT_I18N, UserStore,
)
from verimail.core.verification_token import decode_token
from verimail.services.config_resolver import ConfigResolver

logger = logging.getLogger(__name__)


class VerificationTokenValidator:

    def __init__(self, users: UserStore, resolver: ConfigResolver):
        settings = get_settings()
        self.users = users
        self.resolver = resolver
        self.config_key = settings.email_verification_config_key
        self.algorithm = settings.jwt_algorithm

    async def verify(self, token: str, creator: Creator) -> Envelope:
        lookup = await self.resolver.get(self.config_key)
        config = validate_bundle(bundle_from_value(lookup.value), SigningConfig)

        claims = decode_token(token, config.email_jwt_secret, algorithm=self.algorithm)
        if claims.creator != creator:
            logger.warning(
                "Token presented by a different creator",
                extra={"creator": creator, "user_id": claims.user},
            )
            raise BadCreatorError()

        found = await self.users.get_by_id(claims.user)
        if not found.ok:
            raise DownstreamError(found, "user.getById")
        user = UserRecord.from_mapping(found.data)
        if user.status == VerificationStatus.VERIFIED:
            raise EmailAlreadyVerifiedError()

        updated = await self.users.update(
            user.id, {"emailVerified": True}, expected={"emailVerified": False},
        )
        if _lost_race(updated):
            raise EmailAlreadyVerifiedError()
        if not updated.ok:
            raise DownstreamError(updated, "user.update")

        logger.info("Email verified", extra={"user_id": user.id, "creator": creator})
        return Envelope.success("EMAIL_VERIFIED")


def _lost_race(response: Envelope) -> bool:
    return (
        response.code == UPDATE_CONFLICT_CODE
        and response.i18n == UPDATE_CONFLICT_I18N
    )
