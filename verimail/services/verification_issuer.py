"""Verification Issuer - mint a creator-bound token and mail it to the user.

Invariants:
    - Preconditions in order: user exists, user unverified, config complete,
      expiry whitelisted; each fails before any token is minted or email sent
    - Issuance never changes the user's verification state
    - A failed dispatch is returned to the caller unmodified (no wrap, no retry)
"""

import logging

from verimail.config import get_settings
from verimail.core.config_bundle import (
    VerificationConfig, bundle_from_value, validate_bundle,
)
from verimail.core.domain_types import Creator, UserRecord, VerificationStatus
from verimail.core.envelope import Envelope
from verimail.core.errors import (
    DownstreamError, EmailAlreadyVerifiedError, UserNotFoundError,
)
from verimail.core.repository_protocols import UserStore
from verimail.core.verification_token import mint_token
from verimail.services.config_resolver import ConfigResolver
from verimail.services.email_dispatcher import EmailDispatcher

logger = logging.getLogger(__name__)


class VerificationTokenIssuer:

    def __init__(
        self,
        users: UserStore,
        resolver: ConfigResolver,
        dispatcher: EmailDispatcher,
    ):
        settings = get_settings()
        self.users = users
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.config_key = settings.email_verification_config_key
        self.algorithm = settings.jwt_algorithm

    async def request(self, email: str, creator: Creator) -> Envelope:
        user = await self._find_user(email)
        if user.status == VerificationStatus.VERIFIED:
            raise EmailAlreadyVerifiedError()

        lookup = await self.resolver.get(self.config_key)
        config = validate_bundle(bundle_from_value(lookup.value), VerificationConfig)

        token = mint_token(
            user.id, creator, config.email_jwt_secret,
            config.email_jwt_expires_in, algorithm=self.algorithm,
        )
        # Stored address, not the request's spelling: the lookup ignores case.
        result = await self.dispatcher.send(
            user.email,
            config.email_verification_template,
            {
                "token": token,
                "firstname": user.firstname,
                "lastname": user.lastname,
                "fullname": user.fullname,
                "email": user.email,
            },
        )
        if not result.sent:
            raise DownstreamError(result.to_envelope(), "email.send")

        logger.info(
            "Verification email sent",
            extra={"user_id": user.id, "creator": creator},
        )
        return Envelope.success("VERIFICATION_SEND")

    async def _find_user(self, email: str) -> UserRecord:
        response = await self.users.get_by_unique("email", email)
        if not response.ok:
            raise UserNotFoundError(email)
        return UserRecord.from_mapping(response.data)
