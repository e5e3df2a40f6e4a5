"""Request Dependencies - per-request wiring of collaborators and services.

Invariants:
    - Every request builds its own stores/services on its own DB session
      (no shared mutable state between concurrent actions)
    - The creator identity is read once from the request header, normalized,
      and passed explicitly to the services

Design Decisions:
    - get_mail_transport is its own dependency so tests can override the SMTP
      boundary without touching the services
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from verimail.config import get_settings
from verimail.core.domain_types import Creator, normalize_creator
from verimail.core.errors import CreatorRequiredError
from verimail.core.repository_protocols import MailTransport
from verimail.infrastructure.config_store import SqlConfigStore
from verimail.infrastructure.database import get_db
from verimail.infrastructure.smtp_transport import SmtpMailTransport
from verimail.infrastructure.user_store import SqlUserStore
from verimail.services.config_resolver import ConfigResolver
from verimail.services.email_dispatcher import EmailDispatcher
from verimail.services.verification_issuer import VerificationTokenIssuer
from verimail.services.verification_validator import VerificationTokenValidator


def get_creator(request: Request) -> Creator:
    raw = request.headers.get(get_settings().creator_header, "")
    creator = normalize_creator(raw)
    if not creator:
        raise CreatorRequiredError()
    return creator


def get_mail_transport() -> MailTransport:
    return SmtpMailTransport(timeout_seconds=get_settings().smtp_timeout_seconds)


def get_config_resolver(db: AsyncSession = Depends(get_db)) -> ConfigResolver:
    return ConfigResolver(SqlConfigStore(db))


def get_user_store(db: AsyncSession = Depends(get_db)) -> SqlUserStore:
    return SqlUserStore(db)


def get_dispatcher(
    resolver: ConfigResolver = Depends(get_config_resolver),
    transport: MailTransport = Depends(get_mail_transport),
) -> EmailDispatcher:
    return EmailDispatcher(resolver, transport)


def get_issuer(
    users: SqlUserStore = Depends(get_user_store),
    resolver: ConfigResolver = Depends(get_config_resolver),
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
) -> VerificationTokenIssuer:
    return VerificationTokenIssuer(users, resolver, dispatcher)


def get_validator(
    users: SqlUserStore = Depends(get_user_store),
    resolver: ConfigResolver = Depends(get_config_resolver),
) -> VerificationTokenValidator:
    return VerificationTokenValidator(users, resolver)
