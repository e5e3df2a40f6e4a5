"""SMTP Mail Transport - MailTransport collaborator built on aiosmtplib.

Invariants:
    - secure=True means implicit TLS (SMTPS); otherwise STARTTLS is negotiated
      when the server offers it
    - Recipients refused by the server are reported in `rejected`, not raised
    - Every SMTP or socket failure is mapped to MailTransportError

Design Decisions:
    - One connection per message: dispatch volume is a handful of transactional
      emails per request, pooling would hold credentials for no gain
"""

import logging
from email.message import EmailMessage
from email.utils import formataddr

import aiosmtplib

from verimail.core.dispatch import OutgoingMessage, TransportDescriptor, TransportReport
from verimail.core.errors import MailTransportError

logger = logging.getLogger(__name__)


def build_mime(message: OutgoingMessage) -> EmailMessage:
    mime = EmailMessage()
    mime["From"] = formataddr((message.from_name, message.from_address))
    mime["To"] = message.to
    mime["Subject"] = message.subject
    mime.set_content(message.html, subtype="html")
    return mime


class SmtpMailTransport:

    def __init__(self, timeout_seconds: float = 30.0):
        self.timeout_seconds = timeout_seconds

    async def deliver(
        self, descriptor: TransportDescriptor, message: OutgoingMessage,
    ) -> TransportReport:
        recipients = [message.to]
        try:
            errors, response = await aiosmtplib.send(
                build_mime(message),
                sender=message.from_address,
                recipients=recipients,
                hostname=descriptor.host,
                port=descriptor.port,
                username=descriptor.user or None,
                password=descriptor.password or None,
                use_tls=descriptor.secure,
                start_tls=False if descriptor.secure else None,
                timeout=self.timeout_seconds,
            )
        except aiosmtplib.SMTPException as e:
            raise MailTransportError(str(e), type(e).__name__)
        except OSError as e:
            raise MailTransportError(str(e), type(e).__name__)

        rejected = [address for address in recipients if address in errors]
        accepted = [address for address in recipients if address not in errors]
        logger.debug(f"SMTP accepted {len(accepted)} of {len(recipients)} recipients")
        return TransportReport(
            accepted=accepted, rejected=rejected, response=response,
        )
