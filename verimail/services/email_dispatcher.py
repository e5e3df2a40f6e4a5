"""Email Dispatcher - resolve SMTP/template config, render, send, classify.

Invariants:
    - Config is resolved and validated before the transport is touched
    - A transport fault becomes TransportReport.error; it never escapes send()
    - Result is SENT iff the transport accepted at least one recipient

Design Decisions:
    - Returns DispatchResult (not an envelope): the issuer needs the status and
      the HTTP route needs the sanitized envelope, both come from one object
"""

import logging
from typing import Any

from verimail.config import get_settings
from verimail.core.config_bundle import SmtpTemplateConfig, validate_bundle
from verimail.core.dispatch import (
    DispatchResult, OutgoingMessage, TransportDescriptor, TransportReport,
    classify_report,
)
from verimail.core.errors import MailTransportError
from verimail.core.render_template import render_template
from verimail.core.repository_protocols import MailTransport
from verimail.services.config_resolver import ConfigResolver

logger = logging.getLogger(__name__)


def build_descriptor(config: SmtpTemplateConfig) -> TransportDescriptor:
    return TransportDescriptor(
        host=config.smtp_host,
        port=config.smtp_port,
        secure=config.smtp_secure,
        user=config.smtp_user,
        password=config.smtp_pass,
        name=config.smtp_name,
        from_address=config.smtp_from,
    )


class EmailDispatcher:
    """Sends one templated email per call."""

    def __init__(
        self,
        resolver: ConfigResolver,
        transport: MailTransport,
        email_config_key: str | None = None,
        template_config_prefix: str | None = None,
    ):
        settings = get_settings()
        self.resolver = resolver
        self.transport = transport
        self.email_config_key = email_config_key or settings.email_config_key
        self.template_config_prefix = (
            template_config_prefix or settings.email_template_config_prefix
        )

    def config_keys(self, template_key: str) -> list[str]:
        """Generic config first, template config second (template wins)."""
        return [
            self.email_config_key,
            f"{self.template_config_prefix}{template_key}",
        ]

    async def send(
        self,
        receptor: str,
        template_key: str,
        params: dict[str, Any] | None = None,
    ) -> DispatchResult:
        bundle = await self.resolver.resolve_bundle(self.config_keys(template_key))
        config = validate_bundle(bundle, SmtpTemplateConfig)
        descriptor = build_descriptor(config)
        body = render_template(config.template, params or {})
        message = OutgoingMessage(
            from_name=descriptor.name,
            from_address=descriptor.from_address,
            to=receptor,
            subject=config.subject,
            html=body,
        )

        try:
            report = await self.transport.deliver(descriptor, message)
        except MailTransportError as e:
            logger.warning(
                f"Mail transport fault: {e.message}",
                extra={"template": template_key, "error_code": e.fault_type},
            )
            report = TransportReport.from_fault(e)

        status = classify_report(report)
        logger.info(
            "Email dispatch finished",
            extra={"template": template_key, "dispatch_status": status.value},
        )
        return DispatchResult(
            status=status,
            rendered_body=body,
            transport_echo=report,
            config_echo=descriptor,
            message=message,
        )
