"""Dispatch Types - transport descriptor, message, report and the classified result.

Invariants:
    - DispatchResult.status is SENT iff the transport report has >= 1 accepted address
    - A transport fault is a TransportReport with error set, never an exception
    - to_envelope() never echoes credentials or the rendered body

Design Decisions:
    - password is excluded from repr: descriptors end up in log records and tracebacks
"""

from dataclasses import dataclass, field
from typing import Any

from verimail.core.domain_types import DispatchStatus
from verimail.core.envelope import Envelope


@dataclass(frozen=True)
class TransportDescriptor:
    """Everything the mail transport needs to reach the SMTP server."""
    host: str
    port: int
    secure: bool
    user: str
    password: str = field(repr=False)
    name: str
    from_address: str


@dataclass(frozen=True)
class OutgoingMessage:
    from_name: str
    from_address: str
    to: str
    subject: str
    html: str


@dataclass(frozen=True)
class TransportReport:
    """What the transport said about one delivery attempt."""
    accepted: list[str] = field(default_factory=list)
    rejected: list[str] = field(default_factory=list)
    response: str | None = None
    error: str | None = None

    @classmethod
    def from_fault(cls, fault: Exception) -> "TransportReport":
        return cls(error=str(fault))

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "accepted": list(self.accepted),
            "rejected": list(self.rejected),
        }
        if self.response is not None:
            body["response"] = self.response
        if self.error is not None:
            body["error"] = self.error
        return body


def classify_report(report: TransportReport) -> DispatchStatus:
    if report.accepted:
        return DispatchStatus.SENT
    return DispatchStatus.NOT_SENT


@dataclass(frozen=True)
class DispatchResult:
    status: DispatchStatus
    rendered_body: str
    transport_echo: TransportReport
    config_echo: TransportDescriptor
    message: OutgoingMessage

    @property
    def sent(self) -> bool:
        return self.status == DispatchStatus.SENT

    def to_envelope(self) -> Envelope:
        """Public result of the send action."""
        return Envelope(
            code=200 if self.sent else 400,
            i18n="EMAIL_SENT" if self.sent else "EMAIL_NOT_SENT",
            data={
                "input": {
                    "from": self.message.from_address,
                    "to": self.message.to,
                    "subject": self.message.subject,
                },
                "output": self.transport_echo.to_dict(),
            },
        )
