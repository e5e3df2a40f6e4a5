"""Boundary Protocols - contracts between core and the external collaborators.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - Config and user stores answer with Envelopes; non-200 is forwarded verbatim
    - MailTransport raises MailTransportError on a transport fault, never anything else

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - update() takes an expected-values guard so the store can make the
      Unverified -> Verified transition a conditional write (closes the
      check-then-update race between concurrent verify calls)
"""

from collections.abc import Iterable
from typing import Any, Protocol

from verimail.core.dispatch import OutgoingMessage, TransportDescriptor, TransportReport
from verimail.core.envelope import Envelope

UPDATE_CONFLICT_CODE = 409
UPDATE_CONFLICT_I18N = "USER_UPDATE_CONFLICT"


class ConfigStore(Protocol):
    """Contract for the config collaborator."""
    async def multiplex(self, keys: Iterable[str]) -> Envelope: ...
    async def get(self, key: str) -> Envelope: ...


class UserStore(Protocol):
    """Contract for the user collaborator.

    update() answers 409 USER_UPDATE_CONFLICT when `expected` does not match
    the stored row.
    """
    async def get_by_unique(self, field: str, value: Any) -> Envelope: ...
    async def get_by_id(self, user_id: str) -> Envelope: ...
    async def update(
        self,
        user_id: str,
        fields: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> Envelope: ...


class MailTransport(Protocol):
    """Contract for the mail transport collaborator."""
    async def deliver(
        self, descriptor: TransportDescriptor, message: OutgoingMessage,
    ) -> TransportReport: ...
