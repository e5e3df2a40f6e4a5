"""Envelope - the {code, i18n, data} shape shared by actions and collaborators.

Invariants:
    - code mirrors an HTTP status; 200 is the only success code
    - to_dict() omits i18n/data when absent (matches mesh wire format)
"""

from dataclasses import dataclass
from typing import Any

SUCCESS_CODE = 200


@dataclass(frozen=True)
class Envelope:
    """Request/response result passed between services."""
    code: int
    i18n: str | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        return self.code == SUCCESS_CODE

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"code": self.code}
        if self.i18n is not None:
            body["i18n"] = self.i18n
        if self.data is not None:
            body["data"] = self.data
        return body

    @classmethod
    def success(cls, i18n: str | None = None, data: Any = None) -> "Envelope":
        return cls(code=SUCCESS_CODE, i18n=i18n, data=data)

