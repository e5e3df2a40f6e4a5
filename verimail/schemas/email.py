"""Email Schemas - request bodies for the send/request/verify actions."""

from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator


class SendEmailRequest(BaseModel):
    receptor: EmailStr
    template: str = Field(min_length=1, max_length=200)
    params: dict[str, Any] = Field(default_factory=dict)

    @field_validator("template")
    @classmethod
    def strip_template(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("template cannot be empty or whitespace")
        return v


class VerificationRequest(BaseModel):
    email: EmailStr


class VerificationVerify(BaseModel):
    token: str = Field(min_length=1, max_length=4096)


class EnvelopeResponse(BaseModel):
    """Documented response shape of every action."""
    code: int
    i18n: str | None = None
    data: dict[str, Any] | None = None
