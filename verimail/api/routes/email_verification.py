"""Email Verification Routes - request and verify actions.

Invariants:
    - Both actions require the creator header; it is normalized before use
    - Failures travel as VerimailError to the global handler; routes only
      render the success envelope
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from verimail.api.dependencies import get_creator, get_issuer, get_validator
from verimail.core.domain_types import Creator
from verimail.schemas.email import (
    EnvelopeResponse, VerificationRequest, VerificationVerify,
)
from verimail.services.verification_issuer import VerificationTokenIssuer
from verimail.services.verification_validator import VerificationTokenValidator

router = APIRouter(prefix="/api/v1/email/verification", tags=["email-verification"])


@router.post("/request", response_model=EnvelopeResponse)
async def request_verification(
    body: VerificationRequest,
    creator: Creator = Depends(get_creator),
    issuer: VerificationTokenIssuer = Depends(get_issuer),
):
    """Mail a verification token to the user owning `email`."""
    envelope = await issuer.request(body.email, creator)
    return JSONResponse(status_code=envelope.code, content=envelope.to_dict())


@router.post("/verify", response_model=EnvelopeResponse)
async def verify_email(
    body: VerificationVerify,
    creator: Creator = Depends(get_creator),
    validator: VerificationTokenValidator = Depends(get_validator),
):
    """Consume a verification token and mark the user's email verified."""
    envelope = await validator.verify(body.token, creator)
    return JSONResponse(status_code=envelope.code, content=envelope.to_dict())
