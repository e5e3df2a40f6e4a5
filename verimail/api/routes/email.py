"""Email Routes - the send action.

Invariants:
    - The response never contains SMTP credentials or the rendered body
    - HTTP status mirrors the envelope code (200 EMAIL_SENT / 400 EMAIL_NOT_SENT)
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from verimail.api.dependencies import get_dispatcher
from verimail.schemas.email import EnvelopeResponse, SendEmailRequest
from verimail.services.email_dispatcher import EmailDispatcher

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/email", tags=["email"])


@router.post("/send", response_model=EnvelopeResponse)
async def send_email(
    body: SendEmailRequest,
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
):
    """Render a configured template and send it to one receptor."""
    result = await dispatcher.send(body.receptor, body.template, body.params)
    envelope = result.to_envelope()
    return JSONResponse(status_code=envelope.code, content=envelope.to_dict())
