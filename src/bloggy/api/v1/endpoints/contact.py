"""Contact form endpoint."""

from fastapi import APIRouter

from bloggy.core.settings import settings
from bloggy.schemas.common import Message, MessageResponse
from bloggy.schemas.user import ContactRequest
from bloggy.services.notifications import send_feedback

from ..dependencies import MailerDep

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("/", response_model=MessageResponse)
async def submit_feedback(payload: ContactRequest, mailer: MailerDep) -> MessageResponse:
    """Forward feedback to the site admin and acknowledge the sender."""
    await send_feedback(
        mailer,
        admin_email=settings.admin_email,
        name=payload.name,
        email=payload.email,
        message=payload.message,
    )
    return MessageResponse(
        message=Message(type="success", text="Thank you! Your feedback has been sent."),
    )
