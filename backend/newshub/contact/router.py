from typing import Annotated

from fastapi import APIRouter, Depends

from ..config import SettingsDep
from ..models import Message
from .schemas import ContactRequest
from .service import MailTransport, get_mail_transport, send_contact_message

router = APIRouter(prefix="/api/contact", tags=["contact"])


@router.post("", response_model=Message)
async def contact(
    body: ContactRequest,
    settings: SettingsDep,
    transport: Annotated[MailTransport, Depends(get_mail_transport)],
):
    await send_contact_message(transport, body, settings)
    return Message(message="Message sent successfully")
