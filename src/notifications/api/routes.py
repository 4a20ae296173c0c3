"""FastAPI route for the Notifier.

Thin adapter: authenticate, validate the payload, hand it to the
dispatcher and translate the receipt into the wire response.
"""

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from notifications.api.schemas import ErrorResponse, SendEmailRequest, SendEmailResponse
from notifications.dispatch import NotificationDispatcher
from ordering.providers import get_dispatcher
from shared.errors import StorefrontError
from shared.logging import add_context

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["notifications"])


def _bearer_token(authorization: str) -> str | None:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


@router.post(
    "/send-email",
    response_model=SendEmailResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}},
)
async def send_email(
    body: SendEmailRequest,
    authorization: str = Header(default=""),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Render and send the order email for ``type``, recording the attempt on the order."""
    if _bearer_token(authorization) is None:
        raise HTTPException(status_code=401, detail="Missing bearer credential")

    if not body.order_id:
        return _error("Order ID is required")

    add_context(order_id=body.order_id, notification_type=body.type)
    try:
        receipt = await dispatcher.send(body.order_id, body.type)
    except StorefrontError as exc:
        logger.warning("Send email request failed", error=str(exc))
        return _error(str(exc))

    return SendEmailResponse(
        message=receipt.message,
        email_subject=receipt.subject,
        email_content=receipt.body,
        recipient=receipt.recipient,
    )
