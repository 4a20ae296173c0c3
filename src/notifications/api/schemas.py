"""Pydantic request/response models for the send-email endpoint.

Field names on the wire are camelCase (``orderId``, ``emailSubject``).
"""

from pydantic import BaseModel, ConfigDict, Field


class SendEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str | None = Field(default=None, alias="orderId")
    type: str = Field(default="confirmation", examples=["shipped"])


class SendEmailResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str
    email_subject: str = Field(serialization_alias="emailSubject")
    email_content: str = Field(serialization_alias="emailContent")
    recipient: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
