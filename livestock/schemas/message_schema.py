from typing import Optional

from pydantic import Field

from livestock.schemas.base_schema import FormSchema


class ConversationStartSchema(FormSchema):
    recipient_id: str = Field(..., min_length=1)
    message_text: Optional[str] = Field(None, max_length=2000)


class MessageSchema(FormSchema):
    message_text: str = Field(..., min_length=1, max_length=2000)


class AiChatSchema(FormSchema):
    message: str = Field(..., min_length=1, max_length=2000)
    symptoms: Optional[str] = Field(None, max_length=1000)
    animal_id: Optional[str] = None
