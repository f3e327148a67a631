from typing import Literal, Optional

from pydantic import Field

from livestock.models.content_model import ContentCategory, ContentType, PriorityLevel
from livestock.schemas.base_schema import FormSchema


class SchemeSchema(FormSchema):
    scheme_name: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    eligibility_criteria: Optional[str] = None
    benefits: Optional[str] = None
    application_process: Optional[str] = None
    contact_details: Optional[str] = Field(None, max_length=300)
    state: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    official_website: Optional[str] = Field(None, max_length=255, pattern=r'^https?://')
    is_active: bool = True


class ContentSchema(FormSchema):
    title: str = Field(..., min_length=3, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    content_body: Optional[str] = None
    category: ContentCategory
    content_type: ContentType
    media_url: Optional[str] = Field(None, max_length=255)
    language: Literal['en', 'hi', 'ta', 'te', 'kn', 'mr', 'bn', 'gu'] = 'en'
    is_active: bool = True
    is_featured: bool = False


class NotificationSchema(FormSchema):
    """Admin broadcast; without ``user_id`` the notification goes to everyone."""
    user_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=2000)
    type: Optional[str] = Field(None, max_length=50)
    priority: PriorityLevel = PriorityLevel.MEDIUM
