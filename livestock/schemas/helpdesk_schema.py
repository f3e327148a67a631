from typing import Optional

from pydantic import Field

from livestock.models.helpdesk_model import TicketStatus, TicketPriority
from livestock.schemas.base_schema import FormSchema


class TicketSchema(FormSchema):
    subject: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10, max_length=2000)
    category: Optional[str] = Field(None, max_length=50)
    priority: TicketPriority = TicketPriority.MEDIUM


class TicketResponseSchema(FormSchema):
    message: str = Field(..., min_length=1, max_length=2000)
    is_internal_note: bool = False


class TicketUpdateSchema(FormSchema):
    """Admin ticket management; every field is optional."""
    status: Optional[TicketStatus] = None
    priority: Optional[TicketPriority] = None
    assigned_to: Optional[str] = None


class SlaConfigSchema(FormSchema):
    response_time_hours: int = Field(..., gt=0)
    resolution_time_hours: int = Field(..., gt=0)
