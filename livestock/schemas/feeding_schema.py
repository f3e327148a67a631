from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator

from livestock.models.base_model import utcnow
from livestock.schemas.base_schema import FormSchema


class FeedingScheduleSchema(FormSchema):
    animal_id: str = Field(..., min_length=1)
    feed_type: str = Field(..., min_length=1, max_length=100)
    quantity: Optional[str] = Field(None, max_length=50)
    frequency: Optional[str] = Field(None, max_length=50)
    season: Optional[str] = Field(None, max_length=50)
    special_instructions: Optional[str] = Field(None, max_length=500)


class FeedingLogSchema(FormSchema):
    animal_id: str = Field(..., min_length=1)
    schedule_id: Optional[str] = None
    feed_type: str = Field(..., min_length=1, max_length=100)
    quantity_fed: str = Field(..., min_length=1, max_length=50)
    feeding_time: datetime = Field(default_factory=utcnow)
    animal_response: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=500)


class FeedInventorySchema(FormSchema):
    feed_name: Optional[str] = Field(None, validate_default=True)
    feed_type: str = Field(..., min_length=1, max_length=50)
    quantity: float = Field(..., allow_inf_nan=False)
    unit: str = Field(..., min_length=1, max_length=20)
    cost_per_unit: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    supplier_name: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    expiry_date: Optional[date] = None
    storage_location: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('feed_name')
    @classmethod
    def check_feed_name(cls, value):
        if not value:
            raise ValueError('Feed name is required')
        if len(value) > 100:
            raise ValueError('Feed name must be at most 100 characters')
        return value

    @field_validator('quantity')
    @classmethod
    def check_quantity(cls, value):
        if value < 0:
            raise ValueError('Quantity must be positive')
        return value
