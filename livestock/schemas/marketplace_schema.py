import re
from typing import Optional

from pydantic import Field, field_validator

from livestock.models.marketplace_model import ListingStatus, EnquiryStatus
from livestock.schemas.base_schema import FormSchema

CONTACT_NUMBER_PATTERN = re.compile(r'^\d{10}$')


class ListingSchema(FormSchema):
    title: str = Field(..., min_length=3, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    location: str = Field(..., min_length=2, max_length=200)
    contact_number: Optional[str] = Field(None, validate_default=True)
    animal_id: Optional[str] = None
    status: ListingStatus = ListingStatus.ACTIVE

    @field_validator('contact_number')
    @classmethod
    def check_contact_number(cls, value):
        if value is None or not CONTACT_NUMBER_PATTERN.match(value):
            raise ValueError('Contact number must be exactly 10 digits')
        return value


class ListingStatusSchema(FormSchema):
    status: ListingStatus


class EnquirySchema(FormSchema):
    message: str = Field(..., min_length=1, max_length=1000)


class EnquiryStatusSchema(FormSchema):
    status: EnquiryStatus


class ReviewSchema(FormSchema):
    rating: int = Field(..., ge=1, le=5)
    review_text: Optional[str] = Field(None, max_length=1000)
