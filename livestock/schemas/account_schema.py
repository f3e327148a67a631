import re
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from livestock.schemas.base_schema import FormSchema

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
PHONE_PATTERN = re.compile(r'^\d{10}$')
PIN_CODE_PATTERN = re.compile(r'^\d{6}$')

Language = Literal['en', 'hi', 'ta', 'te', 'kn', 'mr', 'bn', 'gu']


def normalise_email(value):
    if not EMAIL_PATTERN.match(value):
        raise ValueError('Invalid email address')
    return value.lower()


def check_phone_number(value):
    if value is not None and not PHONE_PATTERN.match(value):
        raise ValueError('Phone number must be exactly 10 digits')
    return value


def check_pin_code(value):
    if value is not None and not PIN_CODE_PATTERN.match(value):
        raise ValueError('PIN code must be 6 digits')
    return value


class SignUpSchema(FormSchema):
    email: str
    password: str = Field(..., min_length=6, max_length=128)
    full_name: str = Field(..., min_length=2, max_length=100)
    phone_number: Optional[str] = None

    @field_validator('email')
    @classmethod
    def check_email(cls, value):
        return normalise_email(value)

    @field_validator('phone_number')
    @classmethod
    def check_phone(cls, value):
        return check_phone_number(value)


class SignInSchema(FormSchema):
    email: str
    password: str = Field(..., min_length=1)

    @field_validator('email')
    @classmethod
    def check_email(cls, value):
        return normalise_email(value)


class ProfileSetupSchema(FormSchema):
    """Onboarding step 1."""
    full_name: str = Field(..., min_length=2, max_length=100)
    phone_number: str
    state: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    village: Optional[str] = Field(None, max_length=100)
    pin_code: Optional[str] = None
    preferred_language: Language = 'en'

    @field_validator('phone_number')
    @classmethod
    def check_phone(cls, value):
        return check_phone_number(value)

    @field_validator('pin_code')
    @classmethod
    def check_pin(cls, value):
        return check_pin_code(value)


class ProfileUpdateSchema(FormSchema):
    """Profile and settings pages; only the submitted fields change."""
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    phone_number: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    village: Optional[str] = Field(None, max_length=100)
    pin_code: Optional[str] = None
    preferred_language: Optional[Language] = None

    @field_validator('phone_number')
    @classmethod
    def check_phone(cls, value):
        return check_phone_number(value)

    @field_validator('pin_code')
    @classmethod
    def check_pin(cls, value):
        return check_pin_code(value)


class SubscriptionChoiceSchema(FormSchema):
    """Onboarding step 2."""
    plan_id: str = Field(..., min_length=1)


class RoleChangeSchema(FormSchema):
    role: str = Field(..., min_length=1)


class ImpersonationSchema(FormSchema):
    target_user_id: str = Field(..., min_length=1)


class EmergencyContactSchema(FormSchema):
    contact_name: str = Field(..., min_length=2, max_length=100)
    contact_number: Optional[str] = Field(None, validate_default=True)
    relationship: Optional[str] = Field(None, max_length=50)
    is_default: bool = False

    @field_validator('contact_number')
    @classmethod
    def check_contact_number(cls, value):
        if value is None:
            raise ValueError('Contact number is required')
        return check_phone_number(value)


class SubscriptionPlanSchema(FormSchema):
    """Admin plan management."""
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    duration_months: int = Field(..., ge=1, le=36)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True
