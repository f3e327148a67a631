from datetime import date
from typing import Optional

from pydantic import Field, field_validator, model_validator

from livestock.models.animal_model import Species, Gender, HealthStatus
from livestock.schemas.base_schema import FormSchema


class AnimalSchema(FormSchema):
    """Add Animal / Edit Animal form."""
    name: Optional[str] = Field(None, max_length=100)
    species: Species
    breed: Optional[str] = Field(None, max_length=100)
    gender: Gender
    date_of_birth: Optional[date] = None
    health_status: HealthStatus = HealthStatus.HEALTHY
    identification_number: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=200)

    @field_validator('date_of_birth')
    @classmethod
    def not_in_future(cls, value):
        if value is not None and value > date.today():
            raise ValueError('Date of birth cannot be in the future')
        return value


def _min_text(value, length, label):
    if value is None or len(value) < length:
        raise ValueError(f'{label} must be at least {length} characters')
    return value


class HealthRecordSchema(FormSchema):
    animal_id: str = Field(..., min_length=1)
    record_date: date = Field(default_factory=date.today)
    symptoms: Optional[str] = Field(None, validate_default=True)
    diagnosis: Optional[str] = Field(None, validate_default=True)
    treatment: Optional[str] = Field(None, validate_default=True)
    prescription: Optional[str] = None
    veterinarian_notes: Optional[str] = None
    next_checkup_date: Optional[date] = None

    @field_validator('symptoms')
    @classmethod
    def check_symptoms(cls, value):
        return _min_text(value, 3, 'Symptoms')

    @field_validator('diagnosis')
    @classmethod
    def check_diagnosis(cls, value):
        return _min_text(value, 3, 'Diagnosis')

    @field_validator('treatment')
    @classmethod
    def check_treatment(cls, value):
        return _min_text(value, 3, 'Treatment')


class VaccinationSchema(FormSchema):
    animal_id: str = Field(..., min_length=1)
    vaccine_name: Optional[str] = Field(None, max_length=100, validate_default=True)
    vaccine_type: Optional[str] = Field(None, max_length=100)
    batch_number: Optional[str] = Field(None, max_length=50)
    administered_by: Optional[str] = Field(None, max_length=100, validate_default=True)
    administered_date: date = Field(default_factory=date.today)
    next_due_date: Optional[date] = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('vaccine_name')
    @classmethod
    def check_vaccine_name(cls, value):
        return _min_text(value, 2, 'Vaccine name')

    @field_validator('administered_by')
    @classmethod
    def check_administered_by(cls, value):
        return _min_text(value, 2, 'Administered by')

    @model_validator(mode='after')
    def due_after_administered(self):
        if self.next_due_date and self.next_due_date < self.administered_date:
            raise ValueError('Next due date cannot be before the administered date')
        return self


class BreedingRecordSchema(FormSchema):
    animal_id: str = Field(..., min_length=1)
    breeding_date: date
    breeding_method: Optional[str] = Field(None, max_length=50)
    partner_details: Optional[str] = Field(None, max_length=200)
    expected_delivery_date: Optional[date] = None
    actual_delivery_date: Optional[date] = None
    offspring_count: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)

    @model_validator(mode='after')
    def delivery_after_breeding(self):
        if self.expected_delivery_date and self.expected_delivery_date < self.breeding_date:
            raise ValueError('Expected delivery date cannot be before the breeding date')
        return self
