"""
Patient Schemas - Pydantic models for patient detail payloads.
"""
from typing import Optional
from pydantic import BaseModel, Field
from datetime import datetime

from .models import Gender


class PatientProfile(BaseModel):
    """
    Patient Profile Schema - Nested profile sent at registration

    Fields:
    - age: Age in years (1-150)
    - gender: Male, Female or Other
    - height_cm: Height in centimetres (50-300)
    - weight_kg: Weight in kilograms (10-500)
    - phone: Contact number (10-20 characters)
    - address: Postal address (5-200 characters)
    """
    age: int = Field(..., ge=1, le=150)
    gender: Gender
    height_cm: float = Field(..., ge=50, le=300)
    weight_kg: float = Field(..., ge=10, le=500)
    phone: str = Field(..., min_length=10, max_length=20)
    address: str = Field(..., min_length=5, max_length=200)


class PatientDetailsCreate(BaseModel):
    """
    Patient Details Creation Schema - Used by providers for an existing user
    """
    user_id: str = Field(..., min_length=1)
    full_name: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=1, le=150)
    gender: Optional[Gender] = None
    height_cm: Optional[float] = Field(None, ge=50, le=300)
    weight_kg: Optional[float] = Field(None, ge=10, le=500)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=200)


class PatientDetailsUpdate(BaseModel):
    """
    Patient Details Update Schema - Partial update of the allow-listed fields

    Unknown keys are ignored; only fields present in the request are applied.
    """
    full_name: Optional[str] = Field(None, min_length=1, max_length=100)
    age: Optional[int] = Field(None, ge=1, le=150)
    gender: Optional[Gender] = None
    height_cm: Optional[float] = Field(None, ge=50, le=300)
    weight_kg: Optional[float] = Field(None, ge=10, le=500)
    phone: Optional[str] = Field(None, max_length=20)
    address: Optional[str] = Field(None, max_length=200)

    class Config:
        extra = "ignore"


class PatientDetailsResponse(BaseModel):
    """
    Patient Details Response Schema - A stored patient_details row
    """
    user_id: str
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


class PatientRecord(PatientDetailsResponse):
    """
    Patient Record Schema - A user joined with their details

    Detail fields are null when the user has no details row yet.
    """
    email: str


class PatientSummary(BaseModel):
    """
    Patient Summary Schema - One row of the provider patient list
    """
    user_id: str
    full_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[Gender] = None
    phone: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
