"""
User Schemas - Pydantic models for registration, login and identity payloads.
"""
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.networks import validate_email
from datetime import datetime

from .models import UserRole
from ..patients.schemas import PatientDetailsResponse, PatientProfile


def check_email(value: str) -> str:
    """
    Validate an email address and return it exactly as given.

    Emails are matched case-sensitively, so the domain is not lowercased.
    Display-name forms such as ``Name <a@x.com>`` are rejected.

    Args:
        value: Email address from the request

    Returns:
        str: The unchanged address

    Raises:
        ValueError: If the value is not a plain email address
    """
    _, normalized = validate_email(value)
    if normalized.lower() != value.lower():
        raise ValueError("value is not a valid email address")
    return value


class UserRegistration(BaseModel):
    """
    User Registration Schema - Used for self-registration

    Fields:
    - email: User's email address
    - password: User's plain text password (will be hashed before storage)
    - fullName: User's full name
    - role: 0/"PATIENT" (default) or 1/"PROVIDER"
    - user_details: Patient profile, required when registering a patient
    """
    email: str
    password: str = Field(..., min_length=5)
    full_name: str = Field(..., alias="fullName", min_length=2, max_length=100)
    role: UserRole = UserRole.PATIENT
    user_details: Optional[PatientProfile] = None

    class Config:
        """Configuration for Pydantic model"""
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "email": "a@x.com",
                "password": "secret",
                "fullName": "A B",
                "role": 0,
                "user_details": {
                    "age": 30,
                    "gender": "Male",
                    "height_cm": 170,
                    "weight_kg": 70,
                    "phone": "1234567890",
                    "address": "1 Main St"
                }
            }
        }

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, value: str) -> str:
        return check_email(value)

    @field_validator("role", mode="before")
    @classmethod
    def parse_role(cls, value: Any) -> UserRole:
        return UserRole.from_code(value)

    @model_validator(mode="after")
    def require_patient_profile(self) -> "UserRegistration":
        if self.role == UserRole.PATIENT and self.user_details is None:
            raise ValueError("user_details is required when registering a patient")
        return self


class UserLogin(BaseModel):
    """
    User Login Schema - Used for authentication

    Fields:
    - email: User's email address
    - password: User's plain text password
    """
    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email_address(cls, value: str) -> str:
        return check_email(value)


class UserPublic(BaseModel):
    """
    User Response Schema - User data safe to return to clients
    """
    id: str
    email: str
    role: UserRole
    created_at: Optional[datetime] = None

    class Config:
        """Configuration for Pydantic model to enable ORM mode"""
        from_attributes = True


class WhoAmIResponse(BaseModel):
    """Identity of the caller as currently stored."""
    id: str
    email: str
    role: UserRole

    class Config:
        from_attributes = True


class RegistrationResult(BaseModel):
    """
    Registration Result Schema - Identifiers created by a registration

    Fields:
    - user: The created user
    - patient_details: The created patient details, null for providers
    """
    user: UserPublic
    patient_details: Optional[PatientDetailsResponse] = None


class LoginResult(BaseModel):
    """
    Login Result Schema - Returned after successful authentication

    Fields:
    - user: User information without the password hash
    - token: Signed bearer token
    """
    user: UserPublic
    token: str
