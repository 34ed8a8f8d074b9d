"""
Patient Details Model - Stores patient-specific information.

This model extends the base User model 1:1 for users with the PATIENT role.
"""
import enum

from sqlalchemy import Column, Integer, Float, String, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship

from ..database import Base
from ..auth.models import User


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class PatientDetails(Base):
    """
    Patient Details Model - Stores patient-specific information

    Fields:
    - user_id: Primary key and foreign key to User model
    - full_name: Patient's full name
    - age: Age in years
    - gender: Male, Female or Other
    - height_cm: Height in centimetres
    - weight_kg: Weight in kilograms
    - phone: Contact number
    - address: Postal address
    - created_at: When the details were created
    - updated_at: When the details were last updated
    """
    __tablename__ = "patient_details"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String(100), nullable=True)
    age = Column(Integer, nullable=True)
    gender = Column(
        Enum(Gender, name="gender", values_callable=lambda enum_cls: [g.value for g in enum_cls]),
        nullable=True
    )
    height_cm = Column(Float, nullable=True)
    weight_kg = Column(Float, nullable=True)
    phone = Column(String(20), nullable=True)
    address = Column(String(200), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship(User, back_populates="patient_details", uselist=False)

    # Columns a patient or provider may change through an update
    UPDATABLE_FIELDS = (
        "full_name",
        "age",
        "gender",
        "height_cm",
        "weight_kg",
        "phone",
        "address",
    )

    def __repr__(self):
        """String representation of the PatientDetails model"""
        return f"<PatientDetails(user_id={self.user_id}, full_name='{self.full_name}')>"
