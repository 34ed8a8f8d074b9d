"""
User Model - Identity records and the role enumeration.
"""
import enum
import uuid

from sqlalchemy import Column, String, DateTime, Enum, func
from sqlalchemy.orm import relationship

from ..database import Base


class UserRole(str, enum.Enum):
    """
    Coarse-grained permission category of a user.

    Registration accepts the numeric codes below as well as the names.
    """
    PATIENT = "PATIENT"
    PROVIDER = "PROVIDER"

    @classmethod
    def from_code(cls, value) -> "UserRole":
        """
        Map a registration role value onto the stored enum.

        Args:
            value: None, an integer code (0 patient, 1 provider) or a role name

        Returns:
            UserRole: The matching role

        Raises:
            ValueError: If the value names no known role
        """
        if value is None:
            return cls.PATIENT
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError("Role must be 0 (PATIENT) or 1 (PROVIDER)")
        if isinstance(value, int):
            if value in ROLE_CODES:
                return ROLE_CODES[value]
            raise ValueError("Role must be 0 (PATIENT) or 1 (PROVIDER)")
        if isinstance(value, str):
            name = value.strip().upper()
            if name.isdigit():
                return cls.from_code(int(name))
            try:
                return cls(name)
            except ValueError:
                pass
        raise ValueError("Role must be 0 (PATIENT) or 1 (PROVIDER)")


ROLE_CODES = {
    0: UserRole.PATIENT,
    1: UserRole.PROVIDER,
}


def generate_user_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """
    User Model - Identity record used for authentication

    Fields:
    - id: Opaque UUID string, stable for the life of the account
    - email: Unique login email, stored as given
    - password_hash: bcrypt hash, never serialized
    - role: PATIENT (default) or PROVIDER
    - created_at: When the account was created
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_user_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole, name="userrole"), default=UserRole.PATIENT, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    patient_details = relationship(
        "PatientDetails",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        """String representation of the User model"""
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"
