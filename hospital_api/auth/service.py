"""
Authentication service layer for business logic.
"""
import logging
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.security import PasswordHasher, TokenService
from ..database import transaction, classify_integrity_error
from ..exceptions import InternalServerException, ResourceNotFoundException
from ..patients.models import PatientDetails
from ..patients.schemas import PatientDetailsResponse
from .models import User, UserRole, generate_user_id
from .schemas import UserRegistration, UserPublic, WhoAmIResponse
from .exceptions import InvalidCredentialsException, EmailAlreadyExistsException

# Set up logging
logger = logging.getLogger(__name__)

def email_registered(db: Session, email: str) -> bool:
    """Check whether an account already uses this exact email."""
    return db.query(User.id).filter(User.email == email).first() is not None

def register_user(
    db: Session,
    registration: UserRegistration,
    hasher: PasswordHasher
) -> Dict[str, Any]:
    """
    Register a new user and, for patients, their details.

    The user row and the patient details row are written in one transaction;
    if either insert fails neither is kept.

    Args:
        db: Database session
        registration: Validated registration payload
        hasher: Password hasher

    Returns:
        Dict with the created user and patient details

    Raises:
        EmailAlreadyExistsException: If email already exists
        InternalServerException: If the store fails
    """
    email = registration.email
    logger.info(f"Registration attempt for email: {email} as {registration.role.value}")

    # Check if email already exists
    try:
        email_taken = email_registered(db, email)
    except SQLAlchemyError as e:
        logger.error(f"Registration lookup failed for {email}: {str(e)}")
        raise InternalServerException("Server error during registration", error=str(e))
    if email_taken:
        logger.warning(f"Registration failed: Email {email} already registered")
        raise EmailAlreadyExistsException()

    password_hash = hasher.hash(registration.password)
    user_id = generate_user_id()

    try:
        with transaction(db):
            user_obj = User(
                id=user_id,
                email=email,
                password_hash=password_hash,
                role=registration.role
            )
            db.add(user_obj)
            db.flush()

            details = None
            if registration.role == UserRole.PATIENT:
                profile = registration.user_details
                details = PatientDetails(
                    user_id=user_id,
                    full_name=registration.full_name,
                    age=profile.age,
                    gender=profile.gender,
                    height_cm=profile.height_cm,
                    weight_kg=profile.weight_kg,
                    phone=profile.phone,
                    address=profile.address
                )
                db.add(details)
                db.flush()
    except IntegrityError as e:
        if classify_integrity_error(e) == "unique":
            logger.warning(f"Registration failed: Email {email} registered concurrently")
            raise EmailAlreadyExistsException()
        logger.error(f"Registration failed for {email}: {str(e)}")
        raise InternalServerException("Server error during registration", error=str(e.orig))
    except SQLAlchemyError as e:
        logger.error(f"Registration failed for {email}: {str(e)}")
        raise InternalServerException("Server error during registration", error=str(e))

    db.refresh(user_obj)
    if details is not None:
        db.refresh(details)
    logger.info(f"Account created: {user_obj.id} ({registration.role.value})")

    return {
        "user": UserPublic.model_validate(user_obj),
        "patient_details": PatientDetailsResponse.model_validate(details) if details is not None else None
    }

def login_user(
    db: Session,
    email: str,
    password: str,
    hasher: PasswordHasher,
    token_service: TokenService
) -> Dict[str, Any]:
    """
    Authenticate a user and generate access token.

    Unknown emails and wrong passwords fail the same way so that callers
    cannot tell which accounts exist.

    Args:
        db: Database session
        email: User's email address
        password: User's password
        hasher: Password hasher
        token_service: Token issuer

    Returns:
        Dict with the user (without password hash) and the token

    Raises:
        InvalidCredentialsException: If credentials are invalid
        InternalServerException: If the store fails
    """
    try:
        user = db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        logger.error(f"Login lookup failed for {email}: {str(e)}")
        raise InternalServerException("Server error during login", error=str(e))

    if user is None:
        hasher.dummy_verify()
        logger.warning(f"Login failed: Invalid credentials for {email}")
        raise InvalidCredentialsException()

    if not hasher.verify(password, user.password_hash):
        logger.warning(f"Login failed: Invalid credentials for {email}")
        raise InvalidCredentialsException()

    token = token_service.issue(user)
    logger.info(f"Login successful: User {user.id} ({email})")

    return {
        "user": UserPublic.model_validate(user),
        "token": token
    }

def get_user_identity(db: Session, user_id: str) -> WhoAmIResponse:
    """
    Re-read a user's identity from the store.

    Args:
        db: Database session
        user_id: ID taken from verified token claims

    Returns:
        WhoAmIResponse: Current id, email and role

    Raises:
        ResourceNotFoundException: If the user no longer exists
        InternalServerException: If the store fails
    """
    try:
        user = db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Profile lookup failed for {user_id}: {str(e)}")
        raise InternalServerException("Server error", error=str(e))

    if user is None:
        raise ResourceNotFoundException("User not found")
    return WhoAmIResponse.model_validate(user)
