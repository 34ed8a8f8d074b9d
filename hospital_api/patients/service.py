"""
Patient Service - Business logic for patient details management.

This module provides the list, read, create and partial-update operations
over patient details, including the ownership rules for each.
"""
from typing import List, Dict, Any
from datetime import datetime, timezone
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..auth.models import User, UserRole
from ..core.permissions import ensure_patient_access
from ..core.security import TokenClaims
from ..database import classify_integrity_error
from ..exceptions import (
    ConflictException,
    InternalServerException,
    ResourceNotFoundException,
    ValidationException
)
from .models import PatientDetails
from .schemas import (
    PatientDetailsCreate,
    PatientDetailsResponse,
    PatientRecord,
    PatientSummary
)

# Set up logging
logger = logging.getLogger(__name__)

def details_exist(db: Session, user_id: str) -> bool:
    """Check whether a patient_details row exists for a user."""
    return db.query(PatientDetails.user_id).filter(PatientDetails.user_id == user_id).first() is not None

def list_patients(db: Session) -> List[PatientSummary]:
    """
    Get every patient that has details, ordered by name with unnamed patients last.

    Args:
        db: Database session

    Returns:
        List[PatientSummary]: One summary per patient
    """
    try:
        rows = (
            db.query(
                User.id.label("user_id"),
                PatientDetails.full_name,
                PatientDetails.age,
                PatientDetails.gender,
                PatientDetails.phone,
                PatientDetails.created_at
            )
            .join(PatientDetails, PatientDetails.user_id == User.id)
            .filter(User.role == UserRole.PATIENT)
            .order_by(PatientDetails.full_name.asc().nulls_last())
            .all()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error listing patients: {str(e)}")
        raise InternalServerException(error=str(e))

    return [PatientSummary(**row._mapping) for row in rows]

def get_patient(db: Session, claims: TokenClaims, user_id: str) -> PatientRecord:
    """
    Get a user together with their patient details.

    Args:
        db: Database session
        claims: Verified claims of the caller
        user_id: ID of the user whose record is requested

    Returns:
        PatientRecord: The user's email and details, details null if absent

    Raises:
        PermissionDeniedException: If the caller is neither a provider nor the owner
        ResourceNotFoundException: If the user does not exist
    """
    ensure_patient_access(claims, user_id)

    try:
        row = (
            db.query(User, PatientDetails)
            .outerjoin(PatientDetails, PatientDetails.user_id == User.id)
            .filter(User.id == user_id)
            .first()
        )
    except SQLAlchemyError as e:
        logger.error(f"Error fetching patient {user_id}: {str(e)}")
        raise InternalServerException(error=str(e))

    if row is None:
        raise ResourceNotFoundException("Patient not found")

    user, details = row
    record: Dict[str, Any] = {"user_id": user.id, "email": user.email}
    if details is not None:
        record.update(PatientDetailsResponse.model_validate(details).model_dump(exclude={"user_id"}))
    return PatientRecord(**record)

def create_patient_details(db: Session, payload: PatientDetailsCreate) -> PatientDetailsResponse:
    """
    Create the details row for an existing patient user.

    Args:
        db: Database session
        payload: Validated details

    Returns:
        PatientDetailsResponse: The created row

    Raises:
        ValidationException: If the user does not exist or is not a patient
        ConflictException: If details already exist for the user
    """
    try:
        user = db.query(User).filter(User.id == payload.user_id).first()
        already_exists = details_exist(db, payload.user_id)
    except SQLAlchemyError as e:
        logger.error(f"Error looking up patient {payload.user_id}: {str(e)}")
        raise InternalServerException(error=str(e))

    if user is None or user.role != UserRole.PATIENT:
        raise ValidationException("User id does not exist")
    if already_exists:
        raise ConflictException("Patient details already exist")

    details = PatientDetails(**payload.model_dump())
    db.add(details)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        kind = classify_integrity_error(e)
        if kind == "foreign_key":
            raise ValidationException("User id does not exist")
        if kind == "unique":
            raise ConflictException("Patient details already exist")
        logger.error(f"Error creating patient details for {payload.user_id}: {str(e)}")
        raise InternalServerException(error=str(e.orig))
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error creating patient details for {payload.user_id}: {str(e)}")
        raise InternalServerException(error=str(e))

    db.refresh(details)
    logger.info(f"Patient details created for user {payload.user_id}")
    return PatientDetailsResponse.model_validate(details)

def update_patient_details(
    db: Session,
    claims: TokenClaims,
    user_id: str,
    changes: Dict[str, Any]
) -> PatientDetailsResponse:
    """
    Apply a partial update to a patient's details.

    Args:
        db: Database session
        claims: Verified claims of the caller
        user_id: ID of the patient whose details change
        changes: Fields present in the request, already validated

    Returns:
        PatientDetailsResponse: The updated row

    Raises:
        PermissionDeniedException: If the caller is neither a provider nor the owner
        ValidationException: If no updatable field was supplied
        ResourceNotFoundException: If the patient has no details row
    """
    ensure_patient_access(claims, user_id, write=True)

    update_data = {
        field: value for field, value in changes.items()
        if field in PatientDetails.UPDATABLE_FIELDS
    }
    if not update_data:
        raise ValidationException("No fields to update")

    try:
        details = db.query(PatientDetails).filter(PatientDetails.user_id == user_id).first()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching patient details for {user_id}: {str(e)}")
        raise InternalServerException(error=str(e))

    if details is None:
        raise ResourceNotFoundException("Patient details not found")

    try:
        for field, value in update_data.items():
            setattr(details, field, value)
        details.updated_at = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error updating patient details for {user_id}: {str(e)}")
        raise InternalServerException(error=str(e))

    db.refresh(details)
    logger.info(f"Patient details for {user_id} updated by {claims.id}")
    return PatientDetailsResponse.model_validate(details)
