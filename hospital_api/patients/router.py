"""
Patient Router - API endpoints for patient details.

Providers may list, read, create and update any patient's details.
Patients may read and update only their own.
"""
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import require_auth, require_permission
from ..core.permissions import Permission
from ..core.responses import ApiResponse, ok
from ..core.security import TokenClaims
from .schemas import (
    PatientDetailsCreate,
    PatientDetailsResponse,
    PatientDetailsUpdate,
    PatientRecord,
    PatientSummary
)
from .service import (
    list_patients,
    get_patient,
    create_patient_details,
    update_patient_details
)

router = APIRouter(prefix="/api/patients", tags=["Patients"])

@router.get(
    "",
    response_model=ApiResponse[List[PatientSummary]],
    dependencies=[Depends(require_auth), Depends(require_permission(Permission.LIST_PATIENTS))]
)
def list_patients_route(db: Session = Depends(get_db)):
    """
    Get all patients with their basic details

    Provider-only. Ordered by full name, patients without a name last.
    """
    return ok(list_patients(db))

@router.get("/{user_id}", response_model=ApiResponse[PatientRecord])
def get_patient_route(
    user_id: str,
    claims: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Get a patient's record by user ID

    Allowed for providers and for the patient themselves.
    """
    return ok(get_patient(db, claims, user_id))

@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[PatientDetailsResponse],
    dependencies=[Depends(require_auth), Depends(require_permission(Permission.CREATE_PATIENT_DETAILS))]
)
def create_patient_details_route(
    payload: PatientDetailsCreate,
    db: Session = Depends(get_db)
):
    """
    Create details for an existing patient user

    Provider-only.
    """
    return ok(create_patient_details(db, payload))

@router.put("/{user_id}", response_model=ApiResponse[PatientDetailsResponse])
def update_patient_details_route(
    user_id: str,
    payload: PatientDetailsUpdate,
    claims: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Update a patient's details

    Only the fields present in the body are changed. Allowed for providers
    and for the patient themselves.
    """
    changes = payload.model_dump(exclude_unset=True)
    return ok(update_patient_details(db, claims, user_id, changes))
