"""
Authentication routes for the hospital records system.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..core.responses import ApiResponse, ok
from ..core.security import PasswordHasher, TokenClaims, TokenService, get_password_hasher, get_token_service
from .dependencies import require_auth
from .schemas import UserRegistration, UserLogin, RegistrationResult, LoginResult, WhoAmIResponse
from .service import register_user, login_user, get_user_identity

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse[RegistrationResult],
    summary="Register a patient or provider"
)
def register_route(
    registration: UserRegistration,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """
    Registration endpoint.

    Creates the user and, for patients, their details in one transaction.
    No token is issued; clients log in separately.
    """
    result = register_user(db=db, registration=registration, hasher=hasher)
    return ok(result, message="User registered successfully")


@router.post(
    "/login",
    response_model=ApiResponse[LoginResult],
    summary="Log in and receive a bearer token"
)
def login_route(
    credentials: UserLogin,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    token_service: TokenService = Depends(get_token_service)
):
    """
    Login endpoint.

    Returns the user without the password hash plus a token valid for seven days.
    """
    result = login_user(
        db=db,
        email=credentials.email,
        password=credentials.password,
        hasher=hasher,
        token_service=token_service
    )
    return ok(result, message="Login successful")


@router.get(
    "/whoMI",
    response_model=ApiResponse[WhoAmIResponse],
    summary="Current user identity"
)
def who_am_i_route(
    claims: TokenClaims = Depends(require_auth),
    db: Session = Depends(get_db)
):
    """
    Return the caller's id, email and role as currently stored.
    """
    return ok(get_user_identity(db, claims.id))
