"""
Core security utilities for password hashing and bearer token handling.
"""
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional
import logging

from jose import jwt, JWTError, ExpiredSignatureError
from jose.exceptions import JWTClaimsError
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError

from ..config import get_settings
from ..auth.models import UserRole
from ..auth.exceptions import (
    MalformedTokenException,
    InvalidSignatureException,
    TokenExpiredException,
    PasswordHashingError
)

# Set up logging
logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a secret
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    One-way salted password hashing backed by passlib's bcrypt scheme.

    Args:
        rounds: bcrypt cost factor
    """
    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            bcrypt__ident="2b",
        )

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt with a random salt.

        Args:
            password: Plain text password

        Returns:
            str: Hashed password

        Raises:
            PasswordHashingError: If the password is longer than bcrypt accepts
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise PasswordHashingError(error=f"password exceeds {BCRYPT_MAX_BYTES} bytes")
        return self._context.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        """
        Verify a password against a hash.

        Args:
            password: Plain text password
            hashed_password: Hashed password to compare against

        Returns:
            bool: True if password matches hash
        """
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            return False
        try:
            return self._context.verify(password, hashed_password)
        except (ValueError, TypeError):
            logger.warning("Stored password hash could not be parsed")
            return False

    def dummy_verify(self) -> None:
        """Spend about as long as a real verify, for accounts that do not exist."""
        self._context.dummy_verify()


class TokenClaims(BaseModel):
    """
    Identity carried by a verified bearer token.

    Fields:
    - id: User ID
    - email: User email at issue time
    - role: User role at issue time
    - issued_at: When the token was signed
    - expires_at: When the token stops being accepted
    """
    id: str
    email: str
    role: UserRole
    issued_at: datetime
    expires_at: datetime


class TokenService:
    """
    Issues and verifies signed, expiring JWT bearer tokens.

    Args:
        secret_key: Server-held signing key
        algorithm: JWT signing algorithm
        expires_in: Token lifetime
    """
    def __init__(self, secret_key: str, algorithm: str = "HS256", expires_in: timedelta = timedelta(days=7)):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expires_in = expires_in

    def issue(self, user: Any, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for a user.

        Args:
            user: Object or mapping exposing id, email and role
            now: Issue time, defaults to the current UTC time

        Returns:
            str: Encoded JWT token
        """
        data = user if isinstance(user, dict) else {
            "id": user.id,
            "email": user.email,
            "role": user.role,
        }
        issued_at = now or datetime.now(timezone.utc)
        to_encode: Dict[str, Any] = {
            "id": str(data["id"]),
            "email": data["email"],
            "role": UserRole(data["role"]).value,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            TokenClaims: The verified claims

        Raises:
            MalformedTokenException: If the token cannot be parsed or lacks claims
            InvalidSignatureException: If the signature does not match
            TokenExpiredException: If the token is past its expiry
        """
        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            raise MalformedTokenException()

        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTClaimsError:
            raise MalformedTokenException()
        except JWTError:
            raise InvalidSignatureException()

        if "iat" not in payload or "exp" not in payload:
            raise MalformedTokenException()
        try:
            return TokenClaims(
                id=payload.get("id"),
                email=payload.get("email"),
                role=payload.get("role"),
                issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
                expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            )
        except (ValidationError, TypeError, ValueError, OverflowError):
            raise MalformedTokenException()


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Dependency returning the process-wide password hasher."""
    return PasswordHasher(rounds=get_settings().bcrypt_rounds)


@lru_cache
def get_token_service() -> TokenService:
    """Dependency returning the process-wide token service."""
    settings = get_settings()
    return TokenService(
        secret_key=settings.secret_key,
        algorithm=settings.algorithm,
        expires_in=timedelta(days=settings.access_token_expire_days),
    )
