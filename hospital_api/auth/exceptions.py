"""
Authentication-specific exceptions.
"""
from fastapi import status

from ..exceptions import AppException, ConflictException, InternalServerException

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

class AuthException(AppException):
    """Base class for authentication exceptions."""
    def __init__(self, status_code: int, detail: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)

class InvalidCredentialsException(AuthException):
    """Exception raised when credentials are invalid."""
    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)

class EmailAlreadyExistsException(ConflictException):
    """Exception raised when email already exists."""
    def __init__(self, detail: str = "User already exists"):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)

class MissingTokenException(AuthException):
    """Exception raised when a protected route is called without a bearer token."""
    def __init__(self, detail: str = "No token provided"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=BEARER_CHALLENGE)

class NotAuthenticatedException(AuthException):
    """Exception raised when a role check runs without verified claims."""
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=BEARER_CHALLENGE)

class InvalidTokenException(AuthException):
    """Exception raised when token is invalid."""
    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail, headers=BEARER_CHALLENGE)

class MalformedTokenException(InvalidTokenException):
    """Exception raised when a token cannot be parsed or lacks required claims."""
    def __init__(self, detail: str = "Malformed token"):
        super().__init__(detail=detail)

class InvalidSignatureException(InvalidTokenException):
    """Exception raised when a token signature does not match."""
    def __init__(self, detail: str = "Invalid token signature"):
        super().__init__(detail=detail)

class TokenExpiredException(InvalidTokenException):
    """Exception raised when token has expired."""
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail=detail)

class PermissionDeniedException(AuthException):
    """Exception raised when user doesn't have required permissions."""
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class RoleDeniedException(AuthException):
    """Exception raised when user doesn't have required role."""
    def __init__(self, detail: str = "Access denied. Insufficient permissions."):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)

class PasswordHashingError(InternalServerException):
    """Exception raised when a password cannot be hashed."""
    def __init__(self, detail: str = "Password could not be hashed", error: str = None):
        super().__init__(detail=detail, error=error)
