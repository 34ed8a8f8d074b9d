"""
FastAPI dependencies for authentication and authorization.

Routes declare their guards as an ordered list, for example::

    dependencies=[Depends(require_auth), Depends(require_roles(UserRole.PROVIDER))]

``require_auth`` verifies the bearer token and stores the claims on
``request.state.claims``; ``require_roles`` then checks the stored role.
"""
import logging
from typing import Callable, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.permissions import Permission, roles_with_permission
from ..core.security import TokenClaims, TokenService, get_token_service
from .exceptions import MissingTokenException, NotAuthenticatedException, RoleDeniedException
from .models import UserRole

# Set up logging
logger = logging.getLogger(__name__)

# Bearer scheme; missing credentials are reported by require_auth itself
bearer_scheme = HTTPBearer(auto_error=False)


def require_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    token_service: TokenService = Depends(get_token_service)
) -> TokenClaims:
    """
    Verify the bearer token of a request and attach its claims.

    Args:
        request: Incoming request
        credentials: Parsed Authorization header, if any
        token_service: Service used to verify the token

    Returns:
        TokenClaims: Verified claims of the caller

    Raises:
        MissingTokenException: If no bearer token was sent
        InvalidTokenException: If the token is malformed, tampered with or expired
    """
    if credentials is None or not credentials.credentials:
        raise MissingTokenException()

    claims = token_service.verify(credentials.credentials)
    request.state.claims = claims
    return claims


def get_current_claims(request: Request) -> TokenClaims:
    """
    Read the claims attached by require_auth.

    Args:
        request: Incoming request

    Returns:
        TokenClaims: Claims of the caller

    Raises:
        NotAuthenticatedException: If no guard has attached claims
    """
    claims = getattr(request.state, "claims", None)
    if claims is None:
        raise NotAuthenticatedException()
    return claims


def require_roles(*allowed_roles: UserRole) -> Callable[[Request], TokenClaims]:
    """
    Dependency factory to require specific roles.

    Must be listed after require_auth on the route.

    Args:
        *allowed_roles: Roles permitted to continue

    Returns:
        Callable: Dependency enforcing the role check
    """
    allowed = frozenset(allowed_roles)

    def role_guard(request: Request) -> TokenClaims:
        claims = get_current_claims(request)
        if claims.role not in allowed:
            logger.info(f"Role {claims.role.value} denied for {request.method} {request.url.path}")
            raise RoleDeniedException()
        return claims

    return role_guard


def require_permission(permission: Permission) -> Callable[[Request], TokenClaims]:
    """
    Dependency factory admitting only roles that hold a permission.

    Must be listed after require_auth on the route.

    Args:
        permission: Permission the route needs

    Returns:
        Callable: Role guard for the roles granted the permission
    """
    return require_roles(*roles_with_permission(permission))
