"""
Shared dependencies: bearer token auth, admin gate, same-organization gate.
Request flow: no token -> 401; bad token -> 403; valid token -> role / organization checks.
"""
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from navigator.config import settings
from navigator.database import get_db
from navigator.errors import Forbidden, NotFound, Unauthenticated
from navigator.models.user import User
from navigator.services.auth import TokenPayload, TokenService

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)


def get_settings():
    return settings


def get_token_service() -> TokenService:
    return TokenService(settings)


def require_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> TokenPayload:
    """Require a valid Bearer token; return its decoded payload."""
    if not credentials or not (getattr(credentials, "credentials", None) or "").strip():
        logger.debug("Auth failed: no Bearer token in request")
        raise Unauthenticated("Access token required")
    payload = tokens.verify(credentials.credentials.strip())
    return payload


def require_admin(payload: TokenPayload = Depends(require_auth)) -> TokenPayload:
    if not payload.is_admin:
        logger.debug("Admin check failed for user_id=%s role=%s", payload.user_id, payload.role)
        raise Forbidden("Admin access required")
    return payload


def get_current_user(
    payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
) -> User:
    """Persisted row for the token's user; 404 when the token outlived the account."""
    user = db.scalar(
        select(User).options(joinedload(User.organization)).where(User.id == payload.user_id)
    )
    if not user:
        raise NotFound("User not found")
    return user


def require_same_organization(target_param: str = "user_id"):
    """
    Dependency factory: caller must belong to an organization, and when the route has
    target_param in its path, the target user must belong to the same one.
    Returns the caller's User.
    """

    def check_same_organization(
        request: Request,
        payload: TokenPayload = Depends(require_auth),
        db: Session = Depends(get_db),
    ) -> User:
        caller = db.get(User, payload.user_id)
        if not caller or caller.organization_id is None:
            raise Forbidden("User must belong to an organization")
        raw_target = request.path_params.get(target_param)
        if raw_target is not None:
            target = None
            if str(raw_target).isascii() and str(raw_target).isdigit():
                target = db.get(User, int(raw_target))
            if not target or target.organization_id != caller.organization_id:
                raise Forbidden("Access denied: users must be in the same organization")
        return caller

    return check_same_organization
