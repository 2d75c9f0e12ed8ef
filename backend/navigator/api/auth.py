"""
Auth routes: register (default role employer, organization created on first use), login (JWT),
GET /api/verify, GET /api/health, and admin promotion.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from navigator.config import Settings
from navigator.database import get_db
from navigator.errors import Conflict, NotFound, Unauthenticated
from navigator.models.organization import Organization
from navigator.models.user import User
from navigator.schemas.auth import (
    AuthResponse,
    HealthResponse,
    LoginRequest,
    PromoteRequest,
    RegisterRequest,
    UserResponse,
    VerifyResponse,
)
from navigator.schemas.base import MessageResponse
from navigator.services.auth import TokenPayload, TokenService, hash_password, verify_password
from navigator.api.deps import get_current_user, get_settings, get_token_service, require_admin

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


def _user_to_response(user: User, last_login: datetime | None = None) -> UserResponse:
    org = user.organization
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role,
        organization=org.name if org else None,
        organization_id=str(user.organization_id) if user.organization_id is not None else None,
        created_at=user.created_at,
        last_login=last_login or user.last_login,
    )


def _load_user(db: Session, **filters) -> User | None:
    """Fetch a user with its organization joined in (no lazy load during serialization)."""
    stmt = select(User).options(joinedload(User.organization)).filter_by(**filters)
    return db.scalar(stmt)


def _get_or_create_organization(db: Session, name: str) -> Organization:
    org = db.scalar(select(Organization).where(Organization.name == name))
    if org:
        return org
    try:
        # savepoint: a concurrent registration may create the same name first
        with db.begin_nested():
            org = Organization(name=name)
            db.add(org)
        logger.info("Created organization %r (id=%s)", name, org.id)
        return org
    except IntegrityError:
        org = db.scalar(select(Organization).where(Organization.name == name))
        if not org:
            raise
        return org


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    data: RegisterRequest,
    db: Session = Depends(get_db),
    cfg: Settings = Depends(get_settings),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new user; joins (or creates) the named organization."""
    email = str(data.email)
    if db.scalar(select(User.id).where(User.email == email)) is not None:
        raise Conflict("User already exists")
    try:
        organization_id = None
        if data.organization:
            organization_id = _get_or_create_organization(db, data.organization).id
        user = User(
            name=data.name,
            email=email,
            password_hash=hash_password(data.password, rounds=cfg.bcrypt_rounds),
            role="employer",
            organization_id=organization_id,
            last_login=datetime.now(timezone.utc),
        )
        db.add(user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Register IntegrityError: %s", e)
        err_msg = str(getattr(e, "orig", e)).lower()
        if "email" in err_msg or "unique" in err_msg:
            raise Conflict("User already exists")
        raise Conflict("Registration failed (constraint)")
    user = _load_user(db, id=user.id)
    logger.info("Registered user id=%s organization_id=%s", user.id, user.organization_id)
    token = tokens.issue(user.id, user.email, user.role)
    return AuthResponse(message="User created successfully", user=_user_to_response(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with email/password; returns JWT. Unknown email and wrong password look identical."""
    user = _load_user(db, email=data.email)
    if not user or not verify_password(data.password, user.password_hash):
        logger.debug("Login failed for %r", data.email)
        raise Unauthenticated(INVALID_CREDENTIALS)
    now = datetime.now(timezone.utc)
    user_out = _user_to_response(user, last_login=now)
    token = tokens.issue(user.id, user.email, user.role)
    user_id = user.id
    try:
        db.execute(update(User).where(User.id == user_id).values(last_login=now))
        db.commit()
    except Exception as e:
        # the token does not depend on last_login
        db.rollback()
        logger.warning("Could not update last_login for user_id=%s: %s", user_id, e)
    return AuthResponse(message="Login successful", user=user_out, token=token)


@router.get("/verify", response_model=VerifyResponse)
def verify(user: User = Depends(get_current_user)):
    """Return the token's user."""
    return VerifyResponse(user=_user_to_response(user))


@router.get("/health", response_model=HealthResponse)
def health():
    """Health check (JSON)."""
    return HealthResponse(status="OK", timestamp=datetime.now(timezone.utc).isoformat())


@router.post("/admin/promote", response_model=MessageResponse)
def promote_admin(
    data: PromoteRequest,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Give an existing user the admin role."""
    user = db.scalar(select(User).where(User.email == data.email))
    if not user:
        raise NotFound("User not found")
    user.role = "admin"
    db.commit()
    logger.info("User id=%s promoted to admin by user_id=%s", user.id, admin.user_id)
    return MessageResponse(message="User promoted to admin successfully")
