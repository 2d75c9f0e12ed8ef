"""
Form responses API: one shared answer set per organization and form.
GET returns null when the organization has not answered yet.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from navigator.database import get_db
from navigator.models.user import User
from navigator.schemas.form_response import AnswersRequest, FormAnswerResponse, MemberResponse
from navigator.services import form_responses as responses
from navigator.services.auth import TokenPayload
from navigator.api.deps import require_auth, require_same_organization

router = APIRouter(prefix="/api", tags=["form-responses"])
logger = logging.getLogger(__name__)


@router.get("/forms/{form_id}/response", response_model=FormAnswerResponse | None)
def get_form_response(
    form_id: int,
    payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    row = responses.get_response(db, form_id, payload.user_id)
    return FormAnswerResponse.model_validate(row) if row else None


@router.post("/forms/{form_id}/response", response_model=FormAnswerResponse)
def save_form_response(
    form_id: int,
    data: AnswersRequest,
    payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Upsert the organization's answers; the caller becomes the recorded last editor."""
    row = responses.put_response(db, form_id, payload.user_id, data.answers)
    return FormAnswerResponse.model_validate(row)


@router.get("/forms/{form_id}/organization/users", response_model=list[MemberResponse])
def organization_users(
    form_id: int,
    payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Members of the caller's organization (who may be editing this form's shared answers)."""
    return [MemberResponse.model_validate(u) for u in responses.organization_members(db, payload.user_id)]


@router.get("/organization/users/{user_id}", response_model=MemberResponse)
def organization_user(
    user_id: int,
    _caller: User = Depends(require_same_organization("user_id")),
    db: Session = Depends(get_db),
):
    """A teammate's profile; only visible inside the same organization."""
    return MemberResponse.model_validate(db.get(User, user_id))
