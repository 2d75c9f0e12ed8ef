"""
Forms API (admin): create, update, delete, atomic reorder.
Listings live in api.modules; organization responses in api.form_responses.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from navigator.database import get_db
from navigator.errors import InvalidInput, NotFound
from navigator.models.form import Form
from navigator.models.module import Module
from navigator.schemas.base import MessageResponse
from navigator.schemas.content import (
    FormCreateRequest,
    FormDefinitionResponse,
    FormReorderRequest,
    FormReorderResponse,
    FormUpdateRequest,
)
from navigator.services.auth import TokenPayload
from navigator.services.reordering import reorder_positions
from navigator.api.articles import next_position
from navigator.api.deps import require_admin

router = APIRouter(prefix="/api/forms", tags=["forms"])
logger = logging.getLogger(__name__)


def _questions_json(questions) -> list[dict]:
    return [q.model_dump(exclude_none=True) for q in questions]


@router.put("/reorder", response_model=FormReorderResponse)
def reorder_forms(
    data: FormReorderRequest,
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Same validation and single transaction as article reordering."""
    updated = reorder_positions(db, Form, data.forms, noun="form")
    return FormReorderResponse(
        message="Forms reordered successfully",
        updated_count=len(updated),
        forms=updated,
    )


@router.post("", response_model=FormDefinitionResponse, status_code=status.HTTP_201_CREATED)
def create_form(
    data: FormCreateRequest,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    name = data.form_name.strip()
    if not name:
        raise InvalidInput("Form name is required")
    if db.get(Module, data.module_id) is None:
        raise NotFound("Module not found")
    form = Form(
        module_id=data.module_id,
        form_name=name,
        questions=_questions_json(data.questions),
        position=next_position(db, Form, data.module_id),
    )
    db.add(form)
    db.commit()
    db.refresh(form)
    logger.info("Form id=%s created in module_id=%s by user_id=%s", form.id, form.module_id, admin.user_id)
    return FormDefinitionResponse.model_validate(form)


@router.put("/{form_id}", response_model=FormDefinitionResponse)
def update_form(
    form_id: int,
    data: FormUpdateRequest,
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    form = db.get(Form, form_id)
    if not form:
        raise NotFound("Form not found")
    if data.form_name is not None:
        name = data.form_name.strip()
        if not name:
            raise InvalidInput("Form name is required")
        form.form_name = name
    if data.questions is not None:
        form.questions = _questions_json(data.questions)
    db.commit()
    db.refresh(form)
    return FormDefinitionResponse.model_validate(form)


@router.delete("/{form_id}", response_model=MessageResponse)
def delete_form(
    form_id: int,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    form = db.get(Form, form_id)
    if not form:
        raise NotFound("Form not found")
    db.delete(form)
    db.commit()
    logger.info("Form id=%s deleted by user_id=%s", form_id, admin.user_id)
    return MessageResponse(message="Form deleted successfully")
