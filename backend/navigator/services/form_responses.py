"""
Organization-scoped form responses.
One row per (form, organization): whoever saves last overwrites answers and becomes user_id.
Saves are a single INSERT ... ON CONFLICT DO UPDATE so two members saving at once
cannot both insert.
"""
import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, joinedload

from navigator.errors import Forbidden, InvalidInput, NotFound
from navigator.models.form import Form
from navigator.models.form_response import FormResponse
from navigator.models.user import User

logger = logging.getLogger(__name__)

NO_ORGANIZATION_MESSAGE = "User must belong to an organization"


def resolve_organization_id(db: Session, user_id: int) -> int:
    """Return the caller's organization_id; Forbidden when the user is gone or has none."""
    org_id = db.scalar(select(User.organization_id).where(User.id == user_id))
    if org_id is None:
        raise Forbidden(NO_ORGANIZATION_MESSAGE)
    return org_id


def validate_answers(answers: Any) -> dict[str, str | list[str]]:
    if not isinstance(answers, dict):
        raise InvalidInput("Answers must be an object keyed by question id")
    for key, value in answers.items():
        if isinstance(value, str):
            continue
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            continue
        raise InvalidInput(f"Invalid answer for question {key}")
    return answers


def _insert_for(db: Session):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert
    if dialect == "sqlite":
        return sqlite.insert
    raise RuntimeError(f"Upsert not supported for dialect {dialect}")


def get_response(db: Session, form_id: int, caller_id: int) -> FormResponse | None:
    org_id = resolve_organization_id(db, caller_id)
    return db.scalar(
        select(FormResponse)
        .options(joinedload(FormResponse.user))
        .where(FormResponse.form_id == form_id, FormResponse.organization_id == org_id)
    )


def put_response(db: Session, form_id: int, caller_id: int, answers: Any) -> FormResponse:
    """Create or overwrite the organization's response to form_id."""
    org_id = resolve_organization_id(db, caller_id)
    answers = validate_answers(answers)
    if db.get(Form, form_id) is None:
        raise NotFound("Form not found")
    insert = _insert_for(db)
    stmt = insert(FormResponse).values(
        form_id=form_id,
        organization_id=org_id,
        user_id=caller_id,
        answers=answers,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[FormResponse.form_id, FormResponse.organization_id],
        set_={
            "answers": stmt.excluded.answers,
            "user_id": stmt.excluded.user_id,
            "updated_at": func.now(),
        },
    )
    try:
        db.execute(stmt)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Form response saved form_id=%s organization_id=%s user_id=%s", form_id, org_id, caller_id)
    # Upsert bypasses the identity map; re-read the row fresh
    db.expire_all()
    return db.scalar(
        select(FormResponse)
        .options(joinedload(FormResponse.user))
        .where(FormResponse.form_id == form_id, FormResponse.organization_id == org_id)
    )


def organization_members(db: Session, caller_id: int) -> list[User]:
    org_id = resolve_organization_id(db, caller_id)
    return list(db.scalars(select(User).where(User.organization_id == org_id).order_by(User.id)).all())
