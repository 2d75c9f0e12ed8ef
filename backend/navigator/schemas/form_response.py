"""
Organization-shared form response schemas.
"""
from datetime import datetime
from typing import Any

from navigator.schemas.base import CamelModel


class AnswersRequest(CamelModel):
    answers: Any = None


class MemberResponse(CamelModel):
    id: int
    name: str
    email: str


class FormAnswerResponse(CamelModel):
    id: int
    form_id: int
    organization_id: int
    user_id: int
    answers: dict[str, str | list[str]]
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user: MemberResponse | None = None
