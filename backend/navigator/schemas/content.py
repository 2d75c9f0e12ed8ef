"""
Module, article and form schemas (public, authenticated and admin routes share them).
"""
from datetime import datetime
from typing import Any, Literal

from navigator.schemas.base import CamelModel


class ModuleCreateRequest(CamelModel):
    # optional here so the route can answer with one combined message
    module_number: int | None = None
    module_name: str | None = None


class ModuleResponse(CamelModel):
    id: int
    module_number: int
    module_name: str
    created_at: datetime | None = None


class ArticleCreateRequest(CamelModel):
    module_id: int | None = None
    article_name: str | None = None
    content: str | None = None


class ArticleUpdateRequest(CamelModel):
    article_name: str | None = None
    content: str | None = None


class ArticleResponse(CamelModel):
    id: int
    module_id: int
    article_name: str
    content: str
    position: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ArticleDetailResponse(ArticleResponse):
    module: ModuleResponse


class ModuleWithArticlesResponse(ModuleResponse):
    articles: list[ArticleResponse] = []


class FormQuestion(CamelModel):
    id: str
    text: str
    type: Literal["text", "textarea", "select", "checkbox", "multiple_choice"] = "text"
    options: list[str] | None = None
    required: bool = False


class FormCreateRequest(CamelModel):
    module_id: int
    form_name: str
    questions: list[FormQuestion] = []


class FormUpdateRequest(CamelModel):
    form_name: str | None = None
    questions: list[FormQuestion] | None = None


class FormDefinitionResponse(CamelModel):
    id: int
    module_id: int
    form_name: str
    questions: list[FormQuestion]
    position: int
    created_at: datetime | None = None
    updated_at: datetime | None = None


class ArticleReorderRequest(CamelModel):
    # validated by services.reordering so each failure gets its own message
    articles: Any = None


class FormReorderRequest(CamelModel):
    forms: Any = None


class PositionItem(CamelModel):
    id: int
    position: int


class ArticleReorderResponse(CamelModel):
    message: str
    updated_count: int
    articles: list[PositionItem]


class FormReorderResponse(CamelModel):
    message: str
    updated_count: int
    forms: list[PositionItem]
