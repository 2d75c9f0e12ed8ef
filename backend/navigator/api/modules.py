"""
Modules API: public and authenticated listings (same payloads, different gate),
module article/form listings, admin CRUD. Modules sort by (module_number, created_at).
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from navigator.database import get_db
from navigator.errors import InvalidInput, NotFound
from navigator.models.article import Article
from navigator.models.form import Form
from navigator.models.module import Module
from navigator.schemas.base import MessageResponse
from navigator.schemas.content import (
    ArticleResponse,
    FormDefinitionResponse,
    ModuleCreateRequest,
    ModuleResponse,
    ModuleWithArticlesResponse,
)
from navigator.services.auth import TokenPayload
from navigator.api.deps import require_admin, require_auth

router = APIRouter(prefix="/api", tags=["modules"])
logger = logging.getLogger(__name__)

MODULE_FIELDS_REQUIRED = "Module number and name are required"


def list_modules(db: Session, with_articles: bool = False) -> list[Module]:
    stmt = select(Module).order_by(Module.module_number, Module.created_at, Module.id)
    if with_articles:
        stmt = stmt.options(selectinload(Module.articles))
    return list(db.scalars(stmt).all())


def module_articles(db: Session, module_id: int) -> list[Article]:
    stmt = (
        select(Article)
        .where(Article.module_id == module_id)
        .order_by(Article.position, Article.created_at, Article.id)
    )
    return list(db.scalars(stmt).all())


def module_forms(db: Session, module_id: int) -> list[Form]:
    stmt = (
        select(Form)
        .where(Form.module_id == module_id)
        .order_by(Form.position, Form.created_at, Form.id)
    )
    return list(db.scalars(stmt).all())


def _modules_out(modules: list[Module]) -> list[ModuleResponse]:
    return [ModuleResponse.model_validate(m) for m in modules]


def _articles_out(articles: list[Article]) -> list[ArticleResponse]:
    return [ArticleResponse.model_validate(a) for a in articles]


def _forms_out(forms: list[Form]) -> list[FormDefinitionResponse]:
    return [FormDefinitionResponse.model_validate(f) for f in forms]


def _validated_module_fields(data: ModuleCreateRequest) -> tuple[int, str]:
    name = (data.module_name or "").strip()
    if not data.module_number or not name:
        raise InvalidInput(MODULE_FIELDS_REQUIRED)
    return data.module_number, name


# Public ----------------------------------------------------------------------


@router.get("/modules", response_model=list[ModuleResponse])
@router.get("/modules/public", response_model=list[ModuleResponse])
def public_modules(db: Session = Depends(get_db)):
    """All modules, no token required."""
    return _modules_out(list_modules(db))


@router.get("/modules/{module_id}/articles", response_model=list[ArticleResponse])
@router.get("/modules/{module_id}/articles/public", response_model=list[ArticleResponse])
def public_module_articles(module_id: int, db: Session = Depends(get_db)):
    return _articles_out(module_articles(db, module_id))


@router.get("/modules/{module_id}/forms", response_model=list[FormDefinitionResponse])
def public_module_forms(module_id: int, db: Session = Depends(get_db)):
    return _forms_out(module_forms(db, module_id))


# Authenticated ---------------------------------------------------------------


@router.get("/modules/authenticated", response_model=list[ModuleResponse])
def authenticated_modules(
    _payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return _modules_out(list_modules(db))


@router.get("/modules/{module_id}/articles/authenticated", response_model=list[ArticleResponse])
def authenticated_module_articles(
    module_id: int,
    _payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return _articles_out(module_articles(db, module_id))


@router.get("/modules/{module_id}/forms/authenticated", response_model=list[FormDefinitionResponse])
def authenticated_module_forms(
    module_id: int,
    _payload: TokenPayload = Depends(require_auth),
    db: Session = Depends(get_db),
):
    return _forms_out(module_forms(db, module_id))


# Admin -----------------------------------------------------------------------


@router.get("/admin/modules", response_model=list[ModuleWithArticlesResponse])
def admin_modules(
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Modules with their articles (CMS tree)."""
    return [ModuleWithArticlesResponse.model_validate(m) for m in list_modules(db, with_articles=True)]


@router.post("/modules", response_model=ModuleResponse, status_code=status.HTTP_201_CREATED)
def create_module(
    data: ModuleCreateRequest,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    number, name = _validated_module_fields(data)
    module = Module(module_number=number, module_name=name)
    db.add(module)
    db.commit()
    db.refresh(module)
    logger.info("Module id=%s created by user_id=%s", module.id, admin.user_id)
    return ModuleResponse.model_validate(module)


@router.put("/modules/{module_id}", response_model=ModuleResponse)
def update_module(
    module_id: int,
    data: ModuleCreateRequest,
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    number, name = _validated_module_fields(data)
    module = db.get(Module, module_id)
    if not module:
        raise NotFound("Module not found")
    module.module_number = number
    module.module_name = name
    db.commit()
    db.refresh(module)
    return ModuleResponse.model_validate(module)


@router.delete("/modules/{module_id}", response_model=MessageResponse)
def delete_module(
    module_id: int,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Delete a module together with its articles and forms."""
    module = db.get(Module, module_id)
    if not module:
        raise NotFound("Module not found")
    db.delete(module)
    db.commit()
    logger.info("Module id=%s deleted by user_id=%s", module_id, admin.user_id)
    return MessageResponse(message="Module deleted successfully")
