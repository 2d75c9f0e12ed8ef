"""
Articles API: public single-article read, admin create/update/delete, atomic reorder.
New articles are appended at max(position) + 1 within their module.
"""
import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from navigator.database import get_db
from navigator.errors import InvalidInput, NotFound
from navigator.models.article import Article
from navigator.models.module import Module
from navigator.schemas.base import MessageResponse
from navigator.schemas.content import (
    ArticleCreateRequest,
    ArticleDetailResponse,
    ArticleReorderRequest,
    ArticleReorderResponse,
    ArticleResponse,
    ArticleUpdateRequest,
)
from navigator.services.auth import TokenPayload
from navigator.services.reordering import reorder_positions
from navigator.api.deps import require_admin

router = APIRouter(prefix="/api/articles", tags=["articles"])
logger = logging.getLogger(__name__)


def next_position(db: Session, model, module_id: int) -> int:
    """Position after the last row of this module (1 for an empty module)."""
    last = db.scalar(select(func.max(model.position)).where(model.module_id == module_id))
    return (last or 0) + 1


# Declared before /{article_id} so "reorder" is not parsed as an id
@router.put("/reorder", response_model=ArticleReorderResponse)
def reorder_articles(
    data: ArticleReorderRequest,
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Apply a batch of {id, position} pairs in one transaction (all or nothing)."""
    updated = reorder_positions(db, Article, data.articles, noun="article")
    return ArticleReorderResponse(
        message="Articles reordered successfully",
        updated_count=len(updated),
        articles=updated,
    )


@router.get("/{article_id}", response_model=ArticleDetailResponse)
def get_article(article_id: int, db: Session = Depends(get_db)):
    """Public: one article with its module."""
    article = db.scalar(
        select(Article).options(joinedload(Article.module)).where(Article.id == article_id)
    )
    if not article:
        raise NotFound("Article not found")
    return ArticleDetailResponse.model_validate(article)


@router.post("", response_model=ArticleResponse, status_code=status.HTTP_201_CREATED)
def create_article(
    data: ArticleCreateRequest,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if not data.module_id or not (data.article_name or "").strip() or not data.content:
        raise InvalidInput("Module ID, article name, and content are required")
    if db.get(Module, data.module_id) is None:
        raise NotFound("Module not found")
    article = Article(
        module_id=data.module_id,
        article_name=data.article_name.strip(),
        content=data.content,
        position=next_position(db, Article, data.module_id),
    )
    db.add(article)
    db.commit()
    db.refresh(article)
    logger.info("Article id=%s created in module_id=%s by user_id=%s", article.id, article.module_id, admin.user_id)
    return ArticleResponse.model_validate(article)


@router.put("/{article_id}", response_model=ArticleResponse)
def update_article(
    article_id: int,
    data: ArticleUpdateRequest,
    _admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    if article_id <= 0:
        raise InvalidInput("Invalid article ID")
    if not (data.article_name or "").strip() or not data.content:
        raise InvalidInput("Article name and content are required")
    article = db.get(Article, article_id)
    if not article:
        raise NotFound("Article not found")
    article.article_name = data.article_name.strip()
    article.content = data.content
    db.commit()
    db.refresh(article)
    return ArticleResponse.model_validate(article)


@router.delete("/{article_id}", response_model=MessageResponse)
def delete_article(
    article_id: int,
    admin: TokenPayload = Depends(require_admin),
    db: Session = Depends(get_db),
):
    article = db.get(Article, article_id)
    if not article:
        raise NotFound("Article not found")
    db.delete(article)
    db.commit()
    logger.info("Article id=%s deleted by user_id=%s", article_id, admin.user_id)
    return MessageResponse(message="Article deleted successfully")
