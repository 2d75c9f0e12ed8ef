"""
Module: a numbered learning unit. Owns its articles and forms (deleted with it).
"""
from datetime import datetime
from sqlalchemy import Integer, String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from navigator.database import Base


class Module(Base):
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    module_number: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    module_name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    articles = relationship(
        "Article",
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(Article.position, Article.created_at)",
    )
    forms = relationship(
        "Form",
        back_populates="module",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="(Form.position, Form.created_at)",
    )
