"""
SQLAlchemy models. Import here so Alembic and the app can use them.
"""
from navigator.models.organization import Organization
from navigator.models.user import User
from navigator.models.module import Module
from navigator.models.article import Article
from navigator.models.form import Form
from navigator.models.form_response import FormResponse
from navigator.models.file import File

__all__ = ["Organization", "User", "Module", "Article", "Form", "FormResponse", "File"]
