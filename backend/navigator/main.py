"""
FastAPI application entrypoint.
Run with: uvicorn navigator.main:app --reload --port 5000 (from backend/)

API base path: every route is mounted under /api.
  - Auth:     POST /api/register, POST /api/login, GET /api/verify, GET /api/health, POST /api/admin/promote
  - Modules:  GET /api/modules[/public|/authenticated], GET /api/modules/{id}/articles[/public|/authenticated],
              GET /api/modules/{id}/forms[/authenticated], admin POST/PUT/DELETE /api/modules
  - Articles: GET /api/articles/{id}, admin POST/PUT/DELETE /api/articles, PUT /api/articles/reorder
  - Forms:    admin POST/PUT/DELETE /api/forms, PUT /api/forms/reorder
  - Responses: GET/POST /api/forms/{id}/response, GET /api/forms/{id}/organization/users
  - Files:    POST /api/upload, GET /api/files/{id}, GET /api/files/{id}/info

Every error body is {"error": "<message>"}.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from navigator.config import DEFAULT_SECRET_KEY, settings
from navigator.errors import NavigatorError
from navigator.api.auth import router as auth_router
from navigator.api.modules import router as modules_router
from navigator.api.articles import router as articles_router
from navigator.api.forms import router as forms_router
from navigator.api.form_responses import router as form_responses_router
from navigator.api.files import router as files_router

logger = logging.getLogger("navigator.main")

app = FastAPI(
    title="Fair Chance Navigator API",
    description="Learning modules, articles and shared worksheets for employers building fair-chance hiring practices.",
    version="2.0.0",
)

_origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins if _origins else ["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(modules_router)
app.include_router(articles_router)
app.include_router(forms_router)
app.include_router(form_responses_router)
app.include_router(files_router)


def _error(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(NavigatorError)
async def navigator_error_handler(request: Request, exc: NavigatorError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return _error(exc.status_code, exc.message, headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads are a 400 with the first problem spelled out."""
    errors = exc.errors()
    if not errors:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid request")
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid value")
    return _error(status.HTTP_400_BAD_REQUEST, f"{loc}: {msg}" if loc else msg)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error"
    if settings.debug:
        message = f"Internal server error: {type(exc).__name__}: {exc}"
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


@app.on_event("startup")
def startup():
    """Init SQLite DB. Fail fast if production uses the default SECRET_KEY."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if settings.is_production and (settings.secret_key or "").strip() == DEFAULT_SECRET_KEY:
        logger.critical("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
        raise RuntimeError("SECRET_KEY must be set in production. Set SECRET_KEY in env or .env.")
    from navigator.database import init_sqlite_db
    init_sqlite_db()
    logger.info("Fair Chance Navigator API ready (env=%s)", settings.env or "local")
