import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .database import engine
from .db_models import *
from .config import get_settings
from .auth.router import router as auth_router
from .news.router import router as news_router
from .users.router import router as users_router
from .admin.router import router as admin_router
from .contact.router import router as contact_router

settings = get_settings()

# Docker-friendly logging: everything to stdout.
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL}")

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.uses_insecure_secret and settings.ENVIRONMENT not in ("development", "test"):
        logger.warning("JWT_SECRET_KEY is the built-in default; set a private secret for this environment")
    yield
    await engine.dispose()

app = FastAPI(title="NewsHub API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def first_validation_message(exc: RequestValidationError) -> str:
    """Human-readable text for the first failed constraint."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    err = errors[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if err.get("type") == "value_error" and ctx_error is not None:
        return str(ctx_error)

    fields = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
    field = fields[-1] if fields else None
    if err.get("type") == "missing" and field:
        return f"{field} is required"
    if field:
        return f"{field}: {err.get('msg')}"
    return err.get("msg") or "Invalid request"


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": first_validation_message(exc)})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    content = {"message": "Server error"}
    if settings.EXPOSE_ERROR_DETAILS:
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


app.include_router(auth_router)
app.include_router(news_router)
app.include_router(users_router)
app.include_router(admin_router)
app.include_router(contact_router)

@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
