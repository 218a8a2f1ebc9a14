# bookmarket/main.py
"""Application assembly.

Run with: uvicorn bookmarket.main:create_app --factory
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.auth import router as auth_router
from .api.routes import router as api_router
from .api.uploads import router as uploads_router
from .auth import SessionManager
from .config import Settings
from .db import Database
from .exceptions import MarketplaceError
from .images import ImgurClient
from .utils import logger

SECURITY_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    err = errors[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    if err.get("type") == "json_invalid":
        return "Request body must be valid JSON"
    # loc is ("body" | "query" | "path", field, ...)
    loc = err.get("loc") or ("",)
    field = loc[1] if len(loc) > 1 else loc[0]
    return f"{field}: {err.get('msg')}"


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(MarketplaceError)
    async def marketplace_error(request: Request, exc: MarketplaceError):
        return JSONResponse({"message": exc.message}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse({"message": _validation_message(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        # runs outside the http middleware stack, so headers are set here
        return JSONResponse({"message": "Internal server error"}, status_code=500, headers=SECURITY_HEADERS)


def create_app(settings: Optional[Settings] = None, image_host: Optional[ImgurClient] = None) -> FastAPI:
    settings = (settings or Settings.load()).require_valid()

    db = Database(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    sessions = SessionManager(settings.session_secret, secure_cookie=settings.is_production)
    image_host = image_host or ImgurClient(settings.imgur_client_id, base_url=settings.imgur_api_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Ensure database tables are created on startup
        db.create_all()
        logger.info("Bookmarket started (%s)", settings.environment)
        yield
        await image_host.close()
        db.dispose()

    app = FastAPI(title="bookmarket", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db
    app.state.sessions = sessions
    app.state.image_host = image_host

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        for key, value in SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    register_error_handlers(app)
    app.include_router(api_router)
    app.include_router(auth_router)
    app.include_router(uploads_router)
    return app
