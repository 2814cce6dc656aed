import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings
from models.schemas import INVALID_URL_MESSAGE, ValidationErrorItem
from routes.link_preview import router as link_preview_router
from utils.http_client import FetchError, PageFetcher
from utils.middleware import ErrorEnvelopeMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware
from utils.rate_limiter import RateLimiter

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

APP_NAME = "Link Preview API"
APP_VERSION = "1.0.0"


def _validation_item(error: dict) -> dict:
    loc = error.get("loc", ())
    ctx = error.get("ctx") or {}
    if "error" in ctx:
        msg = str(ctx["error"])
    elif loc[-1:] == ("url",):
        msg = INVALID_URL_MESSAGE
    else:
        msg = error.get("msg", "Invalid value")
    return ValidationErrorItem(
        value=None if error.get("type") == "missing" else error.get("input"),
        msg=msg,
        path=".".join(str(part) for part in loc[1:]),
        location=str(loc[0]) if loc else "query",
    ).model_dump()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [_validation_item(error) for error in exc.errors()]
    logger.info(f"Rejected {request.url.path}: {len(errors)} validation error(s)")
    return JSONResponse(status_code=400, content={"errors": errors})


async def fetch_exception_handler(request: Request, exc: FetchError):
    logger.error(f"API Error: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={"error": "Failed to fetch link preview", "message": str(exc)},
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    app = FastAPI(title=APP_NAME, version=APP_VERSION)
    app.state.settings = settings
    app.state.fetcher = PageFetcher(settings)
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)

    app.include_router(link_preview_router, prefix="/api", tags=["link-preview"])
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(FetchError, fetch_exception_handler)

    # Last added runs first: security headers wrap everything else
    app.add_middleware(ErrorEnvelopeMiddleware, expose_errors=settings.is_development)
    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter, prefix="/api")
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_methods=["GET"],
        )
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "name": APP_NAME,
            "version": APP_VERSION,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    logger.info(f"Server is running on port {settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
