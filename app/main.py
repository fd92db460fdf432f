import logging
import os
from pathlib import Path
import traceback

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from mangum import Mangum

from app.api.routes import auth, dollar, health, migrations, raffles, tickets, uploads
from app.api.routes.health import SERVICE_VERSION
from app.core.config import settings
from app.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

API_PREFIX = "/api"
api_gateway_base_path = os.getenv("API_GATEWAY_BASE_PATH", "").strip()
if api_gateway_base_path and not api_gateway_base_path.startswith("/"):
    api_gateway_base_path = f"/{api_gateway_base_path}"

app = FastAPI(
    title="Raffle Tickets API",
    version=SERVICE_VERSION,
    docs_url=None,
    redoc_url=None,
    openapi_url=f"{API_PREFIX}/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=False,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(migrations.router)
api_router.include_router(dollar.router)
api_router.include_router(raffles.router)
api_router.include_router(tickets.router)
api_router.include_router(uploads.router)
app.include_router(api_router)

for static_dir in (settings.images_dir, settings.uploads_dir):
    try:
        Path(static_dir).mkdir(parents=True, exist_ok=True)
    except OSError:
        logger.warning("Static directory %s is not writable", static_dir)

app.mount("/images", StaticFiles(directory=settings.images_dir, check_dir=False), name="images")
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")


@app.exception_handler(HTTPException)
def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "type": getattr(exc, "error_type", "http_error")},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(_: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "message": "Validation error",
            "type": "validation_error",
        },
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    if settings.expose_errors:
        detail = {
            "type": exc.__class__.__name__,
            "message": str(exc) or "Unhandled error",
            "trace": "".join(traceback.format_exception(exc)),
        }
    else:
        detail = "Internal Server Error"
    return JSONResponse(status_code=500, content={"detail": detail, "type": "server_error"})


def _openapi_url(request: Request) -> str:
    """Schema URL as seen by the browser, behind API Gateway stages or a root path."""
    base_path = request.scope.get("root_path", "").rstrip("/") or api_gateway_base_path.rstrip("/")
    if not base_path:
        path = request.url.path.rstrip("/")
        for suffix in (f"{API_PREFIX}/docs", f"{API_PREFIX}/redoc"):
            if path.endswith(suffix):
                base_path = path[: -len(suffix)]
    return f"{base_path}{app.openapi_url}"


@app.get(f"{API_PREFIX}/docs", include_in_schema=False)
def swagger_ui(request: Request):
    return get_swagger_ui_html(openapi_url=_openapi_url(request), title=f"{app.title} - Swagger UI")


@app.get(f"{API_PREFIX}/redoc", include_in_schema=False)
def redoc(request: Request):
    return get_redoc_html(openapi_url=_openapi_url(request), title=f"{app.title} - ReDoc")


handler = Mangum(app, api_gateway_base_path=api_gateway_base_path or None)
