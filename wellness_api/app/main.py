"""
Main entrypoint for the Wellness API.

``create_app`` builds and configures the FastAPI application: logging,
CORS, request logging, the JSON error envelope and the versioned
router.  The key/value and blob stores are created here from the
settings (or injected by the caller, as the tests do) and exposed on
``app.state`` for the request dependencies.  An instance is created at
import time as ``app`` so it can be served directly::

    uvicorn wellness_api.app.main:app --reload
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api.v1.router import router as v1_router
from .core.blob_store import BlobStore, LocalBlobStore, S3BlobStore
from .core.config import Settings, settings as default_settings
from .core.errors import WellnessError
from .core.kv_store import KVStore, SqliteKVStore, resolve_database_path
from .core.logging_config import setup_logging
from .schemas.common import error_envelope


logger = logging.getLogger(__name__)


def build_kv_store(cfg: Settings) -> KVStore:
    return SqliteKVStore(resolve_database_path(cfg.database_url))


def build_blob_store(cfg: Settings) -> BlobStore:
    """Instantiate the blob backend named by ``cfg.blob_backend``."""
    if cfg.blob_backend == "s3":
        return S3BlobStore(
            bucket=cfg.blob_bucket,
            region=cfg.aws_region,
            access_key_id=cfg.aws_access_key_id,
            secret_access_key=cfg.aws_secret_access_key,
        )
    if cfg.blob_backend != "local":
        raise ValueError(f"Unknown BLOB_BACKEND {cfg.blob_backend!r}; expected 'local' or 's3'")
    base_url = f"{cfg.public_base_url.rstrip('/')}{cfg.api_prefix}/blobs"
    return LocalBlobStore(
        root=cfg.blob_dir,
        bucket=cfg.blob_bucket,
        base_url=base_url,
        secret=cfg.signing_secret,
    )


def _validation_message(exc: RequestValidationError) -> str:
    """Name the first offending field, e.g. ``emoji: Field required``."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Request body is not valid JSON"
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    field = ".".join(loc) or "body"
    return f"{field}: {first.get('msg', 'invalid value')}"


def register_exception_handlers(app: FastAPI) -> None:
    """Render expected failures as ``{"success": false, "error": ...}``.

    Anything else is caught by the request middleware in ``create_app``.
    """

    @app.exception_handler(WellnessError)
    async def wellness_error_handler(request: Request, exc: WellnessError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_envelope(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content=error_envelope(_validation_message(exc)))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    # A missing bucket is created; failure here must not stop the API.
    try:
        app.state.blobs.ensure_bucket()
    except Exception as exc:
        logger.error("Error initializing storage: %s", exc)
    yield


def create_app(
    cfg: Optional[Settings] = None,
    kv: Optional[KVStore] = None,
    blobs: Optional[BlobStore] = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    Parameters
    ----------
    cfg : Settings, optional
        Settings to use; defaults to the environment‑derived
        ``core.config.settings``.
    kv : KVStore, optional
        Record store.  Defaults to an SQLite store at
        ``cfg.database_url``.
    blobs : BlobStore, optional
        Photo store.  Defaults to the backend named by
        ``cfg.blob_backend``.

    Returns
    -------
    FastAPI
        A configured application instance.
    """
    cfg = cfg or default_settings
    setup_logging(cfg.log_level, cfg.log_file or None)

    app = FastAPI(title=cfg.project_name, version=cfg.api_version, lifespan=lifespan)
    app.state.settings = cfg
    app.state.kv = kv if kv is not None else build_kv_store(cfg)
    app.state.blobs = blobs if blobs is not None else build_blob_store(cfg)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse(status_code=500, content=error_envelope(str(exc)))
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    # Added last so it wraps every response, the 500 envelope included.
    origins = [o.strip() for o in cfg.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=600,
    )

    register_exception_handlers(app)
    app.include_router(v1_router, prefix=cfg.api_prefix)

    return app


# Create the application instance at import time so that uvicorn can
# discover it without calling create_app manually.
app = create_app()
