"""FastAPI web application exposing the document store."""

import json
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..lib.config import ALLOWED_ORIGINS, PUBLIC_BASE_URL, TRUST_FORWARDED_FOR
from ..lib.exceptions import DocumentStoreError, InvalidRequestError, RateLimitedError
from ..lib.logging import get_logger
from ..lib.text import sanitize_message
from ..models.document import ErrorResponse, LoadedDocument, SaveResult
from ..services.document_store import DocumentStore, create_document_store

logger = get_logger(__name__)

app = FastAPI(
    title="mdshare API",
    description="Save and load shared markdown documents",
    version=__version__,
)

CORS_METHODS = ["GET", "POST", "OPTIONS"]
CORS_HEADERS = ["Content-Type"]
API_PATHS = ("/api/save", "/api/load")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=False,
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
)


@app.middleware("http")
async def answer_options(request: Request, call_next):
    """
    Answer OPTIONS on the API endpoints with an empty 200.

    CORS headers are only sent when the origin is allowed; other origins get
    the same empty 200 and the browser enforces the policy.
    """
    if request.method != "OPTIONS" or request.url.path not in API_PATHS:
        return await call_next(request)

    headers = {}
    origin = request.headers.get("origin")
    if origin and ("*" in ALLOWED_ORIGINS or origin in ALLOWED_ORIGINS):
        headers = {
            "Access-Control-Allow-Origin": origin,
            "Access-Control-Allow-Methods": ", ".join(CORS_METHODS),
            "Access-Control-Allow-Headers": ", ".join(CORS_HEADERS),
            "Access-Control-Max-Age": "600",
            "Vary": "Origin",
        }
    return Response(status_code=200, headers=headers)


_document_store: Optional[DocumentStore] = None


def get_document_store() -> DocumentStore:
    """Return the process-wide document store, creating it on first use."""
    global _document_store
    if _document_store is None:
        _document_store = create_document_store()
    return _document_store


def get_client_address(request: Request) -> str:
    """Client network address used for rate limiting and logs."""
    if TRUST_FORWARDED_FOR:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def get_base_url(request: Request) -> str:
    """Application URL that share links point at."""
    return PUBLIC_BASE_URL or str(request.base_url)


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=sanitize_message(message)).model_dump(),
        headers=headers,
    )


def store_error_response(error: DocumentStoreError) -> JSONResponse:
    headers = None
    if isinstance(error, RateLimitedError) and error.retry_after is not None:
        headers = {"Retry-After": str(int(error.retry_after) + 1)}
    return error_response(error.status_code, error.message, headers)


def _log_store_error(event: str, error: DocumentStoreError, **context) -> None:
    log = logger.error if error.status_code >= 500 else logger.warning
    log(event, error=str(error), error_type=type(error).__name__, status=error.status_code, **context)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render framework errors (405, 404 on unknown paths) in the API envelope."""
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request")


@app.post("/api/save", response_model=SaveResult)
async def save_document(
    request: Request,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Save markdown content and return a shareable URL.

    Body: {"content": "...", "title": "optional"}
    """
    client_address = get_client_address(request)

    try:
        body = await request.body()
        try:
            payload = json.loads(body) if body else {}
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            # Unparseable bodies still count against the client's quota
            await run_in_threadpool(store.admit, client_address)
            raise InvalidRequestError()

        result = await run_in_threadpool(
            store.save,
            payload.get("content"),
            payload.get("title"),
            client_address=client_address,
            base_url=get_base_url(request),
        )
        return result

    except DocumentStoreError as e:
        _log_store_error("save_failed", e, client_address=client_address)
        return store_error_response(e)
    except Exception as e:
        logger.exception("save_unexpected_error", client_address=client_address, error=str(e))
        return error_response(500, "Internal server error")


@app.get("/api/load", response_model=LoadedDocument)
def load_document(
    request: Request,
    id: Optional[str] = None,
    store: DocumentStore = Depends(get_document_store),
):
    """Load a shared document by ID or slug-ID."""
    client_address = get_client_address(request)

    try:
        return store.load(id)
    except DocumentStoreError as e:
        _log_store_error("load_failed", e, client_address=client_address, requested_id=id)
        return store_error_response(e)
    except Exception as e:
        logger.exception(
            "load_unexpected_error",
            client_address=client_address,
            requested_id=id,
            error=str(e),
        )
        return error_response(500, "Internal server error")


@app.get("/api/health")
async def health_check(store: DocumentStore = Depends(get_document_store)):
    """Health check endpoint."""
    documents_dir = store.documents_dir
    exists = documents_dir.is_dir()
    return {
        "status": "healthy" if exists else "degraded",
        "version": __version__,
        "documents_dir": str(documents_dir),
        "documents_dir_exists": exists,
    }


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False
):
    """Run the FastAPI server."""
    uvicorn.run(
        "mdshare.web.app:app",
        host=host,
        port=port,
        reload=reload
    )


if __name__ == "__main__":
    run_server()
