from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Tuple, Type

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_413_CONTENT_TOO_LARGE,
    HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


def _repo_root() -> Path:
    # `api/main.py` lives at `<repo>/api/main.py`
    return Path(__file__).resolve().parents[1]


def _ensure_src_on_path() -> None:
    src = _repo_root() / "src"
    if not src.is_dir():
        return
    s = str(src)
    if s not in sys.path:
        sys.path.insert(0, s)


_ensure_src_on_path()

from api.http_logging import install_http_logging  # noqa: E402
from api.routes import forms, health, templates  # noqa: E402
from api.session_store import SessionNotFoundError, SessionStore  # noqa: E402
from api.utils import error_response  # noqa: E402
from template_forms.config import get_settings  # noqa: E402
from template_forms.errors import (  # noqa: E402
    DerivedFieldError,
    FormStateError,
    RowIndexError,
    SchemaFormatError,
    SchemaInvalidError,
    TemplateFormsError,
    TemplateParseError,
    TemplateTooLargeError,
    UnknownExampleError,
    UnknownFieldError,
    UnsupportedFormatError,
)

logger = logging.getLogger("api")

# Most specific first; the first matching class decides the response.
_ERROR_STATUS: List[Tuple[Type[BaseException], int, str]] = [
    (TemplateParseError, HTTP_422_UNPROCESSABLE_CONTENT, "template_parse_error"),
    (UnsupportedFormatError, HTTP_415_UNSUPPORTED_MEDIA_TYPE, "unsupported_format"),
    (TemplateTooLargeError, HTTP_413_CONTENT_TOO_LARGE, "template_too_large"),
    (SchemaFormatError, HTTP_422_UNPROCESSABLE_CONTENT, "schema_format_error"),
    (SchemaInvalidError, HTTP_422_UNPROCESSABLE_CONTENT, "schema_invalid"),
    (UnknownExampleError, HTTP_404_NOT_FOUND, "unknown_example"),
    (RowIndexError, HTTP_400_BAD_REQUEST, "row_index_error"),
    (DerivedFieldError, HTTP_400_BAD_REQUEST, "derived_field"),
    (UnknownFieldError, HTTP_404_NOT_FOUND, "unknown_field"),
    (FormStateError, HTTP_409_CONFLICT, "form_state_error"),
    (SessionNotFoundError, HTTP_404_NOT_FOUND, "session_not_found"),
]


def _status_for(exc: BaseException) -> Tuple[int, str]:
    for cls, status, code in _ERROR_STATUS:
        if isinstance(exc, cls):
            return status, code
    return HTTP_400_BAD_REQUEST, "bad_request"


def _details_for(exc: BaseException):
    if isinstance(exc, TemplateParseError):
        return exc.to_dict()
    if isinstance(exc, (SchemaFormatError, SchemaInvalidError)):
        return exc.errors
    if isinstance(exc, RowIndexError):
        return {"array": exc.array, "index": exc.index, "rows": exc.size}
    return None


def create_app() -> FastAPI:
    # Load `.env` + `.env.local` when present (local dev convenience).
    load_dotenv(_repo_root() / ".env", override=False)
    load_dotenv(_repo_root() / ".env.local", override=False)

    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))

    app = FastAPI(title="template-form-service", version="0.1.0")
    app.state.sessions = SessionStore(ttl_sec=settings.session_ttl_sec)

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        resp = error_response(
            HTTP_422_UNPROCESSABLE_CONTENT,
            "validation_error",
            "Request body did not match expected schema.",
            prefix="val",
            # Echoing `input` back could include values JSON cannot carry (NaN).
            details=jsonable_encoder([{k: v for k, v in e.items() if k != "input"} for e in exc.errors()]),
        )
        print(f"[api] 422 validation_error path={request.url.path} errors={exc.errors()}", flush=True)
        return resp

    async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
        status, code = _status_for(exc)
        logger.info("%s %s path=%s: %s", status, code, request.url.path, exc)
        message = exc.reason if isinstance(exc, TemplateParseError) else str(exc)
        return error_response(status, code, message, details=_details_for(exc))

    app.add_exception_handler(TemplateFormsError, _domain_error_handler)
    app.add_exception_handler(SessionNotFoundError, _domain_error_handler)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        print(f"[api] 500 internal_error path={request.url.path} err={exc!r}", flush=True)
        return error_response(HTTP_500_INTERNAL_SERVER_ERROR, "internal_error", "Unhandled server error.")

    app.include_router(health.router)
    app.include_router(templates.router)
    app.include_router(forms.router)
    install_http_logging(app)
    return app


app = create_app()
