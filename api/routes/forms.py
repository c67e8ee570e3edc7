"""
Form session endpoints.

A session is created from a template, an uploaded schema or a built-in
example; the client then edits values and rows and finally submits. Accepted
submissions are persisted to Supabase in a background task after the response
is sent.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_201_CREATED, HTTP_422_UNPROCESSABLE_CONTENT

from api.models import CreateSessionRequest, SetValueRequest
from api.session_store import SessionStore
from api.supabase_client import insert_submission
from api.utils import error_response
from template_forms.builder import parse_template
from template_forms.examples import example_schema
from template_forms.form import FormSession
from template_forms.intake import extract_text
from template_forms.interchange import from_interchange, to_interchange
from template_forms.models import FormSchema

router = APIRouter(prefix="/v1/api/forms", tags=["forms"])


def _store(request: Request) -> SessionStore:
    return request.app.state.sessions


def _schema_for(body: CreateSessionRequest) -> FormSchema:
    if body.template is not None:
        text = extract_text(body.template, content_type=body.content_type, filename=body.filename)
        return parse_template(text)
    if body.schema_doc is not None:
        return from_interchange(body.schema_doc)
    return example_schema(str(body.example))


def _view(session_id: str, session: FormSession) -> Dict[str, Any]:
    d = session.derived
    return {
        "ok": True,
        "sessionId": session_id,
        "state": session.state.value,
        "schema": to_interchange(session.schema),
        "form": session.render(),
        "values": session.snapshot(),
        "derived": (
            {
                "array": d.array,
                "quantityField": d.quantity_field,
                "priceField": d.price_field,
                "rowTotalField": d.row_total_field,
                "grandTotalField": d.grand_total_field,
            }
            if d is not None
            else None
        ),
    }


@router.post("/sessions", status_code=HTTP_201_CREATED)
async def create_session(body: CreateSessionRequest, request: Request) -> Dict[str, Any]:
    session = FormSession(_schema_for(body))
    session_id = _store(request).create(session)
    return _view(session_id, session)


@router.get("/sessions/{sessionId}")
async def get_session(sessionId: str, request: Request) -> Dict[str, Any]:
    return _view(sessionId, _store(request).get(sessionId))


@router.patch("/sessions/{sessionId}/values")
async def set_value(sessionId: str, body: SetValueRequest, request: Request) -> Dict[str, Any]:
    session = _store(request).get(sessionId)
    if body.array is not None and body.index is not None:
        session.set_row_value(body.array, body.index, body.field, body.value)
    else:
        session.set_value(body.field, body.value)
    return _view(sessionId, session)


@router.post("/sessions/{sessionId}/arrays/{array}/rows", status_code=HTTP_201_CREATED)
async def add_row(sessionId: str, array: str, request: Request) -> Dict[str, Any]:
    session = _store(request).get(sessionId)
    index = session.add_row(array)
    return {**_view(sessionId, session), "index": index}


@router.delete("/sessions/{sessionId}/arrays/{array}/rows/{index}")
async def remove_row(sessionId: str, array: str, index: int, request: Request) -> Dict[str, Any]:
    session = _store(request).get(sessionId)
    session.remove_row(array, index)
    return _view(sessionId, session)


@router.post("/sessions/{sessionId}/submit")
async def submit(sessionId: str, request: Request, background_tasks: BackgroundTasks) -> Any:
    session = _store(request).get(sessionId)
    schema_doc = to_interchange(session.schema)

    def _persist(values: Dict[str, Any]) -> None:
        background_tasks.add_task(insert_submission, sessionId, schema_doc, values)

    result = session.submit(_persist)
    if not result.accepted:
        return error_response(
            HTTP_422_UNPROCESSABLE_CONTENT,
            "field_validation_error",
            "One or more fields are invalid.",
            prefix="val",
            fieldErrors=result.errors,
            values=session.snapshot(),
        )
    return JSONResponse(
        status_code=200,
        content={"ok": True, "sessionId": sessionId, "state": session.state.value, "values": result.values},
    )
