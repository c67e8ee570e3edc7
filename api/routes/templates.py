from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, File, UploadFile

from api.models import ParseTemplateRequest, ValidateSchemaRequest
from template_forms.builder import build_schema, schema_stats
from template_forms.examples import example_schema, list_examples, load_example
from template_forms.intake import extract_text
from template_forms.interchange import to_interchange, validate_document
from template_forms.tokenizer import extract
from template_forms.validator import validate_schema

router = APIRouter(prefix="/v1/api", tags=["templates"])

# Browsers and curl send this for files they cannot classify; fall back to the file name.
_GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


def _parsed(text: str, *, required: Optional[bool] = None) -> Dict[str, Any]:
    occurrences = extract(text)
    schema = build_schema(occurrences, required=required)
    return {
        "ok": True,
        "schema": to_interchange(schema),
        "validation": validate_schema(schema).to_dict(),
        "stats": schema_stats(schema),
        "placeholders": len(occurrences),
    }


@router.post("/templates/parse")
async def parse_template(body: ParseTemplateRequest) -> Dict[str, Any]:
    text = extract_text(body.template, content_type=body.content_type, filename=body.filename)
    return _parsed(text, required=body.required)


@router.post("/templates/upload")
async def upload_template(file: UploadFile = File(...)) -> Dict[str, Any]:
    """Parse a template file (.txt, .html or .docx) sent as multipart form data."""
    content = await file.read()
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    if content_type in _GENERIC_CONTENT_TYPES:
        content_type = None
    text = extract_text(content, content_type=content_type, filename=file.filename)
    return {**_parsed(text), "filename": file.filename}


@router.get("/templates/examples")
async def examples() -> Dict[str, Any]:
    return {"ok": True, "examples": list_examples()}


@router.get("/templates/examples/{name}")
async def example(name: str) -> Dict[str, Any]:
    template = load_example(name)
    schema = example_schema(name)
    return {
        "ok": True,
        "name": name,
        "template": template,
        "schema": to_interchange(schema),
        "stats": schema_stats(schema),
    }


@router.post("/schemas/validate")
async def validate(body: ValidateSchemaRequest) -> Dict[str, Any]:
    # Shape problems raise SchemaFormatError (422); schema problems are data.
    return {"ok": True, **validate_document(body.schema_doc).to_dict()}
