"""
JSON interchange format for `FormSchema`.

A schema is stored as one flat object: scalar fields and array fields side by
side, keyed by name, root fields first.

    {
      "invoice_number": {"name": "invoice_number", "type": "string", "label": "Invoice Number", "required": true},
      "invoice_date": "date",
      "items": {"name": "items", "type": "array", "items": [{"name": "quantity", "type": "number", ...}]}
    }

A bare type string (`"invoice_date": "date"`) is the legacy short form of a
scalar field and is still accepted on load.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict, List, Tuple

import jsonschema

from template_forms.errors import SchemaFormatError
from template_forms.models import ArrayField, FieldDefinition, FormSchema
from template_forms.validator import ValidationResult, validate_schema

_NULLABLE_STR = {"type": ["string", "null"]}
_NULLABLE_NUM = {"type": ["number", "null"]}

DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": {
        "oneOf": [
            {"type": "string"},
            {"$ref": "#/$defs/field"},
            {"$ref": "#/$defs/array"},
        ]
    },
    "$defs": {
        "validation": {
            "type": ["object", "null"],
            "properties": {
                "min": _NULLABLE_NUM,
                "max": _NULLABLE_NUM,
                "pattern": _NULLABLE_STR,
                "message": _NULLABLE_STR,
            },
        },
        "field": {
            "type": "object",
            "required": ["type"],
            "properties": {
                "name": {"type": "string"},
                "type": {"type": "string", "not": {"const": "array"}},
                "label": _NULLABLE_STR,
                "required": {"type": "boolean"},
                "placeholder": _NULLABLE_STR,
                "validation": {"$ref": "#/$defs/validation"},
            },
        },
        "array": {
            "type": "object",
            "required": ["type", "items"],
            "properties": {
                "name": {"type": "string"},
                "type": {"const": "array"},
                "items": {"type": "array", "items": {"allOf": [{"$ref": "#/$defs/field"}, {"required": ["name"]}]}},
            },
        },
    },
}


@lru_cache(maxsize=1)
def _validator() -> jsonschema.Validator:
    return jsonschema.Draft202012Validator(DOCUMENT_SCHEMA)


def check_document(doc: Any) -> List[str]:
    """Shape-check a raw interchange document; returns one message per problem."""
    errors = sorted(_validator().iter_errors(doc), key=lambda e: [str(p) for p in e.path])
    out: List[str] = []
    for e in errors:
        path = "/".join(str(p) for p in e.path) or "<root>"
        out.append(f"{path}: {e.message}")
    return out


def _field_dict(f: FieldDefinition) -> Dict[str, Any]:
    return f.model_dump(exclude_none=True)


def to_interchange(schema: FormSchema) -> Dict[str, Any]:
    doc: Dict[str, Any] = {}
    for f in schema.fields:
        doc[f.name] = _field_dict(f)
    for a in schema.arrays:
        doc[a.name] = {"name": a.name, "type": "array", "items": [_field_dict(f) for f in a.items]}
    return doc


def _load(doc: Dict[str, Any]) -> Tuple[FormSchema, List[Tuple[str, str]]]:
    fields: List[FieldDefinition] = []
    arrays: List[ArrayField] = []
    keys: List[Tuple[str, str]] = []
    for key, entry in doc.items():
        if isinstance(entry, str):
            fields.append(FieldDefinition(name=key, type=entry))
            keys.append((key, key))
            continue
        name = str(entry.get("name") or key)
        keys.append((key, name))
        if entry.get("type") == "array":
            items = [FieldDefinition.model_validate(item) for item in entry.get("items") or []]
            arrays.append(ArrayField(name=name, items=tuple(items)))
        else:
            fields.append(FieldDefinition.model_validate({**entry, "name": name}))
    return FormSchema(fields=tuple(fields), arrays=tuple(arrays)), keys


def _load_checked(doc: Any) -> Tuple[FormSchema, List[Tuple[str, str]]]:
    errors = check_document(doc)
    if errors:
        raise SchemaFormatError(errors)
    return _load(doc)


def from_interchange(doc: Any) -> FormSchema:
    schema, _ = _load_checked(doc)
    return schema


def validate_document(doc: Any) -> ValidationResult:
    """
    Shape-check and validate an interchange document in one pass.

    A document that cannot be loaded at all raises `SchemaFormatError`; problems
    with the schema it describes come back in the result.
    """
    schema, keys = _load_checked(doc)
    return validate_schema(schema, keys=keys)


def dumps(schema: FormSchema, **kwargs: Any) -> str:
    kwargs.setdefault("ensure_ascii", False)
    return json.dumps(to_interchange(schema), **kwargs)


def loads(text: str) -> FormSchema:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaFormatError([f"<root>: not valid JSON ({e.msg} at line {e.lineno})"]) from e
    return from_interchange(doc)


__all__ = [
    "DOCUMENT_SCHEMA",
    "check_document",
    "to_interchange",
    "from_interchange",
    "validate_document",
    "dumps",
    "loads",
]
