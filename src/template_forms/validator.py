"""
Structural checks for a `FormSchema`.

Schemas built by the parser satisfy these by construction; the checks exist for
schemas that arrive as JSON uploads or are assembled by hand. Every check runs,
so a single call reports all problems at once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from template_forms.models import FieldDefinition, FieldType, FormSchema
from template_forms.tokenizer import is_identifier


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


def _scope_label(array: Optional[str]) -> str:
    return f"array '{array}'" if array else "root"


def _check_field(f: FieldDefinition, array: Optional[str], errors: List[str]) -> None:
    where = f"{f.name!r} in {_scope_label(array)}"
    if not is_identifier(f.name):
        errors.append(f"Invalid field name {f.name!r} in {_scope_label(array)}: use letters, digits and underscores")
    if f.type not in FieldType.values():
        errors.append(f"Invalid field type for {where}: {f.type}")
    v = f.validation
    if v is None:
        return
    if v.pattern is not None:
        try:
            re.compile(v.pattern)
        except re.error as e:
            errors.append(f"Invalid validation pattern for {where}: {e}")
    if v.min is not None and v.max is not None and v.min > v.max:
        errors.append(f"Validation min ({v.min:g}) exceeds max ({v.max:g}) for {where}")


def _check_duplicates(names: Sequence[str], scope: str, errors: List[str]) -> None:
    seen: set[str] = set()
    reported: set[str] = set()
    for name in names:
        if name in seen and name not in reported:
            errors.append(f"Duplicate field name {name!r} in {scope}")
            reported.add(name)
        seen.add(name)


def validate_schema(schema: FormSchema, *, keys: Optional[Sequence[Tuple[str, str]]] = None) -> ValidationResult:
    """
    Validate `schema`.

    `keys` optionally lists `(key, name)` pairs for the root-level entries of
    the interchange document the schema was loaded from; a key that differs
    from its entry's name is an error because the document would not round-trip.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if schema.is_empty:
        errors.append("Schema is empty: no fields or arrays")

    for f in schema.fields:
        _check_field(f, None, errors)

    for a in schema.arrays:
        if not is_identifier(a.name):
            errors.append(f"Invalid array name {a.name!r}: use letters, digits and underscores")
        if not a.items:
            errors.append(f"Array field '{a.name}' must have at least one item field")
        for f in a.items:
            _check_field(f, a.name, errors)
        _check_duplicates([f.name for f in a.items], _scope_label(a.name), errors)

    # Arrays live next to root fields in the interchange object, so they share a namespace.
    _check_duplicates(schema.field_names() + schema.array_names(), "root", errors)

    for key, name in keys or ():
        if name != key:
            errors.append(f"Field stored under key {key!r} is named {name!r}")

    root_names = set(schema.field_names())
    for a in schema.arrays:
        for f in a.items:
            if f.name in root_names:
                warnings.append(
                    f"Field '{f.name}' appears both at root and in array '{a.name}'; they are treated as separate fields"
                )

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


__all__ = ["ValidationResult", "validate_schema"]
