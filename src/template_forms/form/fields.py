"""
Per-type field behaviour: how a field is presented, how raw input is coerced,
and which checks run on submit. Each concern is a table keyed by `FieldType`;
supporting a new type means adding one entry to each table.
"""

from __future__ import annotations

import datetime as dt
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from template_forms.models import FieldDefinition, FieldType

EMAIL_PATTERN = r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$"
_EMAIL_RE = re.compile(EMAIL_PATTERN, re.IGNORECASE)

_MULTILINE_TOKENS = ("description", "notes", "address")
_TEXTAREA_ROWS = 3


@dataclass(frozen=True)
class WidgetSpec:
    input_type: str
    step: Optional[str] = None
    pattern: Optional[str] = None


WIDGETS: Dict[FieldType, WidgetSpec] = {
    FieldType.STRING: WidgetSpec(input_type="text"),
    FieldType.NUMBER: WidgetSpec(input_type="number", step="0.01"),
    FieldType.DATE: WidgetSpec(input_type="date"),
    FieldType.EMAIL: WidgetSpec(input_type="email", pattern=EMAIL_PATTERN),
}


def is_multiline(field: FieldDefinition) -> bool:
    return field.type == FieldType.STRING.value and any(t in field.name for t in _MULTILINE_TOKENS)


def describe_field(field: FieldDefinition) -> Dict[str, Any]:
    """Presentation descriptor for one field, as consumed by the form UI."""
    ft = field.field_type or FieldType.STRING
    spec = WIDGETS[ft]
    multiline = is_multiline(field)
    v = field.validation
    out: Dict[str, Any] = {
        "name": field.name,
        "label": field.label,
        "type": ft.value,
        "widget": "textarea" if multiline else "input",
        "inputType": spec.input_type,
        "required": field.required,
        "placeholder": field.placeholder or f"Enter {field.label or field.name}",
    }
    if multiline:
        out["rows"] = _TEXTAREA_ROWS
    if spec.step:
        out["step"] = spec.step
    if ft is FieldType.NUMBER and v is not None:
        if v.min is not None:
            out["min"] = v.min
        if v.max is not None:
            out["max"] = v.max
    pattern = (v.pattern if v is not None else None) or spec.pattern
    if pattern:
        out["pattern"] = pattern
    return out


# --- Coercion -----------------------------------------------------------------


def _coerce_text(value: Any) -> Any:
    if value is None:
        return ""
    return str(value)


def _coerce_number(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        t = value.strip()
        if not t:
            return ""
        try:
            n = float(t)
        except ValueError:
            return value
        if not math.isfinite(n):
            return value
        return int(n) if re.fullmatch(r"[+-]?\d+", t) else n
    return value


def _coerce_date(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        return value.date().isoformat()
    if isinstance(value, dt.date):
        return value.isoformat()
    return _coerce_text(value).strip()


def _coerce_email(value: Any) -> Any:
    return _coerce_text(value).strip()


COERCERS: Dict[FieldType, Callable[[Any], Any]] = {
    FieldType.STRING: _coerce_text,
    FieldType.NUMBER: _coerce_number,
    FieldType.DATE: _coerce_date,
    FieldType.EMAIL: _coerce_email,
}

INITIAL_VALUES: Dict[FieldType, Any] = {
    FieldType.STRING: "",
    FieldType.NUMBER: 0,
    FieldType.DATE: "",
    FieldType.EMAIL: "",
}


def coerce_value(field: FieldDefinition, value: Any) -> Any:
    """Best-effort conversion of raw input. Input that cannot be converted is returned unchanged."""
    return COERCERS[field.field_type or FieldType.STRING](value)


def initial_value(field: FieldDefinition) -> Any:
    return INITIAL_VALUES[field.field_type or FieldType.STRING]


def as_number(value: Any) -> float:
    """Numeric view used by derived totals; anything non-numeric or non-finite counts as 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return 0
    return value


# --- Checks -------------------------------------------------------------------


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_text(field: FieldDefinition, value: Any) -> List[str]:
    return []


def _check_number(field: FieldDefinition, value: Any) -> List[str]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return [f"{field.label} must be a number"]
    v = field.validation
    errors: List[str] = []
    if v is not None and v.min is not None and value < v.min:
        errors.append(f"Must be at least {v.min:g}")
    if v is not None and v.max is not None and value > v.max:
        errors.append(f"Must be no more than {v.max:g}")
    return errors


def _check_date(field: FieldDefinition, value: Any) -> List[str]:
    try:
        dt.date.fromisoformat(str(value))
    except ValueError:
        return [f"{field.label} must be a date (YYYY-MM-DD)"]
    return []


def _check_email(field: FieldDefinition, value: Any) -> List[str]:
    if not _EMAIL_RE.match(str(value)):
        return ["Invalid email address"]
    return []


CHECKS: Dict[FieldType, Callable[[FieldDefinition, Any], List[str]]] = {
    FieldType.STRING: _check_text,
    FieldType.NUMBER: _check_number,
    FieldType.DATE: _check_date,
    FieldType.EMAIL: _check_email,
}


def check_value(field: FieldDefinition, value: Any) -> List[str]:
    """Run required, type and declared-validation rules for one value."""
    if _is_blank(value):
        return [f"{field.label} is required"] if field.required else []
    ft = field.field_type or FieldType.STRING
    errors = CHECKS[ft](field, value)
    v = field.validation
    if v is not None and v.pattern and not re.search(v.pattern, str(value)):
        errors.append(v.message or "Invalid format")
    return errors


__all__ = [
    "EMAIL_PATTERN",
    "WidgetSpec",
    "WIDGETS",
    "COERCERS",
    "CHECKS",
    "INITIAL_VALUES",
    "is_multiline",
    "describe_field",
    "coerce_value",
    "initial_value",
    "as_number",
    "check_value",
]
