"""
Field-type inference from placeholder names.

The rules are an ordered list and the first match wins, so names that hit more
than one category (`email_date`, `invoice_number`) always resolve the same way.
Reordering `TYPE_RULES` changes inferred types; keep the precedence tests in
`tests/test_inference.py` in sync.
"""

from __future__ import annotations

from typing import Callable, List, Tuple

from template_forms.models import FieldType

_NUMBER_TOKENS = ("price", "amount", "total", "quantity", "qty", "number", "count", "rate", "hours")
_REFERENCE_SUFFIXES = ("_number", "_no", "_id", "_code")

QUANTITY_TOKENS = ("quantity", "qty", "hours")
PRICE_TOKENS = ("price", "rate")


def _contains(*tokens: str) -> Callable[[str], bool]:
    return lambda name: any(t in name for t in tokens)


def _ends_with(*suffixes: str) -> Callable[[str], bool]:
    return lambda name: name.endswith(suffixes)


TYPE_RULES: List[Tuple[Callable[[str], bool], FieldType]] = [
    (_contains("email"), FieldType.EMAIL),
    (_contains("date"), FieldType.DATE),
    # `invoice_number`, `phone_number`, `order_no`: reference codes, not quantities.
    (_ends_with(*_REFERENCE_SUFFIXES), FieldType.STRING),
    (_contains(*_NUMBER_TOKENS), FieldType.NUMBER),
]


def infer_type(field_name: str) -> FieldType:
    name = str(field_name or "").lower()
    for matches, field_type in TYPE_RULES:
        if matches(name):
            return field_type
    return FieldType.STRING


def humanize(name: str) -> str:
    """`unit_price` -> `Unit Price`."""
    return " ".join(w[:1].upper() + w[1:] for w in str(name or "").split("_") if w)


def is_quantity_like(field_name: str) -> bool:
    name = str(field_name or "").lower()
    return infer_type(name) is FieldType.NUMBER and any(t in name for t in QUANTITY_TOKENS)


def is_price_like(field_name: str) -> bool:
    name = str(field_name or "").lower()
    return infer_type(name) is FieldType.NUMBER and any(t in name for t in PRICE_TOKENS)


__all__ = ["TYPE_RULES", "infer_type", "humanize", "is_quantity_like", "is_price_like"]
