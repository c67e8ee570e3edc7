"""
Form session: one schema, one mutable value tree, driven by discrete edits.

    EMPTY --load--> POPULATED --edit/row op--> EDITING --submit--> SUBMITTING
                                                  ^                    |
                                                  +---- rejected ------+--> SUBMITTED

Every operation runs to completion (including derived-total recomputation)
before returning, so callers never observe a half-updated tree.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from template_forms.config import Settings, get_settings
from template_forms.errors import (
    DerivedFieldError,
    FormStateError,
    RowIndexError,
    SchemaInvalidError,
    UnknownFieldError,
)
from template_forms.form.fields import as_number, check_value, coerce_value, describe_field, initial_value
from template_forms.inference import is_price_like, is_quantity_like
from template_forms.models import ArrayField, FieldDefinition, FieldType, FormSchema
from template_forms.validator import validate_schema

logger = logging.getLogger(__name__)

ValueTree = Dict[str, Any]
SubmitCallback = Callable[[ValueTree], Any]


class FormState(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


@dataclass(frozen=True)
class SubmissionResult:
    accepted: bool
    values: Optional[ValueTree] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)


@dataclass(frozen=True)
class DerivedTotals:
    """Which array gets row totals, and which of its columns feed them."""

    array: str
    quantity_field: str
    price_field: str
    row_total_field: str
    grand_total_field: str


def find_derived_totals(schema: FormSchema, settings: Optional[Settings] = None) -> Optional[DerivedTotals]:
    s = settings or get_settings()
    arr = schema.array(s.derived_array)
    if arr is None:
        return None
    number_items = [
        f.name for f in arr.items if f.type == FieldType.NUMBER.value and f.name != s.row_total_field
    ]
    quantity = next((n for n in number_items if is_quantity_like(n)), None)
    price = next((n for n in number_items if n != quantity and is_price_like(n)), None)
    if quantity is None or price is None:
        return None
    return DerivedTotals(
        array=arr.name,
        quantity_field=quantity,
        price_field=price,
        row_total_field=s.row_total_field,
        grand_total_field=s.grand_total_field,
    )


class FormSession:
    def __init__(self, schema: Optional[FormSchema] = None, *, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._schema: Optional[FormSchema] = None
        self._values: ValueTree = {}
        self._derived: Optional[DerivedTotals] = None
        self._state = FormState.EMPTY
        if schema is not None:
            self.load(schema)

    # --- lifecycle ------------------------------------------------------------

    @property
    def state(self) -> FormState:
        return self._state

    @property
    def schema(self) -> FormSchema:
        if self._schema is None:
            raise FormStateError("No schema loaded")
        return self._schema

    @property
    def derived(self) -> Optional[DerivedTotals]:
        return self._derived

    def load(self, schema: FormSchema) -> None:
        if self._state not in (FormState.EMPTY, FormState.SUBMITTED):
            raise FormStateError(f"Cannot load a schema while the session is {self._state.value}; reset it first")
        result = validate_schema(schema)
        if not result.valid:
            raise SchemaInvalidError(result.errors)
        self._schema = schema
        self._derived = find_derived_totals(schema, self._settings)
        self._values = {f.name: initial_value(f) for f in schema.fields}
        for a in schema.arrays:
            self._values[a.name] = []
        self._state = FormState.POPULATED
        self._recompute()
        logger.debug("session loaded: fields=%s arrays=%s", schema.field_names(), schema.array_names())

    def reset(self) -> None:
        self._schema = None
        self._values = {}
        self._derived = None
        self._state = FormState.EMPTY

    def _require_editable(self) -> None:
        if self._state is FormState.EMPTY:
            raise FormStateError("No schema loaded")
        if self._state is FormState.SUBMITTED:
            raise FormStateError("Form was already submitted")
        if self._state is FormState.SUBMITTING:
            raise FormStateError("Form is being submitted")

    def _touch(self) -> None:
        self._state = FormState.EDITING
        self._recompute()

    # --- lookups --------------------------------------------------------------

    def _array(self, name: str) -> ArrayField:
        arr = self.schema.array(name)
        if arr is None:
            raise UnknownFieldError(f"Unknown array field: {name!r}")
        return arr

    def _rows(self, array: str) -> List[Dict[str, Any]]:
        return self._values[self._array(array).name]

    def _check_index(self, array: str, index: int) -> List[Dict[str, Any]]:
        rows = self._rows(array)
        if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= len(rows):
            raise RowIndexError(array, index, len(rows))
        return rows

    def _is_derived(self, array: Optional[str], name: str) -> bool:
        d = self._derived
        if d is None:
            return False
        if array is None:
            return name == d.grand_total_field
        return array == d.array and name == d.row_total_field

    # --- edits ----------------------------------------------------------------

    def set_value(self, name: str, value: Any) -> Any:
        self._require_editable()
        f = self.schema.field(name)
        if f is None:
            raise UnknownFieldError(f"Unknown field: {name!r}")
        if self._is_derived(None, name):
            raise DerivedFieldError(f"Field {name!r} is computed and cannot be set")
        self._values[name] = coerce_value(f, value)
        self._touch()
        return self._values[name]

    def set_row_value(self, array: str, index: int, name: str, value: Any) -> Any:
        self._require_editable()
        arr = self._array(array)
        rows = self._check_index(array, index)
        f = arr.item(name)
        if f is None:
            raise UnknownFieldError(f"Unknown field {name!r} in array {array!r}")
        if self._is_derived(array, name):
            raise DerivedFieldError(f"Field {name!r} in {array!r} is computed and cannot be set")
        rows[index][name] = coerce_value(f, value)
        self._touch()
        return rows[index][name]

    def add_row(self, array: str) -> int:
        self._require_editable()
        arr = self._array(array)
        rows = self._values[arr.name]
        rows.append({f.name: initial_value(f) for f in arr.items})
        self._touch()
        return len(rows) - 1

    def remove_row(self, array: str, index: int) -> None:
        self._require_editable()
        rows = self._check_index(array, index)
        del rows[index]
        self._touch()

    def row_count(self, array: str) -> int:
        return len(self._rows(array))

    # --- derived values -------------------------------------------------------

    def _recompute(self) -> None:
        d = self._derived
        if d is None:
            return
        grand = 0
        for row in self._values.get(d.array) or []:
            row[d.row_total_field] = as_number(row.get(d.quantity_field)) * as_number(row.get(d.price_field))
            grand += row[d.row_total_field]
        self._values[d.grand_total_field] = grand

    # --- views ----------------------------------------------------------------

    def get_value(self, name: str) -> Any:
        if name not in self._values:
            raise UnknownFieldError(f"Unknown field: {name!r}")
        return self._values[name]

    def snapshot(self) -> ValueTree:
        return copy.deepcopy(self._values)

    def render(self) -> Dict[str, Any]:
        schema = self.schema
        d = self._derived
        fields = []
        for f in schema.fields:
            desc = describe_field(f)
            desc["derived"] = self._is_derived(None, f.name)
            fields.append(desc)
        arrays = []
        for a in schema.arrays:
            columns = []
            for f in a.items:
                desc = describe_field(f)
                desc["derived"] = self._is_derived(a.name, f.name)
                columns.append(desc)
            if d is not None and d.array == a.name and a.item(d.row_total_field) is None:
                columns.append(
                    {
                        "name": d.row_total_field,
                        "label": "Total",
                        "type": FieldType.NUMBER.value,
                        "widget": "readonly",
                        "inputType": "number",
                        "required": False,
                        "derived": True,
                    }
                )
            arrays.append({"name": a.name, "label": a.label, "columns": columns, "rows": len(self._values[a.name])})
        return {"state": self._state.value, "fields": fields, "arrays": arrays}

    # --- validation & submit --------------------------------------------------

    def _field_errors(self, path: str, f: FieldDefinition, value: Any, out: Dict[str, List[str]]) -> None:
        errors = check_value(f, value)
        if errors:
            out[path] = errors

    def validate_values(self) -> Dict[str, List[str]]:
        schema = self.schema
        errors: Dict[str, List[str]] = {}
        for f in schema.fields:
            self._field_errors(f.name, f, self._values.get(f.name), errors)
        for a in schema.arrays:
            for i, row in enumerate(self._values.get(a.name) or []):
                for f in a.items:
                    self._field_errors(f"{a.name}[{i}].{f.name}", f, row.get(f.name), errors)
        return errors

    def submit(self, callback: Optional[SubmitCallback] = None) -> SubmissionResult:
        self._require_editable()
        self._state = FormState.SUBMITTING
        self._recompute()
        errors = self.validate_values()
        if errors:
            self._state = FormState.EDITING
            logger.info("submission rejected: %d field(s) with errors", len(errors))
            return SubmissionResult(accepted=False, errors=errors)

        values = self.snapshot()
        self._state = FormState.SUBMITTED
        logger.info("submission accepted")
        if callback is not None:
            callback(copy.deepcopy(values))
        return SubmissionResult(accepted=True, values=values)


__all__ = [
    "FormState",
    "FormSession",
    "SubmissionResult",
    "DerivedTotals",
    "find_derived_totals",
]
