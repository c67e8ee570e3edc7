from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class FieldType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    EMAIL = "email"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(t.value for t in cls)


class FieldValidation(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None
    pattern: Optional[str] = None
    message: Optional[str] = None


class FieldDefinition(BaseModel):
    """
    One scalar input. `type` is kept as a plain string so that uploaded schemas
    with an unknown type still load and are rejected by the validator with a
    readable message instead of a pydantic error.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    name: str
    type: str = FieldType.STRING.value
    label: str = ""
    required: bool = True
    placeholder: Optional[str] = None
    validation: Optional[FieldValidation] = None

    @model_validator(mode="before")
    @classmethod
    def _default_label(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        out = dict(data)
        if isinstance(out.get("type"), FieldType):
            out["type"] = out["type"].value
        if not str(out.get("label") or "").strip():
            from template_forms.inference import humanize

            out["label"] = humanize(str(out.get("name") or ""))
        return out

    @property
    def field_type(self) -> Optional[FieldType]:
        try:
            return FieldType(self.type)
        except ValueError:
            return None


class ArrayField(BaseModel):
    """A `{{#each name}} ... {{/each}}` block: one row per entry, `items` describe the columns."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: str = "array"
    items: Tuple[FieldDefinition, ...] = Field(default_factory=tuple)

    @property
    def label(self) -> str:
        from template_forms.inference import humanize

        return humanize(self.name)

    def item(self, name: str) -> Optional[FieldDefinition]:
        for f in self.items:
            if f.name == name:
                return f
        return None


class FormSchema(BaseModel):
    model_config = ConfigDict(frozen=True)

    fields: Tuple[FieldDefinition, ...] = Field(default_factory=tuple)
    arrays: Tuple[ArrayField, ...] = Field(default_factory=tuple)

    def field(self, name: str) -> Optional[FieldDefinition]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def array(self, name: str) -> Optional[ArrayField]:
        for a in self.arrays:
            if a.name == name:
                return a
        return None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def array_names(self) -> list[str]:
        return [a.name for a in self.arrays]

    def iter_all_fields(self) -> Iterator[Tuple[Optional[str], FieldDefinition]]:
        """Yield `(array_name_or_None, field)` for root fields, then each array's items."""
        for f in self.fields:
            yield None, f
        for a in self.arrays:
            for f in a.items:
                yield a.name, f

    @property
    def is_empty(self) -> bool:
        return not self.fields and not self.arrays


__all__ = ["FieldType", "FieldValidation", "FieldDefinition", "ArrayField", "FormSchema"]
