from __future__ import annotations

import math
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class TemplateSource(BaseModel):
    """Raw template text plus what it was extracted from."""

    model_config = ConfigDict(populate_by_name=True)

    template: Optional[str] = Field(default=None, description="Template text (plain text or HTML)")
    content_type: Optional[str] = Field(
        default=None,
        alias="contentType",
        description="MIME type of `template` (text/plain or text/html). Defaults to text/plain.",
    )
    filename: Optional[str] = Field(
        default=None,
        description="Original file name; used to detect the format when `contentType` is missing.",
    )


class ParseTemplateRequest(TemplateSource):
    template: str = Field(..., description="Template text (plain text or HTML)")
    required: Optional[bool] = Field(
        default=None,
        alias="requiredByDefault",
        description="Mark every extracted field as required. Defaults to TEMPLATE_FORMS_REQUIRED_BY_DEFAULT.",
    )


class ValidateSchemaRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    schema_doc: Any = Field(..., alias="schema", description="Schema in interchange format")


class CreateSessionRequest(TemplateSource):
    """Start a form session from exactly one of: template text, uploaded schema, built-in example."""

    schema_doc: Optional[Any] = Field(default=None, alias="schema")
    example: Optional[str] = Field(default=None, description="Built-in example name (e.g. 'simple')")

    @model_validator(mode="after")
    def _exactly_one_source(self) -> "CreateSessionRequest":
        given = [k for k, v in (("template", self.template), ("schema", self.schema_doc), ("example", self.example)) if v is not None]
        if len(given) != 1:
            raise ValueError(f"Provide exactly one of template, schema or example (got: {', '.join(given) or 'none'})")
        return self


class SetValueRequest(BaseModel):
    """Edit one root field, or one cell of a repeating row when `array` and `index` are given."""

    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(..., description="Field name (root field, or item field when `array` is set)")
    value: Any = None
    array: Optional[str] = Field(default=None, description="Array field name for row edits")
    index: Optional[int] = Field(default=None, ge=0, description="Row index for row edits")

    @field_validator("value")
    @classmethod
    def _finite_numbers_only(cls, v: Any) -> Any:
        # JSON bodies may carry NaN/Infinity; they cannot be stored or echoed back.
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("value must be a finite number")
        return v

    @model_validator(mode="after")
    def _array_needs_index(self) -> "SetValueRequest":
        if (self.array is None) != (self.index is None):
            raise ValueError("`array` and `index` must be given together")
        return self
