from __future__ import annotations

from typing import List, Optional


class TemplateFormsError(Exception):
    """Base class for every error raised by `template_forms`."""


# --- Template parsing ---------------------------------------------------------


class TemplateParseError(TemplateFormsError):
    """
    The template text could not be tokenized.

    Carries the character offset of the offending tag plus a 1-based line/column
    and a short excerpt of the surrounding text so callers can point at it.
    """

    def __init__(self, message: str, *, template: str = "", position: int = 0) -> None:
        self.position = max(0, int(position))
        self.line, self.column = _line_col(template, self.position)
        self.context = _excerpt(template, self.position)
        self.reason = message
        super().__init__(f"{message} (line {self.line}, column {self.column})")

    def to_dict(self) -> dict:
        return {
            "type": type(self).__name__,
            "message": self.reason,
            "position": self.position,
            "line": self.line,
            "column": self.column,
            "context": self.context,
        }


class NestedBlockError(TemplateParseError):
    pass


class UnterminatedBlockError(TemplateParseError):
    pass


class UnexpectedBlockCloseError(TemplateParseError):
    pass


class MalformedBlockError(TemplateParseError):
    pass


# --- Schemas ------------------------------------------------------------------


class SchemaFormatError(TemplateFormsError):
    """An uploaded schema document is not shaped like a schema at all."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid schema document")


class SchemaInvalidError(TemplateFormsError):
    """Raised by the form engine when asked to load a schema that failed validation."""

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"Schema validation failed: {', '.join(self.errors)}")


# --- Intake -------------------------------------------------------------------


class IntakeError(TemplateFormsError):
    pass


class UnsupportedFormatError(IntakeError):
    pass


class TemplateTooLargeError(IntakeError):
    pass


class UnknownExampleError(TemplateFormsError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Unknown example"


# --- Form sessions ------------------------------------------------------------


class FormError(TemplateFormsError):
    pass


class UnknownFieldError(FormError):
    pass


class DerivedFieldError(UnknownFieldError):
    """The field is computed by the engine and cannot be written directly."""


class RowIndexError(FormError, IndexError):
    def __init__(self, array: str, index: int, size: int) -> None:
        self.array = array
        self.index = index
        self.size = size
        super().__init__(f"Row {index} does not exist in '{array}' ({size} row(s))")


class FormStateError(FormError):
    pass


def _line_col(text: str, position: int) -> tuple[int, int]:
    head = (text or "")[:position]
    line = head.count("\n") + 1
    last_nl = head.rfind("\n")
    return line, position - last_nl


def _excerpt(text: str, position: int, radius: int = 20) -> Optional[str]:
    if not text:
        return None
    start = max(0, position - radius)
    end = min(len(text), position + radius)
    return text[start:end].replace("\n", " ")
