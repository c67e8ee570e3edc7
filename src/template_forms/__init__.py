"""
Template placeholder parser and dynamic form engine.

    text --extract--> occurrences --build_schema--> FormSchema --validate_schema--> FormSession

- `tokenizer`: `{{field}}` / `{{#each name}} ... {{/each}}` scanning
- `inference`: field-name -> FieldType heuristics
- `builder`: occurrences -> FormSchema
- `validator` / `interchange`: checks and the JSON schema format
- `form`: rendering tables and the stateful form session
"""

from .builder import build_schema, parse_template, schema_stats  # noqa: F401
from .errors import (  # noqa: F401
    NestedBlockError,
    SchemaFormatError,
    SchemaInvalidError,
    TemplateFormsError,
    TemplateParseError,
    UnterminatedBlockError,
)
from .inference import infer_type  # noqa: F401
from .models import ArrayField, FieldDefinition, FieldType, FieldValidation, FormSchema  # noqa: F401
from .tokenizer import ROOT_SCOPE, PlaceholderOccurrence, extract  # noqa: F401
from .validator import ValidationResult, validate_schema  # noqa: F401

__version__ = "0.1.0"
