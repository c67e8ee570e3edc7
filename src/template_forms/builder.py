from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from template_forms.config import get_settings
from template_forms.inference import humanize, infer_type
from template_forms.models import ArrayField, FieldDefinition, FieldType, FormSchema
from template_forms.tokenizer import ROOT_SCOPE, PlaceholderOccurrence, extract

logger = logging.getLogger(__name__)


def _field_for(name: str, *, required: bool) -> FieldDefinition:
    return FieldDefinition(name=name, type=infer_type(name), label=humanize(name), required=required)


def build_schema(
    occurrences: Iterable[PlaceholderOccurrence],
    *,
    required: Optional[bool] = None,
) -> FormSchema:
    """
    Group occurrences by scope into a `FormSchema`.

    Root placeholders become scalar fields; each distinct block scope becomes an
    `ArrayField`. Within a scope the first occurrence of a name fixes its
    position. Root and block scopes are independent: a name may appear in both.
    Every field is `required` unless told otherwise (template placeholders are
    assumed mandatory by default).
    """
    if required is None:
        required = get_settings().required_by_default

    root: Dict[str, FieldDefinition] = {}
    blocks: Dict[str, Dict[str, FieldDefinition]] = {}

    for occ in occurrences:
        if occ.scope == ROOT_SCOPE:
            if occ.name not in root:
                root[occ.name] = _field_for(occ.name, required=required)
            continue
        scope = blocks.setdefault(occ.scope, {})
        if occ.name not in scope:
            scope[occ.name] = _field_for(occ.name, required=required)

    schema = FormSchema(
        fields=tuple(root.values()),
        arrays=tuple(ArrayField(name=name, items=tuple(items.values())) for name, items in blocks.items()),
    )
    logger.debug("built schema: %d root field(s), %d array field(s)", len(schema.fields), len(schema.arrays))
    return schema


def parse_template(template: str, *, required: Optional[bool] = None) -> FormSchema:
    return build_schema(extract(template), required=required)


def schema_stats(schema: FormSchema) -> Dict[str, int]:
    stats = {
        "totalFields": len(schema.fields) + len(schema.arrays),
        "arrayFields": len(schema.arrays),
        "stringFields": 0,
        "numberFields": 0,
        "dateFields": 0,
        "emailFields": 0,
        "itemFields": sum(len(a.items) for a in schema.arrays),
    }
    keys = {
        FieldType.STRING: "stringFields",
        FieldType.NUMBER: "numberFields",
        FieldType.DATE: "dateFields",
        FieldType.EMAIL: "emailFields",
    }
    for f in schema.fields:
        ft = f.field_type
        if ft is not None:
            stats[keys[ft]] += 1
    return stats


__all__: List[str] = ["build_schema", "parse_template", "schema_stats"]
