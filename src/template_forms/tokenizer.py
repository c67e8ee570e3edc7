"""
Placeholder extraction for the `{{...}}` template mini-language.

Grammar (no escaping, no else-branches, no nesting):

    template    := (text | placeholder | block)*
    placeholder := "{{" identifier "}}"
    block       := "{{#each" identifier "}}" (text | placeholder)* "{{/each}}"
    identifier  := [A-Za-z0-9_]+

`extract()` is purely mechanical: it reports every placeholder appearance with
its scope, in document order, duplicates included. Deduplication and typing
happen in the schema builder.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from template_forms.errors import (
    MalformedBlockError,
    NestedBlockError,
    UnexpectedBlockCloseError,
    UnterminatedBlockError,
)

logger = logging.getLogger(__name__)

ROOT_SCOPE = "root"

IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9_]+$")

_TAG_RE = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_EACH_OPEN_RE = re.compile(r"^#each(?:\s+(.*))?$", re.DOTALL)
_EACH_CLOSE_RE = re.compile(r"^/each$")

TAG_PLACEHOLDER = "placeholder"
TAG_BLOCK_OPEN = "block_open"
TAG_BLOCK_CLOSE = "block_close"
TAG_OTHER = "other"


@dataclass(frozen=True)
class Tag:
    kind: str
    body: str
    position: int
    name: Optional[str] = None


@dataclass(frozen=True)
class PlaceholderOccurrence:
    name: str
    scope: str = ROOT_SCOPE
    position: int = field(default=-1, compare=False)

    @property
    def is_root(self) -> bool:
        return self.scope == ROOT_SCOPE


def is_identifier(name: str) -> bool:
    return bool(IDENTIFIER_RE.match(str(name or "")))


def _classify(body: str) -> tuple[str, Optional[str]]:
    m = _EACH_OPEN_RE.match(body)
    if m:
        return TAG_BLOCK_OPEN, (m.group(1) or "").strip()
    if _EACH_CLOSE_RE.match(body):
        return TAG_BLOCK_CLOSE, None
    if is_identifier(body):
        return TAG_PLACEHOLDER, body
    return TAG_OTHER, None


def iter_tags(template: str) -> Iterator[Tag]:
    """Yield every `{{ ... }}` tag in `template`, classified, in document order."""
    for m in _TAG_RE.finditer(template or ""):
        body = m.group(1).strip()
        kind, name = _classify(body)
        yield Tag(kind=kind, body=body, position=m.start(), name=name)


def extract(template: str) -> List[PlaceholderOccurrence]:
    text = template or ""
    out: List[PlaceholderOccurrence] = []
    open_block: Optional[Tag] = None

    for tag in iter_tags(text):
        if tag.kind == TAG_BLOCK_OPEN:
            if open_block is not None:
                raise NestedBlockError(
                    f"Nested '{{{{#each}}}}' inside block '{open_block.name}' is not supported",
                    template=text,
                    position=tag.position,
                )
            name = tag.name or ""
            if not is_identifier(name):
                raise MalformedBlockError(
                    f"Block name {name!r} must contain only letters, digits and underscores",
                    template=text,
                    position=tag.position,
                )
            if name == ROOT_SCOPE:
                raise MalformedBlockError(
                    f"Block name '{ROOT_SCOPE}' is reserved",
                    template=text,
                    position=tag.position,
                )
            open_block = tag
        elif tag.kind == TAG_BLOCK_CLOSE:
            if open_block is None:
                raise UnexpectedBlockCloseError(
                    "'{{/each}}' without a matching '{{#each}}'",
                    template=text,
                    position=tag.position,
                )
            open_block = None
        elif tag.kind == TAG_PLACEHOLDER:
            scope = open_block.name if open_block is not None else ROOT_SCOPE
            out.append(PlaceholderOccurrence(name=tag.name or "", scope=scope or ROOT_SCOPE, position=tag.position))
        else:
            # `{{#if x}}`, `{{/if}}`, `{{first name}}` are literal text here.
            logger.debug("skipping non-placeholder tag %r at %d", tag.body, tag.position)

    if open_block is not None:
        raise UnterminatedBlockError(
            f"Block '{open_block.name}' is never closed with '{{{{/each}}}}'",
            template=text,
            position=open_block.position,
        )

    return out


__all__ = [
    "ROOT_SCOPE",
    "IDENTIFIER_RE",
    "Tag",
    "PlaceholderOccurrence",
    "is_identifier",
    "iter_tags",
    "extract",
]
