"""
Turn an uploaded template file into the plain text the tokenizer reads.

Plain text passes through, HTML is reduced to its text, and DOCX documents are
read with python-docx (body paragraphs, then table cells). Other word-processor
formats (ODT, legacy `.doc`) are refused.
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from html.parser import HTMLParser
from pathlib import PurePath
from typing import List, Optional, Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from template_forms.config import get_settings
from template_forms.errors import TemplateTooLargeError, UnsupportedFormatError

logger = logging.getLogger(__name__)

PLAIN = "text/plain"
HTML = "text/html"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_EXTENSIONS = {
    ".txt": PLAIN,
    ".text": PLAIN,
    ".html": HTML,
    ".htm": HTML,
    ".docx": DOCX,
}
_REFUSED_DOCUMENTS = {
    ".odt": "application/vnd.oasis.opendocument.text",
    ".doc": "application/msword",
}
_BLOCK_TAGS = {"p", "div", "br", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6", "table", "section"}


class _TextCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in {"script", "style"}:
            self._skip_depth += 1
        elif tag in _BLOCK_TAGS:
            self._parts.append("\n")

    def handle_endtag(self, tag):
        if tag in {"script", "style"}:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in _BLOCK_TAGS:
            self._parts.append("\n")

    def handle_data(self, data):
        if not self._skip_depth:
            self._parts.append(data)

    def text(self) -> str:
        raw = "".join(self._parts)
        raw = re.sub(r"[ \t]+", " ", raw)
        return re.sub(r"\n\s*\n+", "\n", raw).strip()


def html_to_text(html: str) -> str:
    parser = _TextCollector()
    parser.feed(html or "")
    parser.close()
    return parser.text()


def docx_to_text(content: bytes) -> str:
    """Paragraph text of a DOCX file, body first, then each table cell."""
    try:
        doc = Document(io.BytesIO(content))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise UnsupportedFormatError("Template is not a readable DOCX document") from e

    texts = [para.text for para in doc.paragraphs]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                texts.extend(para.text for para in cell.paragraphs)
    return "\n".join(texts)


def detect_format(content_type: Optional[str] = None, filename: Optional[str] = None) -> str:
    ct = str(content_type or "").split(";")[0].strip().lower()
    if not ct and filename:
        ext = PurePath(str(filename)).suffix.lower()
        ct = _EXTENSIONS.get(ext) or _REFUSED_DOCUMENTS.get(ext, "")
        if not ct:
            raise UnsupportedFormatError(f"Unsupported template file type: {ext or filename}")
    if not ct:
        return PLAIN
    if ct in {PLAIN, HTML, DOCX}:
        return ct
    if ct in _REFUSED_DOCUMENTS.values():
        raise UnsupportedFormatError(f"{ct} is not supported; save the template as DOCX or {PLAIN}")
    raise UnsupportedFormatError(f"Unsupported template content type: {ct}")


def _decode(content: Union[str, bytes]) -> str:
    if isinstance(content, str):
        return content
    try:
        return bytes(content).decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise UnsupportedFormatError("Template bytes are not valid UTF-8 text") from e


def extract_text(
    content: Union[str, bytes],
    *,
    content_type: Optional[str] = None,
    filename: Optional[str] = None,
) -> str:
    fmt = detect_format(content_type, filename)
    if fmt == DOCX:
        if isinstance(content, str):
            raise UnsupportedFormatError("DOCX templates must be uploaded as a file, not as text")
        text = docx_to_text(bytes(content))
    else:
        text = _decode(content)
    limit = get_settings().max_template_chars
    if limit > 0 and len(text) > limit:
        raise TemplateTooLargeError(f"Template is {len(text)} characters; the limit is {limit}")
    if fmt == HTML:
        text = html_to_text(text)
    logger.debug("intake: %s -> %d chars", fmt, len(text))
    return text


__all__ = ["PLAIN", "HTML", "DOCX", "html_to_text", "docx_to_text", "detect_format", "extract_text"]
