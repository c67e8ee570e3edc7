"""
Built-in example templates.

Each example is a plain-text template stored next to this module as
`<name>.txt`. Adding an example is just dropping another file here.
"""

from __future__ import annotations

import os
from typing import List

from template_forms.builder import parse_template
from template_forms.errors import UnknownExampleError
from template_forms.models import FormSchema


def _examples_dir() -> str:
    return os.path.dirname(__file__)


def list_examples() -> List[str]:
    names = []
    for fname in os.listdir(_examples_dir()):
        stem, ext = os.path.splitext(fname)
        if ext == ".txt" and stem and not stem.startswith("_"):
            names.append(stem)
    return sorted(names)


def load_example(name: str) -> str:
    key = str(name or "").strip().lower()
    if key not in list_examples():
        raise UnknownExampleError(f"Unknown example template: {name!r}")
    with open(os.path.join(_examples_dir(), f"{key}.txt"), "r", encoding="utf-8") as f:
        return f.read()


def example_schema(name: str) -> FormSchema:
    return parse_template(load_example(name))


__all__ = ["list_examples", "load_example", "example_schema"]
