from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
for _p in (_REPO_ROOT / "src", _REPO_ROOT):
    if _p.exists() and str(_p) not in sys.path:
        sys.path.insert(0, str(_p))

from template_forms.config import get_settings  # noqa: E402


SIMPLE_TEMPLATE = (
    "Invoice {{invoice_number}}, Date {{invoice_date}}, "
    "{{#each items}}{{description}} {{quantity}} {{unit_price}}{{/each}}"
)


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    for name in [k for k in os.environ if k.startswith("TEMPLATE_FORMS_")]:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
