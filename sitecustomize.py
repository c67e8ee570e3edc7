"""
Puts `src/` on `sys.path` when the repo is run without `pip install -e .`.

Python imports `sitecustomize` automatically at startup when it is importable,
so `uvicorn api.main:app` from the repo root finds `template_forms` directly.
"""

from __future__ import annotations

import sys
from pathlib import Path

_src = Path(__file__).resolve().parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))
