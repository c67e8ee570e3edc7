from __future__ import annotations

import time
from typing import Any, Dict

from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> Dict[str, Any]:
    sessions = getattr(request.app.state, "sessions", None)
    return {
        "ok": True,
        "service": "template-form-service",
        "ts": int(time.time() * 1000),
        "sessions": len(sessions) if sessions is not None else 0,
    }
