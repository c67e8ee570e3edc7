"""
In-process form session store.

Sessions live in memory with a sliding TTL. Route handlers run on the event
loop, so operations on one session never interleave.
"""

from __future__ import annotations

import time
import uuid
from typing import Dict, Optional, Tuple

from template_forms.form import FormSession


class SessionNotFoundError(LookupError):
    pass


class SessionStore:
    def __init__(self, *, ttl_sec: int = 3600) -> None:
        self.ttl_sec = max(60, int(ttl_sec or 0))
        self._items: Dict[str, Tuple[float, FormSession]] = {}

    def __len__(self) -> int:
        return len(self._items)

    def _expires_at(self) -> float:
        return time.time() + self.ttl_sec

    def purge(self) -> int:
        now = time.time()
        stale = [sid for sid, (expires_at, _) in self._items.items() if now >= expires_at]
        for sid in stale:
            self._items.pop(sid, None)
        return len(stale)

    def create(self, session: FormSession) -> str:
        self.purge()
        session_id = f"fs_{uuid.uuid4().hex[:16]}"
        self._items[session_id] = (self._expires_at(), session)
        return session_id

    def get(self, session_id: str) -> FormSession:
        rec = self._items.get(session_id)
        if not rec or time.time() >= rec[0]:
            self._items.pop(session_id, None)
            raise SessionNotFoundError(f"Unknown or expired form session: {session_id}")
        session = rec[1]
        self._items[session_id] = (self._expires_at(), session)
        return session

    def drop(self, session_id: str) -> Optional[FormSession]:
        rec = self._items.pop(session_id, None)
        return rec[1] if rec else None
