"""
Supabase persistence for accepted form submissions.

The form engine only knows a submit callback; this module is what the HTTP
service plugs into it. Missing credentials turn every insert into a no-op so
local development works without a database.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

from supabase import Client, create_client

from template_forms.config import get_settings

logger = logging.getLogger(__name__)

_client: Optional[Client] = None


def get_supabase_client() -> Optional[Client]:
    """Get or create the Supabase client (singleton)."""
    global _client

    if _client is not None:
        return _client

    # NEXT_PUBLIC_* names are shared with the web app's env files.
    url = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY")

    if not url or not key:
        return None

    try:
        _client = create_client(url, key)
        return _client
    except Exception as e:
        print(f"[Supabase] Failed to create client: {e}")
        return None


def _insert_row(table: str, row: Dict[str, Any]) -> bool:
    client = get_supabase_client()
    if not client:
        logger.info("supabase not configured; skipping insert into %s", table)
        return False
    try:
        client.table(table).insert(row).execute()
        return True
    except Exception as e:
        print(f"[Supabase] Error inserting into {table}: {e}")
        return False


def _jsonable(value: Any) -> Any:
    # Anything that is not a plain JSON type is stored as its string form.
    return json.loads(json.dumps(value, default=str))


def insert_submission(session_id: str, schema_doc: Dict[str, Any], values: Dict[str, Any]) -> bool:
    row = {
        "session_id": session_id,
        "schema_json": _jsonable(schema_doc),
        "values_json": _jsonable(values),
    }
    return _insert_row(get_settings().submissions_table, row)
