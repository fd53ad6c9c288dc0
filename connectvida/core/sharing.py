"""
Mother/child content sharing.

A child church sees its own rows plus the rows its mother church flagged with
compartilhar_com_filhas, unless the child opted out through the matching
compartilha_*_da_mae flag. Only one level of hierarchy is considered.
"""

from fastapi import HTTPException
from connectvida.database.supabase_client import maybe_row
from supabase import Client
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# content table -> child church opt-in flag on igrejas
SHARED_CONTENT = {
    "escolas": "compartilha_escolas_da_mae",
    "eventos": "compartilha_eventos_da_mae",
    "devocionais": "compartilha_devocionais_da_mae",
    "trilhas_crescimento": "compartilha_jornada_da_mae",
}

SHARED_CONTENT_MESSAGE = "Conteúdo compartilhado pela igreja mãe"


def _flag_for(kind: str) -> str:
    if kind not in SHARED_CONTENT:
        raise ValueError(f"Unknown shared content kind: {kind}")
    return SHARED_CONTENT[kind]


def get_sharing_source(supabase: Client, church_id: str, kind: str) -> Optional[str]:
    """Mother church id whose shared rows of `kind` the church receives, or None."""
    flag = _flag_for(kind)
    church = maybe_row(
        supabase.table("igrejas")
        .select(f"id, parent_church_id, {flag}")
        .eq("id", church_id)
        .maybe_single()
        .execute()
    )
    if not church or not church.get("parent_church_id"):
        return None
    # A null flag means the child never opted out
    if church.get(flag) is False:
        return None
    return church["parent_church_id"]


def visible_records(
    supabase: Client,
    kind: str,
    church_id: str,
    columns: str = "*",
    order_by: Optional[str] = None,
    desc: bool = False,
) -> List[Dict[str, Any]]:
    """Own rows of the church plus the mother's rows shared with children.

    Shared rows carry compartilhado_da_mae=True so callers can render them read-only.
    """
    query = supabase.table(kind).select(columns).eq("id_igreja", church_id)
    if order_by:
        query = query.order(order_by, desc=desc)
    own = [dict(row, compartilhado_da_mae=False) for row in (query.execute().data or [])]

    mother_id = get_sharing_source(supabase, church_id, kind)
    if not mother_id:
        return own

    shared_query = supabase.table(kind)\
        .select(columns)\
        .eq("id_igreja", mother_id)\
        .eq("compartilhar_com_filhas", True)
    if order_by:
        shared_query = shared_query.order(order_by, desc=desc)
    shared = [dict(row, compartilhado_da_mae=True) for row in (shared_query.execute().data or [])]

    rows = own + shared
    if order_by:
        # Keep a single ordering across both sources; nulls go last
        present = [r for r in rows if r.get(order_by) is not None]
        missing = [r for r in rows if r.get(order_by) is None]
        present.sort(key=lambda r: r[order_by], reverse=desc)
        rows = present + missing
    return rows


def is_visible(supabase: Client, kind: str, row: Dict[str, Any], church_id: str) -> bool:
    """True when the row belongs to the church or is shared with it by the mother."""
    if row.get("id_igreja") == church_id:
        return True
    if not row.get("compartilhar_com_filhas"):
        return False
    return get_sharing_source(supabase, church_id, kind) == row.get("id_igreja")


def get_visible_record(supabase: Client, kind: str, record_id: str, church_id: str, label: str = "Record") -> dict:
    """Fetch a row the church may read (own or shared). 404 otherwise."""
    row = maybe_row(
        supabase.table(kind).select("*").eq("id", record_id).maybe_single().execute()
    )
    if not row or not is_visible(supabase, kind, row, church_id):
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row


def get_owned_record(supabase: Client, table: str, record_id: str, church_id: str, label: str = "Record") -> dict:
    """Fetch a row the church may write. Shared mother rows are read-only (403)."""
    row = maybe_row(
        supabase.table(table).select("*").eq("id", record_id).maybe_single().execute()
    )
    if not row:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    if row.get("id_igreja") != church_id:
        if table in SHARED_CONTENT and is_visible(supabase, table, row, church_id):
            raise HTTPException(status_code=403, detail=SHARED_CONTENT_MESSAGE)
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return row
