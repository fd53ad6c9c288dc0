from supabase import Client
from connectvida.modules.churches.service import CHURCH_CASCADE, CascadeDeleteError
from fastapi import HTTPException
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)

# Rows depending on tables of the church cascade go first
RESET_PREFIX = [
    "cursos_inscricoes",
    "cursos_aulas",
    "cursos_modulos",
    "cursos",
    "quiz_perguntas",
    "escola_progresso_aulas",
    "escola_aulas",
    "eventos_aplicacao",
]

# Never matches a real row; PostgREST refuses deletes without a filter
NIL_UUID = "00000000-0000-0000-0000-000000000000"


def reset_tables() -> List[str]:
    """Tenant tables in deletion order. planos_assinatura and super_admins are kept."""
    tables = list(RESET_PREFIX)
    for table, _ in CHURCH_CASCADE:
        if table not in tables:
            tables.append(table)
    return tables


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def reset_system(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for table in reset_tables():
            try:
                result = self.supabase.table(table).delete(count="exact").neq("id", NIL_UUID).execute()
                counts[table] = result.count if result.count is not None else len(result.data or [])
            except Exception as e:
                logger.error(f"System reset failed at {table}: {e}")
                raise CascadeDeleteError(f"{table}: {e}", counts)
        logger.warning(f"System reset completed: {counts}")
        return counts

    def overview(self) -> Dict[str, object]:
        try:
            churches = self.supabase.table("igrejas").select("id, status").execute().data or []
            by_status: Dict[str, int] = {}
            for church in churches:
                status = church.get("status") or "unknown"
                by_status[status] = by_status.get(status, 0) + 1
            members = self.supabase.table("membros").select("id", count="exact").execute()
            pending = self.supabase.table("plan_change_requests")\
                .select("id", count="exact")\
                .eq("status", "pending")\
                .execute()
            return {
                "churches": len(churches),
                "churches_by_status": by_status,
                "members": members.count if members.count is not None else len(members.data or []),
                "pending_plan_requests": pending.count if pending.count is not None else len(pending.data or []),
            }
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
