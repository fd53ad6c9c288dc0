from supabase import Client
from connectvida.modules.members.schemas import MemberFilters, MemberUpdate, PersonalInfoUpdate
from connectvida.modules.auth.service import AuthAdminService, get_super_admin_row
from connectvida.modules.journeys.service import journey_structure
from connectvida.config.permissions_config import ROLES, CHURCH_ADMIN_ROLES, invalid_permissions
from connectvida.core.dependencies import ChurchContext
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import date
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

# Rows referencing a member, removed before the membros row. (table, member column)
MEMBER_CLEANUP = [
    ("informacoes_pessoais", "membro_id"),
    ("ministerio_voluntarios", "membro_id"),
    ("evento_participantes", "membro_id"),
    ("progresso_membros", "id_membro"),
    ("devocional_curtidas", "membro_id"),
    ("devocional_comentarios", "autor_id"),
    ("escola_inscricoes", "membro_id"),
    ("cursos_inscricoes", "id_membro"),
    ("gc_group_members", "membro_id"),
    ("gc_group_leaders", "membro_id"),
    ("testes_vocacionais", "membro_id"),
    ("pastor_area_items", "pastor_id"),
]

DETAILS_ROLES = ("admin", "pastor", "integra")


def _month_of(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10]).month
    except ValueError:
        return None


class MemberService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _personal_by_member(self, member_ids: List[str]) -> Dict[str, dict]:
        if not member_ids:
            return {}
        result = self.supabase.table("informacoes_pessoais")\
            .select("*")\
            .in_("membro_id", member_ids)\
            .execute()
        return {row["membro_id"]: row for row in (result.data or [])}

    def list_members(self, church_id: str, filters: MemberFilters) -> List[dict]:
        """Church member directory, each row embedding its informacoes_pessoais."""
        try:
            query = self.supabase.table("membros").select("*").eq("id_igreja", church_id)
            if filters.role:
                query = query.eq("funcao", filters.role)
            if filters.status:
                query = query.eq("status", filters.status)
            if filters.ministry:
                query = query.ilike("ministerio_recomendado", f"%{filters.ministry}%")
            members = query.order("nome_completo").execute().data or []
            personal = self._personal_by_member([m["id"] for m in members])

            current_month = date.today().month
            term = (filters.search or "").replace("%", "").strip().lower()
            rows = []
            for member in members:
                info = personal.get(member["id"])
                if filters.birthday_month and _month_of((info or {}).get("data_nascimento")) != current_month:
                    continue
                if filters.wedding_month and _month_of((info or {}).get("data_casamento")) != current_month:
                    continue
                if term:
                    haystack = [
                        member.get("nome_completo") or "",
                        member.get("email") or "",
                        (info or {}).get("telefone") or "",
                    ]
                    if not any(term in value.lower() for value in haystack):
                        continue
                rows.append({**member, "informacoes_pessoais": info})
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_member(self, member_id: str) -> dict:
        member = maybe_row(
            self.supabase.table("membros").select("*").eq("id", member_id).maybe_single().execute()
        )
        if not member:
            raise HTTPException(status_code=404, detail="Member not found")
        return member

    def check_details_access(self, context: ChurchContext, member: dict) -> None:
        """Super admin; admin/pastor/integra of the member's church; admin/pastor of its mother church."""
        if context.is_super_admin:
            return
        if not context.member:
            raise HTTPException(status_code=403, detail="Forbidden: Caller profile not found.")
        target_church = member.get("id_igreja")
        if context.church_id == target_church and context.role in DETAILS_ROLES:
            return
        church = maybe_row(
            self.supabase.table("igrejas")
            .select("parent_church_id")
            .eq("id", target_church)
            .maybe_single()
            .execute()
        )
        if church and church.get("parent_church_id") == context.church_id and context.role in CHURCH_ADMIN_ROLES:
            return
        raise HTTPException(status_code=403, detail="Forbidden")

    def get_member_details(self, context: ChurchContext, member_id: str) -> Dict[str, Any]:
        member = self.get_member(member_id)
        self.check_details_access(context, member)
        try:
            personal = maybe_row(
                self.supabase.table("informacoes_pessoais")
                .select("*")
                .eq("membro_id", member_id)
                .maybe_single()
                .execute()
            )
            if personal and personal.get("conjuge_id"):
                spouse = maybe_row(
                    self.supabase.table("membros")
                    .select("nome_completo")
                    .eq("id", personal["conjuge_id"])
                    .maybe_single()
                    .execute()
                )
                if spouse:
                    personal = {**personal, "conjuge_nome": spouse["nome_completo"]}

            enrollments = self.supabase.table("escola_inscricoes")\
                .select("escola_id")\
                .eq("membro_id", member_id)\
                .execute().data or []
            school_ids = [e["escola_id"] for e in enrollments]
            schools = []
            if school_ids:
                schools = self.supabase.table("escolas").select("id, nome").in_("id", school_ids).execute().data or []

            volunteering = self.supabase.table("ministerio_voluntarios")\
                .select("ministerio_id, papel")\
                .eq("membro_id", member_id)\
                .execute().data or []
            ministry_ids = [v["ministerio_id"] for v in volunteering]
            ministries = []
            if ministry_ids:
                ministries = self.supabase.table("ministerios")\
                    .select("id, nome")\
                    .in_("id", ministry_ids)\
                    .execute().data or []

            vocational = maybe_row(
                self.supabase.table("testes_vocacionais")
                .select("ministerio_recomendado, data_teste")
                .eq("membro_id", member_id)
                .eq("is_ultimo", True)
                .maybe_single()
                .execute()
            )

            responsible_ids = [member_id]
            if personal and personal.get("conjuge_id"):
                responsible_ids.append(personal["conjuge_id"])
            kids = self.supabase.table("criancas")\
                .select("id, nome_crianca, data_nascimento")\
                .in_("responsavel_id", responsible_ids)\
                .execute().data or []

            return {
                "personal": personal,
                "enrollments": [{"escolas": {"nome": s["nome"]}} for s in schools],
                "ministries": [{"ministerios": {"nome": m["nome"]}} for m in ministries],
                "kids": kids,
                "journey": self.journey_summary(member["id_igreja"], member_id),
                "vocationalTest": vocational,
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error in member details for {member_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def journey_summary(self, church_id: str, member_id: str) -> Optional[Dict[str, Any]]:
        """Completion summary of the member's journey, or None when the journey has no steps."""
        _, etapas = journey_structure(self.supabase, church_id)
        steps = [(etapa["id"], passo["id"]) for etapa in etapas for passo in etapa["passos"]]
        if not steps:
            return None
        completed = self.supabase.table("progresso_membros")\
            .select("id_passo")\
            .eq("id_membro", member_id)\
            .eq("status", "concluido")\
            .execute().data or []
        done = {p["id_passo"] for p in completed}
        completed_steps = sum(1 for _, passo_id in steps if passo_id in done)
        completed_stages = {etapa_id for etapa_id, passo_id in steps if passo_id in done}
        return {
            "completedSteps": completed_steps,
            "totalSteps": len(steps),
            "percentage": completed_steps / len(steps) * 100,
            "completedStages": len(completed_stages),
        }

    def update_member(self, church_id: str, member_id: str, data: MemberUpdate) -> dict:
        member = self.get_member(member_id)
        if member.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Member not found")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "funcao" in update_data and update_data["funcao"] not in ROLES:
            raise HTTPException(status_code=400, detail=f"Invalid role: {update_data['funcao']}")
        if update_data.get("extra_permissoes"):
            unknown = invalid_permissions(update_data["extra_permissoes"])
            if unknown:
                raise HTTPException(status_code=400, detail=f"Invalid permissions: {', '.join(unknown)}")
        try:
            result = self.supabase.table("membros").update(update_data).eq("id", member_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def upsert_personal_info(self, church_id: str, member_id: str, data: PersonalInfoUpdate) -> dict:
        """Create or update the caller's personal info and mark the profile as complete."""
        try:
            payload = {
                **data.model_dump(exclude_unset=True),
                "membro_id": member_id,
                "id_igreja": church_id,
            }
            result = self.supabase.table("informacoes_pessoais").upsert(payload, on_conflict="membro_id").execute()
            self.supabase.table("membros").update({"perfil_completo": True}).eq("id", member_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_user(self, context: ChurchContext, user_id: str) -> Dict[str, bool]:
        """Remove a member's rows, the membros row and finally the auth user."""
        if context.user_id == user_id:
            raise HTTPException(status_code=400, detail="Você não pode excluir a si mesmo.")

        if not context.is_super_admin:
            authorized = False
            if context.member and context.role in CHURCH_ADMIN_ROLES:
                target = maybe_row(
                    self.supabase.table("membros")
                    .select("id_igreja, funcao")
                    .eq("id", user_id)
                    .maybe_single()
                    .execute()
                )
                if target and target.get("id_igreja") == context.member.get("id_igreja"):
                    authorized = not get_super_admin_row(self.supabase, user_id)
            if not authorized:
                raise HTTPException(status_code=403, detail="Forbidden")

        for table, column in MEMBER_CLEANUP:
            try:
                self.supabase.table(table).delete().eq(column, user_id).execute()
            except Exception as e:
                # Missing tables or rows do not block the removal
                logger.warning(f"Cleanup of {table} for user {user_id} failed: {e}")
        try:
            self.supabase.table("transacoes_financeiras")\
                .update({"membro_id": None, "membro_nome": None})\
                .eq("membro_id", user_id)\
                .execute()
            self.supabase.table("membros").delete().eq("id", user_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        try:
            AuthAdminService(self.supabase).delete_user(user_id)
        except Exception as e:
            logger.error(f"Auth user {user_id} could not be deleted: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(f"User {user_id} deleted by {context.user_id}")
        return {"success": True}
