from supabase import Client
from connectvida.modules.ministries.schemas import (
    MinistryCreate, MinistryUpdate, MinistryRoleCreate, VolunteerAdd, ScheduleCreate, DemandCreate, DemandUpdate
)
from connectvida.core.dependencies import ChurchContext
from connectvida.core.sharing import get_owned_record
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

NO_LEADER = "Não Atribuído"
DEMAND_STATUSES = ("pendente", "em_andamento", "concluido")
CONFIRMATION_STATUSES = ("Pendente", "Confirmado", "Recusado")


class MinistryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _member_names(self, member_ids: List[str]) -> Dict[str, str]:
        member_ids = list({m for m in member_ids if m})
        if not member_ids:
            return {}
        result = self.supabase.table("membros")\
            .select("id, nome_completo")\
            .in_("id", member_ids)\
            .execute()
        return {m["id"]: m["nome_completo"] for m in (result.data or [])}

    def _church_member(self, church_id: str, member_id: str) -> dict:
        member = maybe_row(
            self.supabase.table("membros")
            .select("id, nome_completo, id_igreja")
            .eq("id", member_id)
            .maybe_single()
            .execute()
        )
        if not member or member.get("id_igreja") != church_id:
            raise HTTPException(status_code=400, detail="Membro não pertence a esta igreja")
        return member

    # Ministries

    def list_ministries(self, church_id: str) -> List[dict]:
        """Ministries of the church with leader name and volunteer count."""
        try:
            ministries = self.supabase.table("ministerios")\
                .select("*")\
                .eq("id_igreja", church_id)\
                .order("nome")\
                .execute().data or []
            volunteers = self.supabase.table("ministerio_voluntarios")\
                .select("ministerio_id")\
                .eq("id_igreja", church_id)\
                .execute().data or []
            counts: Dict[str, int] = {}
            for v in volunteers:
                counts[v["ministerio_id"]] = counts.get(v["ministerio_id"], 0) + 1
            leaders = self._member_names([m.get("lider_id") for m in ministries])
            return [
                {
                    **m,
                    "lider_nome": leaders.get(m.get("lider_id")) or NO_LEADER,
                    "volunteers_count": counts.get(m["id"], 0),
                }
                for m in ministries
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_ministry(self, church_id: str, data: MinistryCreate) -> dict:
        if data.lider_id:
            self._church_member(church_id, data.lider_id)
        try:
            result = self.supabase.table("ministerios").insert({
                **data.model_dump(),
                "id_igreja": church_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create ministry")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_ministry(self, church_id: str, ministry_id: str, data: MinistryUpdate) -> dict:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if update_data.get("lider_id"):
            self._church_member(church_id, update_data["lider_id"])
        try:
            result = self.supabase.table("ministerios").update(update_data).eq("id", ministry_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_ministry(self, church_id: str, ministry_id: str) -> None:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            schedules = self.supabase.table("escalas_servico")\
                .select("id")\
                .eq("ministerio_id", ministry_id)\
                .execute().data or []
            schedule_ids = [s["id"] for s in schedules]
            if schedule_ids:
                self.supabase.table("escala_voluntarios").delete().in_("escala_id", schedule_ids).execute()
                self.supabase.table("escalas_servico").delete().eq("ministerio_id", ministry_id).execute()
            self.supabase.table("ministerio_voluntarios").delete().eq("ministerio_id", ministry_id).execute()
            self.supabase.table("demandas_ministerios").delete().eq("ministerio_id", ministry_id).execute()
            self.supabase.table("ministerio_funcoes").delete().eq("ministerio_id", ministry_id).execute()
            self.supabase.table("ministerios").delete().eq("id", ministry_id).execute()
            logger.info(f"Ministry {ministry_id} deleted")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Roles

    def list_roles(self, church_id: str, ministry_id: str) -> List[dict]:
        """Functions volunteers can take in the ministry, by name."""
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            roles = self.supabase.table("ministerio_funcoes")\
                .select("id, nome, descricao")\
                .eq("ministerio_id", ministry_id)\
                .order("nome")\
                .execute()
            return roles.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_role(self, church_id: str, ministry_id: str, data: MinistryRoleCreate) -> dict:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        nome = data.nome.strip()
        if not nome:
            raise HTTPException(status_code=400, detail="Informe um nome para a função.")
        try:
            existing = self.supabase.table("ministerio_funcoes")\
                .select("id, nome")\
                .eq("ministerio_id", ministry_id)\
                .execute().data or []
            if any((r.get("nome") or "").lower() == nome.lower() for r in existing):
                raise HTTPException(status_code=409, detail="Função já cadastrada neste ministério")
            result = self.supabase.table("ministerio_funcoes").insert({
                "nome": nome,
                "descricao": (data.descricao or "").strip() or None,
                "ministerio_id": ministry_id,
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_role(self, church_id: str, role_id: str) -> None:
        role = maybe_row(
            self.supabase.table("ministerio_funcoes").select("*").eq("id", role_id).maybe_single().execute()
        )
        if not role or role.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Ministry role not found")
        try:
            self.supabase.table("ministerio_funcoes").delete().eq("id", role_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Volunteers

    def list_volunteers(self, church_id: str, ministry_id: str) -> List[dict]:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            volunteers = self.supabase.table("ministerio_voluntarios")\
                .select("*")\
                .eq("ministerio_id", ministry_id)\
                .execute().data or []
            names = self._member_names([v["membro_id"] for v in volunteers])
            rows = [{**v, "nome_completo": names.get(v["membro_id"])} for v in volunteers]
            rows.sort(key=lambda v: (v.get("papel") != "lider", v.get("nome_completo") or ""))
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_volunteer(self, church_id: str, ministry_id: str, data: VolunteerAdd) -> dict:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        self._church_member(church_id, data.membro_id)
        try:
            existing = self.supabase.table("ministerio_voluntarios")\
                .select("id")\
                .eq("ministerio_id", ministry_id)\
                .eq("membro_id", data.membro_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Membro já é voluntário deste ministério")
            result = self.supabase.table("ministerio_voluntarios").insert({
                "ministerio_id": ministry_id,
                "membro_id": data.membro_id,
                "id_igreja": church_id,
                "papel": data.papel,
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_volunteer(self, church_id: str, volunteer_id: str) -> dict:
        volunteer = maybe_row(
            self.supabase.table("ministerio_voluntarios").select("*").eq("id", volunteer_id).maybe_single().execute()
        )
        if not volunteer or volunteer.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Volunteer not found")
        return volunteer

    def promote_volunteer(self, church_id: str, volunteer_id: str) -> dict:
        """Make the volunteer a leader of its ministry."""
        volunteer = self._get_volunteer(church_id, volunteer_id)
        try:
            result = self.supabase.table("ministerio_voluntarios")\
                .update({"papel": "lider"})\
                .eq("id", volunteer_id)\
                .execute()
            self.supabase.table("ministerios")\
                .update({"lider_id": volunteer["membro_id"]})\
                .eq("id", volunteer["ministerio_id"])\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_volunteer(self, church_id: str, volunteer_id: str) -> None:
        volunteer = self._get_volunteer(church_id, volunteer_id)
        try:
            self.supabase.table("ministerio_voluntarios").delete().eq("id", volunteer_id).execute()
            ministry = maybe_row(
                self.supabase.table("ministerios")
                .select("id, lider_id")
                .eq("id", volunteer["ministerio_id"])
                .maybe_single()
                .execute()
            )
            if ministry and ministry.get("lider_id") == volunteer["membro_id"]:
                self.supabase.table("ministerios").update({"lider_id": None}).eq("id", ministry["id"]).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Schedules

    def list_schedules(self, church_id: str, ministry_id: str) -> List[dict]:
        """Service schedules of a ministry, each with its volunteers."""
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            schedules = self.supabase.table("escalas_servico")\
                .select("*")\
                .eq("ministerio_id", ministry_id)\
                .order("data_servico")\
                .execute().data or []
            schedule_ids = [s["id"] for s in schedules]
            slots = []
            if schedule_ids:
                slots = self.supabase.table("escala_voluntarios")\
                    .select("*")\
                    .in_("escala_id", schedule_ids)\
                    .execute().data or []
            names = self._member_names([s["membro_id"] for s in slots])
            by_schedule: Dict[str, List[dict]] = {}
            for slot in slots:
                by_schedule.setdefault(slot["escala_id"], []).append(
                    {**slot, "nome_completo": names.get(slot["membro_id"])}
                )
            return [{**s, "voluntarios": by_schedule.get(s["id"], [])} for s in schedules]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_schedule(self, church_id: str, ministry_id: str, data: ScheduleCreate) -> dict:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            result = self.supabase.table("escalas_servico").insert({
                **data.model_dump(),
                "ministerio_id": ministry_id,
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_schedule(self, church_id: str, schedule_id: str) -> None:
        get_owned_record(self.supabase, "escalas_servico", schedule_id, church_id, "Schedule")
        try:
            self.supabase.table("escala_voluntarios").delete().eq("escala_id", schedule_id).execute()
            self.supabase.table("escalas_servico").delete().eq("id", schedule_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_schedule_volunteer(self, church_id: str, schedule_id: str, member_id: str) -> dict:
        get_owned_record(self.supabase, "escalas_servico", schedule_id, church_id, "Schedule")
        self._church_member(church_id, member_id)
        try:
            existing = self.supabase.table("escala_voluntarios")\
                .select("id")\
                .eq("escala_id", schedule_id)\
                .eq("membro_id", member_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Membro já está nesta escala")
            result = self.supabase.table("escala_voluntarios").insert({
                "escala_id": schedule_id,
                "membro_id": member_id,
                "id_igreja": church_id,
                "status_confirmacao": "Pendente",
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_confirmation(self, context: ChurchContext, slot_id: str, status: str) -> dict:
        """Volunteers answer their own slot; ministry managers may set any slot."""
        if status not in CONFIRMATION_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
        slot = maybe_row(
            self.supabase.table("escala_voluntarios").select("*").eq("id", slot_id).maybe_single().execute()
        )
        if not slot or slot.get("id_igreja") != context.church_id:
            raise HTTPException(status_code=404, detail="Schedule slot not found")
        if slot["membro_id"] != context.user_id and not context.has_permission("ministries"):
            raise HTTPException(status_code=403, detail="Insufficient permissions. Required: ministries")
        try:
            result = self.supabase.table("escala_voluntarios")\
                .update({"status_confirmacao": status})\
                .eq("id", slot_id)\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_schedule_volunteer(self, church_id: str, slot_id: str) -> None:
        get_owned_record(self.supabase, "escala_voluntarios", slot_id, church_id, "Schedule slot")
        try:
            self.supabase.table("escala_voluntarios").delete().eq("id", slot_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Demands

    def list_demands(self, church_id: str, ministry_id: str, culto_id: Optional[str] = None) -> List[dict]:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        try:
            query = self.supabase.table("demandas_ministerios").select("*").eq("ministerio_id", ministry_id)
            if culto_id:
                query = query.eq("culto_id", culto_id)
            demands = query.order("created_at").execute().data or []
            names = self._member_names([d.get("responsavel_id") for d in demands])
            return [{**d, "responsavel_nome": names.get(d.get("responsavel_id"))} for d in demands]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_demand(self, church_id: str, ministry_id: str, data: DemandCreate) -> dict:
        get_owned_record(self.supabase, "ministerios", ministry_id, church_id, "Ministry")
        if data.responsavel_id:
            self._church_member(church_id, data.responsavel_id)
        try:
            result = self.supabase.table("demandas_ministerios").insert({
                **data.model_dump(),
                "ministerio_id": ministry_id,
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_demand(self, church_id: str, demand_id: str, data: DemandUpdate) -> dict:
        get_owned_record(self.supabase, "demandas_ministerios", demand_id, church_id, "Demand")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("demandas_ministerios").update(update_data).eq("id", demand_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def move_demand(self, church_id: str, demand_id: str, status: str) -> dict:
        """Move a demand to another kanban column."""
        if status not in DEMAND_STATUSES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status. Use one of: {', '.join(DEMAND_STATUSES)}"
            )
        get_owned_record(self.supabase, "demandas_ministerios", demand_id, church_id, "Demand")
        try:
            result = self.supabase.table("demandas_ministerios")\
                .update({"status": status})\
                .eq("id", demand_id)\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_demand(self, church_id: str, demand_id: str) -> None:
        get_owned_record(self.supabase, "demandas_ministerios", demand_id, church_id, "Demand")
        try:
            self.supabase.table("demandas_ministerios").delete().eq("id", demand_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
