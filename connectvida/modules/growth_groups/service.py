from supabase import Client
from connectvida.modules.growth_groups.schemas import GroupCreate, GroupUpdate
from connectvida.core.dependencies import ChurchContext
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Dict, List
import logging

logger = logging.getLogger(__name__)

LEADERS = "gc_group_leaders"
MEMBERS = "gc_group_members"

PERSON_LABELS = {LEADERS: "Líder", MEMBERS: "Membro"}


class GrowthGroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_group(self, church_id: str, group_id: str) -> dict:
        group = maybe_row(
            self.supabase.table("gc_groups").select("*").eq("id", group_id).maybe_single().execute()
        )
        if not group or group.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Growth group not found")
        return group

    def is_leader(self, member_id: str, group_id: str) -> bool:
        rows = self.supabase.table(LEADERS)\
            .select("id")\
            .eq("group_id", group_id)\
            .eq("membro_id", member_id)\
            .execute()
        return bool(rows.data)

    def check_member_management(self, context: ChurchContext, group_id: str) -> None:
        """Church admins manage every group; leaders manage the members of their own group."""
        self._get_group(context.church_id, group_id)
        if context.is_church_admin or self.is_leader(context.user_id, group_id):
            return
        raise HTTPException(status_code=403, detail="Only church admins or group leaders can perform this action")

    def list_groups(self, church_id: str) -> List[dict]:
        """Groups of the church, newest first, with leader names and member counts."""
        try:
            groups = self.supabase.table("gc_groups")\
                .select("*")\
                .eq("id_igreja", church_id)\
                .order("created_at", desc=True)\
                .execute().data or []
            leaders = self.supabase.table(LEADERS).select("group_id, membro_id").eq("id_igreja", church_id)\
                .execute().data or []
            members = self.supabase.table(MEMBERS).select("group_id").eq("id_igreja", church_id)\
                .execute().data or []
            names = self._names([l["membro_id"] for l in leaders])
            return [
                {
                    **g,
                    "lideres": [names.get(l["membro_id"]) for l in leaders if l["group_id"] == g["id"]],
                    "members_count": sum(1 for m in members if m["group_id"] == g["id"]),
                }
                for g in groups
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _names(self, member_ids: List[str]) -> Dict[str, str]:
        member_ids = list({m for m in member_ids if m})
        if not member_ids:
            return {}
        result = self.supabase.table("membros").select("id, nome_completo, email").in_("id", member_ids).execute()
        return {m["id"]: m.get("nome_completo") or m.get("email") for m in (result.data or [])}

    def create_group(self, church_id: str, data: GroupCreate) -> dict:
        try:
            result = self.supabase.table("gc_groups").insert({
                **data.model_dump(),
                "nome": data.nome.strip(),
                "id_igreja": church_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create growth group")
            logger.info(f"Growth group created for church {church_id}")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_group(self, church_id: str, group_id: str, data: GroupUpdate) -> dict:
        self._get_group(church_id, group_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("gc_groups").update(update_data).eq("id", group_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_group(self, church_id: str, group_id: str) -> None:
        self._get_group(church_id, group_id)
        try:
            self.supabase.table(MEMBERS).delete().eq("group_id", group_id).execute()
            self.supabase.table(LEADERS).delete().eq("group_id", group_id).execute()
            self.supabase.table("gc_groups").delete().eq("id", group_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_people(self, church_id: str, group_id: str, table: str) -> List[dict]:
        """Leaders or members of a group as membros rows."""
        self._get_group(church_id, group_id)
        try:
            links = self.supabase.table(table).select("membro_id").eq("group_id", group_id).execute().data or []
            ids = [l["membro_id"] for l in links]
            if not ids:
                return []
            people = self.supabase.table("membros")\
                .select("id, nome_completo, email, funcao")\
                .in_("id", ids)\
                .order("nome_completo")\
                .execute()
            return people.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_person(self, church_id: str, group_id: str, member_id: str, table: str) -> dict:
        self._get_group(church_id, group_id)
        member = maybe_row(
            self.supabase.table("membros").select("id, id_igreja").eq("id", member_id).maybe_single().execute()
        )
        if not member or member.get("id_igreja") != church_id:
            raise HTTPException(status_code=400, detail="Member not found in this church")
        try:
            existing = self.supabase.table(table)\
                .select("id")\
                .eq("group_id", group_id)\
                .eq("membro_id", member_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail=f"{PERSON_LABELS[table]} já faz parte deste grupo")
            result = self.supabase.table(table).insert({
                "id_igreja": church_id,
                "group_id": group_id,
                "membro_id": member_id,
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_person(self, church_id: str, group_id: str, member_id: str, table: str) -> None:
        self._get_group(church_id, group_id)
        try:
            existing = self.supabase.table(table)\
                .select("id")\
                .eq("group_id", group_id)\
                .eq("membro_id", member_id)\
                .execute()
            if not existing.data:
                raise HTTPException(status_code=404, detail=f"{PERSON_LABELS[table]} não encontrado neste grupo")
            self.supabase.table(table).delete().eq("group_id", group_id).eq("membro_id", member_id).execute()
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def my_groups(self, member_id: str) -> List[dict]:
        """Groups the member leads or attends; a leader role wins when both apply."""
        try:
            roles: Dict[str, str] = {}
            for table, papel in ((MEMBERS, "membro"), (LEADERS, "lider")):
                rows = self.supabase.table(table).select("group_id").eq("membro_id", member_id).execute()
                for row in rows.data or []:
                    roles[row["group_id"]] = papel
            if not roles:
                return []
            groups = self.supabase.table("gc_groups")\
                .select("*")\
                .in_("id", list(roles))\
                .order("nome")\
                .execute()
            return [{**g, "papel": roles[g["id"]]} for g in (groups.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
