from supabase import Client
from connectvida.modules.events.schemas import EventCreate, EventUpdate, ProgramItem
from connectvida.core.sharing import visible_records, get_visible_record, get_owned_record
from fastapi import HTTPException
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

DEFAULT_EVENT_TYPE = "Outro"
DEFAULT_EVENT_STATUS = "Planejado"


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _participants(self, event_ids: List[str]) -> List[dict]:
        if not event_ids:
            return []
        result = self.supabase.table("evento_participantes")\
            .select("evento_id, membro_id")\
            .in_("evento_id", event_ids)\
            .execute()
        return result.data or []

    def list_events(
        self,
        church_id: str,
        member_id: str,
        search: Optional[str] = None,
        event_type: Optional[str] = None
    ) -> List[dict]:
        """Visible events sorted by date, with participant count and the caller's registration."""
        try:
            events = visible_records(self.supabase, "eventos", church_id)
            participants = self._participants([e["id"] for e in events])
            counts: Dict[str, int] = {}
            registered = set()
            for p in participants:
                counts[p["evento_id"]] = counts.get(p["evento_id"], 0) + 1
                if p["membro_id"] == member_id:
                    registered.add(p["evento_id"])

            term = (search or "").strip().lower()
            rows = []
            for event in events:
                tipo = event.get("tipo") or DEFAULT_EVENT_TYPE
                if term and term not in (event.get("nome") or "").lower() \
                        and term not in (event.get("local") or "").lower():
                    continue
                if event_type and event_type != "all" and tipo != event_type:
                    continue
                rows.append({
                    **event,
                    "tipo": tipo,
                    "status": event.get("status") or DEFAULT_EVENT_STATUS,
                    "inscricoes_abertas": bool(event.get("inscricoes_abertas")),
                    "participantes_count": counts.get(event["id"], 0),
                    "is_registered": event["id"] in registered,
                })
            rows.sort(key=lambda e: e.get("data_hora") or "")
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_event(self, church_id: str, data: EventCreate) -> dict:
        try:
            payload = data.model_dump()
            payload["tipo"] = payload.get("tipo") or DEFAULT_EVENT_TYPE
            payload["id_igreja"] = church_id
            result = self.supabase.table("eventos").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_event(self, church_id: str, event_id: str, data: EventUpdate) -> dict:
        get_owned_record(self.supabase, "eventos", event_id, church_id, "Event")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("eventos").update(update_data).eq("id", event_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_event(self, church_id: str, event_id: str) -> None:
        get_owned_record(self.supabase, "eventos", event_id, church_id, "Event")
        try:
            self.supabase.table("programacoes_evento").delete().eq("evento_id", event_id).execute()
            self.supabase.table("evento_participantes").delete().eq("evento_id", event_id).execute()
            self.supabase.table("eventos").delete().eq("id", event_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def register(self, church_id: str, member_id: str, event_id: str) -> dict:
        event = get_visible_record(self.supabase, "eventos", event_id, church_id, "Event")
        if not event.get("inscricoes_abertas"):
            raise HTTPException(status_code=400, detail="Inscrições encerradas para este evento")
        try:
            participants = self._participants([event_id])
            if any(p["membro_id"] == member_id for p in participants):
                raise HTTPException(status_code=409, detail="Você já está inscrito neste evento")
            capacity = event.get("capacidade_maxima")
            if capacity is not None and len(participants) >= capacity:
                raise HTTPException(status_code=409, detail="Evento lotado")
            result = self.supabase.table("evento_participantes").insert({
                "evento_id": event_id,
                "membro_id": member_id,
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unregister(self, church_id: str, member_id: str, event_id: str) -> None:
        get_visible_record(self.supabase, "eventos", event_id, church_id, "Event")
        try:
            self.supabase.table("evento_participantes")\
                .delete()\
                .eq("evento_id", event_id)\
                .eq("membro_id", member_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_participants(self, church_id: str, event_id: str) -> List[dict]:
        """Participants with their names; a mother church also sees registrations from children."""
        get_owned_record(self.supabase, "eventos", event_id, church_id, "Event")
        try:
            participants = self.supabase.table("evento_participantes")\
                .select("*")\
                .eq("evento_id", event_id)\
                .execute().data or []
            member_ids = list({p["membro_id"] for p in participants})
            names: Dict[str, str] = {}
            if member_ids:
                members = self.supabase.table("membros")\
                    .select("id, nome_completo")\
                    .in_("id", member_ids)\
                    .execute()
                names = {m["id"]: m["nome_completo"] for m in (members.data or [])}
            rows = [{**p, "membro_nome": names.get(p["membro_id"])} for p in participants]
            rows.sort(key=lambda p: p.get("membro_nome") or "")
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_program(self, church_id: str, event_id: str) -> List[dict]:
        get_visible_record(self.supabase, "eventos", event_id, church_id, "Event")
        try:
            result = self.supabase.table("programacoes_evento")\
                .select("*")\
                .eq("evento_id", event_id)\
                .order("ordem")\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def replace_program(self, church_id: str, event_id: str, items: List[ProgramItem]) -> List[dict]:
        """Replace the event's order of service."""
        get_owned_record(self.supabase, "eventos", event_id, church_id, "Event")
        try:
            self.supabase.table("programacoes_evento").delete().eq("evento_id", event_id).execute()
            if not items:
                return []
            rows = [
                {**item.model_dump(), "evento_id": event_id, "id_igreja": church_id, "ordem": index}
                for index, item in enumerate(items)
            ]
            result = self.supabase.table("programacoes_evento").insert(rows).execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
