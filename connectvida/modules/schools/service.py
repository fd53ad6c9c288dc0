from supabase import Client
from connectvida.modules.schools.schemas import SchoolCreate, SchoolUpdate, LessonCreate
from connectvida.core.sharing import visible_records, get_visible_record, get_owned_record
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Set
import logging

logger = logging.getLogger(__name__)

NO_PROFESSOR = "Professor não definido"


def completed_schools(supabase: Client, member_id: str, school_ids: Iterable[str]) -> Set[str]:
    """Ids of the given schools that have lessons and whose lessons the member completed."""
    school_ids = list({s for s in school_ids if s})
    if not school_ids:
        return set()
    lessons = supabase.table("escola_aulas")\
        .select("id, escola_id")\
        .in_("escola_id", school_ids)\
        .execute()
    progress = supabase.table("escola_progresso_aulas")\
        .select("aula_id")\
        .eq("membro_id", member_id)\
        .execute()
    done = {p["aula_id"] for p in (progress.data or [])}
    by_school: Dict[str, List[str]] = {}
    for lesson in lessons.data or []:
        by_school.setdefault(lesson["escola_id"], []).append(lesson["id"])
    return {
        school_id for school_id, lesson_ids in by_school.items()
        if lesson_ids and all(lid in done for lid in lesson_ids)
    }


def is_school_completed(supabase: Client, member_id: str, school_id: str) -> bool:
    return school_id in completed_schools(supabase, member_id, [school_id])


class SchoolService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_schools(self, church_id: str) -> List[dict]:
        """Own and shared schools with the professor's name."""
        try:
            schools = visible_records(self.supabase, "escolas", church_id, order_by="created_at", desc=True)
            professor_ids = list({s["professor_id"] for s in schools if s.get("professor_id")})
            names: Dict[str, str] = {}
            if professor_ids:
                professors = self.supabase.table("membros")\
                    .select("id, nome_completo")\
                    .in_("id", professor_ids)\
                    .execute()
                names = {p["id"]: p["nome_completo"] for p in (professors.data or [])}
            return [
                {**s, "professor_nome": names.get(s.get("professor_id")) or NO_PROFESSOR}
                for s in schools
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_school(self, church_id: str, data: SchoolCreate) -> dict:
        try:
            result = self.supabase.table("escolas").insert({
                **data.model_dump(),
                "id_igreja": church_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create school")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_school(self, church_id: str, school_id: str, data: SchoolUpdate) -> dict:
        get_owned_record(self.supabase, "escolas", school_id, church_id, "School")
        try:
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No fields to update")
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("escolas").update(update_data).eq("id", school_id).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_school(self, church_id: str, school_id: str) -> None:
        get_owned_record(self.supabase, "escolas", school_id, church_id, "School")
        try:
            lessons = self.supabase.table("escola_aulas").select("id").eq("escola_id", school_id).execute()
            lesson_ids = [l["id"] for l in (lessons.data or [])]
            if lesson_ids:
                self.supabase.table("escola_progresso_aulas").delete().in_("aula_id", lesson_ids).execute()
                self.supabase.table("escola_aulas").delete().eq("escola_id", school_id).execute()
            self.supabase.table("escola_inscricoes").delete().eq("escola_id", school_id).execute()
            self.supabase.table("escolas").delete().eq("id", school_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def enroll(self, church_id: str, member_id: str, school_id: str) -> dict:
        school = get_visible_record(self.supabase, "escolas", school_id, church_id, "School")
        if school.get("status") != "aberta":
            raise HTTPException(status_code=400, detail="Inscrições fechadas para esta escola")
        try:
            existing = self.supabase.table("escola_inscricoes")\
                .select("id")\
                .eq("escola_id", school_id)\
                .eq("membro_id", member_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Você já está inscrito nesta escola")
            result = self.supabase.table("escola_inscricoes").insert({
                "escola_id": school_id,
                "membro_id": member_id,
                "id_igreja": church_id,
                "status": "inscrito",
                "data_inscricao": datetime.now(timezone.utc).isoformat(),
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_my_enrollments(self, member_id: str) -> List[dict]:
        try:
            enrollments = self.supabase.table("escola_inscricoes")\
                .select("*")\
                .eq("membro_id", member_id)\
                .order("data_inscricao", desc=True)\
                .execute()
            rows = enrollments.data or []
            school_ids = list({r["escola_id"] for r in rows})
            schools: Dict[str, dict] = {}
            if school_ids:
                result = self.supabase.table("escolas")\
                    .select("id, nome, descricao")\
                    .in_("id", school_ids)\
                    .execute()
                schools = {s["id"]: s for s in (result.data or [])}
            return [{**r, "escolas": schools.get(r["escola_id"])} for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_lessons(self, church_id: str, member_id: str, school_id: str) -> List[dict]:
        """Lessons in order, each flagged with the caller's completion."""
        get_visible_record(self.supabase, "escolas", school_id, church_id, "School")
        try:
            lessons = self.supabase.table("escola_aulas")\
                .select("*")\
                .eq("escola_id", school_id)\
                .order("ordem")\
                .execute()
            rows = lessons.data or []
            progress = self.supabase.table("escola_progresso_aulas")\
                .select("aula_id")\
                .eq("membro_id", member_id)\
                .execute()
            done = {p["aula_id"] for p in (progress.data or [])}
            return [{**lesson, "concluida": lesson["id"] in done} for lesson in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_lesson(self, church_id: str, school_id: str, data: LessonCreate) -> dict:
        get_owned_record(self.supabase, "escolas", school_id, church_id, "School")
        try:
            ordem = data.ordem
            if ordem is None:
                existing = self.supabase.table("escola_aulas").select("id").eq("escola_id", school_id).execute()
                ordem = len(existing.data or []) + 1
            result = self.supabase.table("escola_aulas").insert({
                **data.model_dump(exclude={"ordem"}),
                "ordem": ordem,
                "escola_id": school_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def complete_lesson(self, church_id: str, member_id: str, lesson_id: str) -> dict:
        lesson = maybe_row(
            self.supabase.table("escola_aulas").select("id, escola_id").eq("id", lesson_id).maybe_single().execute()
        )
        if not lesson:
            raise HTTPException(status_code=404, detail="Lesson not found")
        get_visible_record(self.supabase, "escolas", lesson["escola_id"], church_id, "School")
        try:
            existing = self.supabase.table("escola_progresso_aulas")\
                .select("*")\
                .eq("aula_id", lesson_id)\
                .eq("membro_id", member_id)\
                .execute()
            if existing.data:
                row = existing.data[0]
            else:
                row = self.supabase.table("escola_progresso_aulas").insert({
                    "aula_id": lesson_id,
                    "membro_id": member_id,
                    "id_igreja": church_id,
                    "completed_at": datetime.now(timezone.utc).isoformat(),
                }).execute().data[0]
            return {
                **row,
                "escola_concluida": is_school_completed(self.supabase, member_id, lesson["escola_id"]),
            }
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
