from supabase import Client
from connectvida.modules.courses.schemas import CourseCreate, CourseUpdate, ModuleCreate, CourseLessonCreate
from connectvida.core.dependencies import ChurchContext
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

ACTIVE = "Ativo"
DRAFT = "Rascunho"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CourseService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _get_course(self, church_id: str, course_id: str) -> dict:
        course = maybe_row(
            self.supabase.table("cursos").select("*").eq("id", course_id).maybe_single().execute()
        )
        if not course or course.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Course not found")
        return course

    def _get_module(self, church_id: str, module_id: str) -> dict:
        module = maybe_row(
            self.supabase.table("cursos_modulos").select("*").eq("id", module_id).maybe_single().execute()
        )
        if not module or module.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Module not found")
        return module

    def check_content_access(self, context: ChurchContext, course: dict) -> None:
        """Church admins edit every course; professors edit the content of their own."""
        if context.is_church_admin or course.get("professor_id") == context.user_id:
            return
        raise HTTPException(status_code=403, detail="Only church admins or the course professor can edit it")

    def _visible(self, context: ChurchContext, course: dict) -> bool:
        return course.get("status") == ACTIVE or context.is_church_admin \
            or course.get("professor_id") == context.user_id

    def _structure(self, course_ids: List[str]) -> Dict[str, List[dict]]:
        """Modules of each course by ordem, each with its lessons by ordem."""
        if not course_ids:
            return {}
        modules = self.supabase.table("cursos_modulos").select("*").in_("id_curso", course_ids).execute().data or []
        module_ids = [m["id"] for m in modules]
        lessons: List[dict] = []
        if module_ids:
            lessons = self.supabase.table("cursos_aulas").select("*").in_("id_modulo", module_ids).execute().data or []
        by_module: Dict[str, List[dict]] = {}
        for lesson in lessons:
            by_module.setdefault(lesson["id_modulo"], []).append(lesson)
        by_course: Dict[str, List[dict]] = {}
        for module in sorted(modules, key=lambda m: m.get("ordem") or 0):
            by_course.setdefault(module["id_curso"], []).append({
                **module,
                "aulas": sorted(by_module.get(module["id"], []), key=lambda a: a.get("ordem") or 0),
            })
        return by_course

    def _decorate(self, context: ChurchContext, courses: List[dict]) -> List[dict]:
        ids = [c["id"] for c in courses]
        structure = self._structure(ids)
        enrollments: List[dict] = []
        if ids:
            enrollments = self.supabase.table("cursos_inscricoes")\
                .select("id_curso, id_membro")\
                .in_("id_curso", ids)\
                .execute().data or []
        professor_ids = list({c["professor_id"] for c in courses if c.get("professor_id")})
        professors: Dict[str, dict] = {}
        if professor_ids:
            rows = self.supabase.table("membros").select("id, nome_completo, email").in_("id", professor_ids).execute()
            professors = {p["id"]: p for p in (rows.data or [])}
        result = []
        for course in courses:
            professor = professors.get(course.get("professor_id")) or {}
            course_enrollments = [e for e in enrollments if e["id_curso"] == course["id"]]
            result.append({
                **course,
                "professor": {
                    "id": course.get("professor_id"),
                    "nome": professor.get("nome_completo"),
                    "email": professor.get("email"),
                },
                "modulos": structure.get(course["id"], []),
                "alunos_count": len(course_enrollments),
                "inscrito": any(e["id_membro"] == context.user_id for e in course_enrollments),
            })
        return result

    def list_courses(self, context: ChurchContext) -> List[dict]:
        """Courses of the church; members only see active ones unless they teach them."""
        try:
            courses = self.supabase.table("cursos")\
                .select("*")\
                .eq("id_igreja", context.church_id)\
                .order("nome")\
                .execute().data or []
            return self._decorate(context, [c for c in courses if self._visible(context, c)])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_course(self, context: ChurchContext, course_id: str) -> dict:
        course = self._get_course(context.church_id, course_id)
        if not self._visible(context, course):
            raise HTTPException(status_code=404, detail="Course not found")
        try:
            return self._decorate(context, [course])[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_course(self, context: ChurchContext, data: CourseCreate) -> dict:
        """New courses start as drafts taught by the creator unless a professor is given."""
        try:
            result = self.supabase.table("cursos").insert({
                **data.model_dump(),
                "nome": data.nome.strip(),
                "professor_id": data.professor_id or context.user_id,
                "status": DRAFT,
                "id_igreja": context.church_id,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create course")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_course(self, church_id: str, course_id: str, data: CourseUpdate) -> dict:
        self._get_course(church_id, course_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("cursos").update(update_data).eq("id", course_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_course(self, church_id: str, course_id: str) -> None:
        self._get_course(church_id, course_id)
        try:
            modules = self.supabase.table("cursos_modulos").select("id").eq("id_curso", course_id).execute()
            module_ids = [m["id"] for m in (modules.data or [])]
            if module_ids:
                self.supabase.table("cursos_aulas").delete().in_("id_modulo", module_ids).execute()
                self.supabase.table("cursos_modulos").delete().eq("id_curso", course_id).execute()
            self.supabase.table("cursos_inscricoes").delete().eq("id_curso", course_id).execute()
            self.supabase.table("cursos").delete().eq("id", course_id).execute()
            logger.info(f"Course {course_id} deleted")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Content

    def create_module(self, context: ChurchContext, course_id: str, data: ModuleCreate) -> dict:
        course = self._get_course(context.church_id, course_id)
        self.check_content_access(context, course)
        try:
            ordem = data.ordem
            if ordem is None:
                existing = self.supabase.table("cursos_modulos").select("id").eq("id_curso", course_id).execute()
                ordem = len(existing.data or []) + 1
            result = self.supabase.table("cursos_modulos").insert({
                "id_curso": course_id,
                "id_igreja": context.church_id,
                "titulo": data.titulo.strip(),
                "descricao": data.descricao,
                "ordem": ordem,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_module(self, context: ChurchContext, module_id: str) -> None:
        module = self._get_module(context.church_id, module_id)
        self.check_content_access(context, self._get_course(context.church_id, module["id_curso"]))
        try:
            self.supabase.table("cursos_aulas").delete().eq("id_modulo", module_id).execute()
            self.supabase.table("cursos_modulos").delete().eq("id", module_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_lesson(self, context: ChurchContext, module_id: str, data: CourseLessonCreate) -> dict:
        module = self._get_module(context.church_id, module_id)
        self.check_content_access(context, self._get_course(context.church_id, module["id_curso"]))
        try:
            ordem = data.ordem
            if ordem is None:
                existing = self.supabase.table("cursos_aulas").select("id").eq("id_modulo", module_id).execute()
                ordem = len(existing.data or []) + 1
            result = self.supabase.table("cursos_aulas").insert({
                **data.model_dump(exclude={"ordem"}),
                "titulo": data.titulo.strip(),
                "ordem": ordem,
                "id_modulo": module_id,
                "id_igreja": context.church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_lesson(self, context: ChurchContext, lesson_id: str) -> None:
        lesson = maybe_row(
            self.supabase.table("cursos_aulas").select("*").eq("id", lesson_id).maybe_single().execute()
        )
        if not lesson or lesson.get("id_igreja") != context.church_id:
            raise HTTPException(status_code=404, detail="Lesson not found")
        module = self._get_module(context.church_id, lesson["id_modulo"])
        self.check_content_access(context, self._get_course(context.church_id, module["id_curso"]))
        try:
            self.supabase.table("cursos_aulas").delete().eq("id", lesson_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Enrollments

    def enroll(self, context: ChurchContext, course_id: str) -> dict:
        course = self._get_course(context.church_id, course_id)
        if course.get("status") != ACTIVE:
            raise HTTPException(status_code=400, detail="Inscrições disponíveis apenas para cursos ativos")
        try:
            existing = self.supabase.table("cursos_inscricoes")\
                .select("id")\
                .eq("id_curso", course_id)\
                .eq("id_membro", context.user_id)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Você já está inscrito neste curso")
            result = self.supabase.table("cursos_inscricoes").insert({
                "id_curso": course_id,
                "id_membro": context.user_id,
                "id_igreja": context.church_id,
                "data_inscricao": _now(),
                "status": ACTIVE,
                "progresso": 0,
            }).execute()
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_my_enrollments(self, member_id: str) -> List[dict]:
        try:
            rows = self.supabase.table("cursos_inscricoes")\
                .select("*")\
                .eq("id_membro", member_id)\
                .order("data_inscricao", desc=True)\
                .execute().data or []
            course_ids = list({r["id_curso"] for r in rows})
            courses: Dict[str, dict] = {}
            if course_ids:
                result = self.supabase.table("cursos").select("id, nome, tipo, status").in_("id", course_ids).execute()
                courses = {c["id"]: c for c in (result.data or [])}
            return [{**r, "curso": courses.get(r["id_curso"])} for r in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_students(self, context: ChurchContext, course_id: str) -> List[Dict[str, Any]]:
        course = self._get_course(context.church_id, course_id)
        self.check_content_access(context, course)
        try:
            rows = self.supabase.table("cursos_inscricoes")\
                .select("*")\
                .eq("id_curso", course_id)\
                .execute().data or []
            member_ids = [r["id_membro"] for r in rows]
            members: Dict[str, dict] = {}
            if member_ids:
                result = self.supabase.table("membros").select("id, nome_completo, email").in_("id", member_ids).execute()
                members = {m["id"]: m for m in (result.data or [])}
            students = [{**r, "membro": members.get(r["id_membro"])} for r in rows]
            return sorted(students, key=lambda s: (s["membro"] or {}).get("nome_completo") or "")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
