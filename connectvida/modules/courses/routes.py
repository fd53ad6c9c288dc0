from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.courses.schemas import CourseCreate, CourseUpdate, ModuleCreate, CourseLessonCreate
from connectvida.modules.courses.service import CourseService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_church_admin
from supabase import Client

router = APIRouter(prefix="/courses", tags=["courses"])


def get_course_service(supabase: Client = Depends(get_service_supabase)) -> CourseService:
    return CourseService(supabase)


@router.get("")
async def list_courses(
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    """Courses with professor, modules and lessons"""
    return service.list_courses(context)


@router.get("/enrollments/me")
async def list_my_enrollments(
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.list_my_enrollments(context.user_id)


@router.get("/{course_id}")
async def get_course(
    course_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.get_course(context, course_id)


@router.post("", status_code=201)
async def create_course(
    data: CourseCreate,
    context: ChurchContext = Depends(require_church_admin),
    service: CourseService = Depends(get_course_service)
):
    return service.create_course(context, data)


@router.put("/{course_id}")
async def update_course(
    course_id: str,
    data: CourseUpdate,
    context: ChurchContext = Depends(require_church_admin),
    service: CourseService = Depends(get_course_service)
):
    """Edit a course; publishing means setting status to Ativo"""
    return service.update_course(context.church_id, course_id, data)


@router.delete("/{course_id}", status_code=204)
async def delete_course(
    course_id: str,
    context: ChurchContext = Depends(require_church_admin),
    service: CourseService = Depends(get_course_service)
):
    service.delete_course(context.church_id, course_id)
    return None


@router.post("/{course_id}/modules", status_code=201)
async def create_module(
    course_id: str,
    data: ModuleCreate,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.create_module(context, course_id, data)


@router.delete("/modules/{module_id}", status_code=204)
async def delete_module(
    module_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    service.delete_module(context, module_id)
    return None


@router.post("/modules/{module_id}/lessons", status_code=201)
async def create_lesson(
    module_id: str,
    data: CourseLessonCreate,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.create_lesson(context, module_id, data)


@router.delete("/lessons/{lesson_id}", status_code=204)
async def delete_lesson(
    lesson_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    service.delete_lesson(context, lesson_id)
    return None


@router.post("/{course_id}/enroll", status_code=201)
async def enroll(
    course_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.enroll(context, course_id)


@router.get("/{course_id}/students")
async def list_students(
    course_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: CourseService = Depends(get_course_service)
):
    return service.list_students(context, course_id)
