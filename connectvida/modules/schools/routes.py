from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.schools.schemas import SchoolCreate, SchoolUpdate, LessonCreate
from connectvida.modules.schools.service import SchoolService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_any_permission
from supabase import Client

router = APIRouter(prefix="/schools", tags=["schools"])

require_school_manager = require_any_permission("member-management", "journey-config")


def get_school_service(supabase: Client = Depends(get_service_supabase)) -> SchoolService:
    return SchoolService(supabase)


@router.get("")
async def list_schools(
    context: ChurchContext = Depends(get_church_context),
    service: SchoolService = Depends(get_school_service)
):
    """Schools of the church plus those shared by the mother church"""
    return service.list_schools(context.church_id)


@router.post("", status_code=201)
async def create_school(
    data: SchoolCreate,
    context: ChurchContext = Depends(require_school_manager),
    service: SchoolService = Depends(get_school_service)
):
    return service.create_school(context.church_id, data)


@router.put("/{school_id}")
async def update_school(
    school_id: str,
    data: SchoolUpdate,
    context: ChurchContext = Depends(require_school_manager),
    service: SchoolService = Depends(get_school_service)
):
    return service.update_school(context.church_id, school_id, data)


@router.delete("/{school_id}", status_code=204)
async def delete_school(
    school_id: str,
    context: ChurchContext = Depends(require_school_manager),
    service: SchoolService = Depends(get_school_service)
):
    service.delete_school(context.church_id, school_id)
    return None


@router.get("/enrollments/me")
async def list_my_enrollments(
    context: ChurchContext = Depends(get_church_context),
    service: SchoolService = Depends(get_school_service)
):
    return service.list_my_enrollments(context.user_id)


@router.post("/{school_id}/enroll", status_code=201)
async def enroll(
    school_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: SchoolService = Depends(get_school_service)
):
    return service.enroll(context.church_id, context.user_id, school_id)


@router.get("/{school_id}/lessons")
async def list_lessons(
    school_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: SchoolService = Depends(get_school_service)
):
    return service.list_lessons(context.church_id, context.user_id, school_id)


@router.post("/{school_id}/lessons", status_code=201)
async def create_lesson(
    school_id: str,
    data: LessonCreate,
    context: ChurchContext = Depends(require_school_manager),
    service: SchoolService = Depends(get_school_service)
):
    return service.create_lesson(context.church_id, school_id, data)


@router.post("/lessons/{lesson_id}/complete")
async def complete_lesson(
    lesson_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: SchoolService = Depends(get_school_service)
):
    """Mark a lesson as completed by the caller"""
    return service.complete_lesson(context.church_id, context.user_id, lesson_id)
