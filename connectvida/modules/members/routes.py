from fastapi import APIRouter, Depends, HTTPException
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.members.schemas import MemberFilters, MemberUpdate, PersonalInfoUpdate, JourneySummary
from connectvida.modules.members.service import MemberService
from connectvida.config.permissions_config import MEMBER_DIRECTORY_ROLES
from connectvida.core.dependencies import ChurchContext, get_church_context, get_user_context, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/members", tags=["members"])


def get_member_service(supabase: Client = Depends(get_service_supabase)) -> MemberService:
    return MemberService(supabase)


def require_directory_access(context: ChurchContext = Depends(get_church_context)) -> ChurchContext:
    if not context.is_super_admin and context.role not in MEMBER_DIRECTORY_ROLES:
        raise HTTPException(status_code=403, detail="Forbidden")
    return context


@router.get("")
async def list_members(
    search: Optional[str] = None,
    role: Optional[str] = None,
    status: Optional[str] = None,
    ministry: Optional[str] = None,
    birthday_month: bool = False,
    wedding_month: bool = False,
    context: ChurchContext = Depends(require_directory_access),
    service: MemberService = Depends(get_member_service)
):
    """List church members with filters (birthday/wedding month use the current month)"""
    filters = MemberFilters(
        search=search, role=role, status=status, ministry=ministry,
        birthday_month=birthday_month, wedding_month=wedding_month,
    )
    return service.list_members(context.church_id, filters)


@router.put("/me/personal-info")
async def update_my_personal_info(
    data: PersonalInfoUpdate,
    context: ChurchContext = Depends(get_church_context),
    service: MemberService = Depends(get_member_service)
):
    return service.upsert_personal_info(context.church_id, context.user_id, data)


@router.get("/{member_id}/details")
async def get_member_details(
    member_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: MemberService = Depends(get_member_service)
):
    """Personal info, schools, ministries, kids, vocational test and journey summary of a member"""
    return service.get_member_details(context, member_id)


@router.get("/{member_id}/journey", response_model=Optional[JourneySummary])
async def get_member_journey(
    member_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: MemberService = Depends(get_member_service)
):
    member = service.get_member(member_id)
    service.check_details_access(context, member)
    return service.journey_summary(member["id_igreja"], member_id)


@router.put("/{member_id}")
async def update_member(
    member_id: str,
    data: MemberUpdate,
    context: ChurchContext = Depends(require_permission("member-management")),
    service: MemberService = Depends(get_member_service)
):
    """Change a member's role, status or extra permissions"""
    return service.update_member(context.church_id, member_id, data)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: MemberService = Depends(get_member_service)
):
    """Delete a member and its auth user"""
    return service.delete_user(context, user_id)
