from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.growth_groups.schemas import GroupCreate, GroupUpdate, GroupPersonAdd
from connectvida.modules.growth_groups.service import GrowthGroupService, LEADERS, MEMBERS
from connectvida.core.dependencies import ChurchContext, get_church_context, require_church_admin
from supabase import Client

router = APIRouter(prefix="/growth-groups", tags=["growth-groups"])


def get_growth_group_service(supabase: Client = Depends(get_service_supabase)) -> GrowthGroupService:
    return GrowthGroupService(supabase)


@router.get("")
async def list_groups(
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.list_groups(context.church_id)


@router.get("/mine")
async def my_groups(
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    """Groups the caller leads or attends, with meeting details"""
    return service.my_groups(context.user_id)


@router.post("", status_code=201)
async def create_group(
    data: GroupCreate,
    context: ChurchContext = Depends(require_church_admin),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.create_group(context.church_id, data)


@router.put("/{group_id}")
async def update_group(
    group_id: str,
    data: GroupUpdate,
    context: ChurchContext = Depends(require_church_admin),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.update_group(context.church_id, group_id, data)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    context: ChurchContext = Depends(require_church_admin),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    service.delete_group(context.church_id, group_id)
    return None


@router.get("/{group_id}/leaders")
async def list_leaders(
    group_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.list_people(context.church_id, group_id, LEADERS)


@router.post("/{group_id}/leaders", status_code=201)
async def add_leader(
    group_id: str,
    data: GroupPersonAdd,
    context: ChurchContext = Depends(require_church_admin),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.add_person(context.church_id, group_id, data.membro_id, LEADERS)


@router.delete("/{group_id}/leaders/{member_id}", status_code=204)
async def remove_leader(
    group_id: str,
    member_id: str,
    context: ChurchContext = Depends(require_church_admin),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    service.remove_person(context.church_id, group_id, member_id, LEADERS)
    return None


@router.get("/{group_id}/members")
async def list_members(
    group_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    return service.list_people(context.church_id, group_id, MEMBERS)


@router.post("/{group_id}/members", status_code=201)
async def add_member(
    group_id: str,
    data: GroupPersonAdd,
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    """Church admins and the group's leaders add members"""
    service.check_member_management(context, group_id)
    return service.add_person(context.church_id, group_id, data.membro_id, MEMBERS)


@router.delete("/{group_id}/members/{member_id}", status_code=204)
async def remove_member(
    group_id: str,
    member_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: GrowthGroupService = Depends(get_growth_group_service)
):
    service.check_member_management(context, group_id)
    service.remove_person(context.church_id, group_id, member_id, MEMBERS)
    return None
