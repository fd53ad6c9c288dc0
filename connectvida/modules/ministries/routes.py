from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.ministries.schemas import (
    MinistryCreate, MinistryUpdate, MinistryRoleCreate, VolunteerAdd, ScheduleCreate, ScheduleVolunteerAdd,
    ConfirmationUpdate, DemandCreate, DemandUpdate, DemandStatusUpdate
)
from connectvida.modules.ministries.service import MinistryService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/ministries", tags=["ministries"])

require_ministries = require_permission("ministries")


def get_ministry_service(supabase: Client = Depends(get_service_supabase)) -> MinistryService:
    return MinistryService(supabase)


@router.get("")
async def list_ministries(
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    """Ministries with leader name and volunteer count"""
    return service.list_ministries(context.church_id)


@router.post("", status_code=201)
async def create_ministry(
    data: MinistryCreate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.create_ministry(context.church_id, data)


@router.put("/{ministry_id}")
async def update_ministry(
    ministry_id: str,
    data: MinistryUpdate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.update_ministry(context.church_id, ministry_id, data)


@router.delete("/{ministry_id}", status_code=204)
async def delete_ministry(
    ministry_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    """Delete a ministry with its volunteers, schedules and demands"""
    service.delete_ministry(context.church_id, ministry_id)
    return None


@router.get("/{ministry_id}/roles")
async def list_roles(
    ministry_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.list_roles(context.church_id, ministry_id)


@router.post("/{ministry_id}/roles", status_code=201)
async def create_role(
    ministry_id: str,
    data: MinistryRoleCreate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    """Add a function volunteers can take (e.g. Fotógrafo, Projeção)"""
    return service.create_role(context.church_id, ministry_id, data)


@router.delete("/roles/{role_id}", status_code=204)
async def delete_role(
    role_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    service.delete_role(context.church_id, role_id)
    return None


@router.get("/{ministry_id}/volunteers")
async def list_volunteers(
    ministry_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.list_volunteers(context.church_id, ministry_id)


@router.post("/{ministry_id}/volunteers", status_code=201)
async def add_volunteer(
    ministry_id: str,
    data: VolunteerAdd,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.add_volunteer(context.church_id, ministry_id, data)


@router.post("/volunteers/{volunteer_id}/promote")
async def promote_volunteer(
    volunteer_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.promote_volunteer(context.church_id, volunteer_id)


@router.delete("/volunteers/{volunteer_id}", status_code=204)
async def remove_volunteer(
    volunteer_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    service.remove_volunteer(context.church_id, volunteer_id)
    return None


@router.get("/{ministry_id}/schedules")
async def list_schedules(
    ministry_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.list_schedules(context.church_id, ministry_id)


@router.post("/{ministry_id}/schedules", status_code=201)
async def create_schedule(
    ministry_id: str,
    data: ScheduleCreate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.create_schedule(context.church_id, ministry_id, data)


@router.delete("/schedules/{schedule_id}", status_code=204)
async def delete_schedule(
    schedule_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    service.delete_schedule(context.church_id, schedule_id)
    return None


@router.post("/schedules/{schedule_id}/volunteers", status_code=201)
async def add_schedule_volunteer(
    schedule_id: str,
    data: ScheduleVolunteerAdd,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.add_schedule_volunteer(context.church_id, schedule_id, data.membro_id)


@router.patch("/schedule-volunteers/{slot_id}")
async def update_confirmation(
    slot_id: str,
    data: ConfirmationUpdate,
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    """Confirm or decline a schedule slot"""
    return service.update_confirmation(context, slot_id, data.status_confirmacao)


@router.delete("/schedule-volunteers/{slot_id}", status_code=204)
async def remove_schedule_volunteer(
    slot_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    service.remove_schedule_volunteer(context.church_id, slot_id)
    return None


@router.get("/{ministry_id}/demands")
async def list_demands(
    ministry_id: str,
    culto_id: Optional[str] = None,
    context: ChurchContext = Depends(get_church_context),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.list_demands(context.church_id, ministry_id, culto_id)


@router.post("/{ministry_id}/demands", status_code=201)
async def create_demand(
    ministry_id: str,
    data: DemandCreate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.create_demand(context.church_id, ministry_id, data)


@router.put("/demands/{demand_id}")
async def update_demand(
    demand_id: str,
    data: DemandUpdate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    return service.update_demand(context.church_id, demand_id, data)


@router.patch("/demands/{demand_id}/status")
async def move_demand(
    demand_id: str,
    data: DemandStatusUpdate,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    """Move a demand between kanban columns"""
    return service.move_demand(context.church_id, demand_id, data.status)


@router.delete("/demands/{demand_id}", status_code=204)
async def delete_demand(
    demand_id: str,
    context: ChurchContext = Depends(require_ministries),
    service: MinistryService = Depends(get_ministry_service)
):
    service.delete_demand(context.church_id, demand_id)
    return None
