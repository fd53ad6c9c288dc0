from fastapi import APIRouter, Depends, Query
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.events.schemas import EventCreate, EventUpdate, EventProgram
from connectvida.modules.events.service import EventService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/events", tags=["events"])

require_events_management = require_permission("events-management")


def get_event_service(supabase: Client = Depends(get_service_supabase)) -> EventService:
    return EventService(supabase)


@router.get("")
async def list_events(
    search: Optional[str] = None,
    event_type: Optional[str] = Query(None, alias="type"),
    context: ChurchContext = Depends(get_church_context),
    service: EventService = Depends(get_event_service)
):
    """Own and shared events with participation info"""
    return {"events": service.list_events(context.church_id, context.user_id, search, event_type)}


@router.post("", status_code=201)
async def create_event(
    data: EventCreate,
    context: ChurchContext = Depends(require_events_management),
    service: EventService = Depends(get_event_service)
):
    return service.create_event(context.church_id, data)


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    data: EventUpdate,
    context: ChurchContext = Depends(require_events_management),
    service: EventService = Depends(get_event_service)
):
    return service.update_event(context.church_id, event_id, data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    context: ChurchContext = Depends(require_events_management),
    service: EventService = Depends(get_event_service)
):
    service.delete_event(context.church_id, event_id)
    return None


@router.post("/{event_id}/register", status_code=201)
async def register(
    event_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: EventService = Depends(get_event_service)
):
    return service.register(context.church_id, context.user_id, event_id)


@router.delete("/{event_id}/register", status_code=204)
async def unregister(
    event_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: EventService = Depends(get_event_service)
):
    service.unregister(context.church_id, context.user_id, event_id)
    return None


@router.get("/{event_id}/participants")
async def list_participants(
    event_id: str,
    context: ChurchContext = Depends(require_events_management),
    service: EventService = Depends(get_event_service)
):
    return service.list_participants(context.church_id, event_id)


@router.get("/{event_id}/program")
async def get_program(
    event_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: EventService = Depends(get_event_service)
):
    return service.get_program(context.church_id, event_id)


@router.put("/{event_id}/program")
async def replace_program(
    event_id: str,
    data: EventProgram,
    context: ChurchContext = Depends(require_events_management),
    service: EventService = Depends(get_event_service)
):
    return service.replace_program(context.church_id, event_id, data.items)
