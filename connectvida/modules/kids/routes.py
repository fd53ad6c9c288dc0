from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.kids.schemas import KidCreate, KidUpdate, CheckinRequest, CheckoutRequest, CheckinResponse
from connectvida.modules.kids.service import KidsService
from connectvida.core.dependencies import ChurchContext, get_church_context
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/kids", tags=["kids"])


def get_kids_service(supabase: Client = Depends(get_service_supabase)) -> KidsService:
    return KidsService(supabase)


@router.get("")
async def list_kids(
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    """Kids with age and age group; members only see their family's kids"""
    return service.list_kids(context)


@router.post("", status_code=201)
async def create_kid(
    data: KidCreate,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    return service.create_kid(context, data)


@router.get("/checkins")
async def checkin_history(
    kid_id: Optional[str] = None,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    return service.history(context, kid_id)


@router.put("/{kid_id}")
async def update_kid(
    kid_id: str,
    data: KidUpdate,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    return service.update_kid(context, kid_id, data)


@router.delete("/{kid_id}", status_code=204)
async def delete_kid(
    kid_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    service.delete_kid(context, kid_id)
    return None


@router.post("/{kid_id}/checkin", response_model=CheckinResponse, status_code=201)
async def check_in(
    kid_id: str,
    data: Optional[CheckinRequest] = None,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    return service.check_in(context, kid_id, data.observacoes if data else None)


@router.post("/{kid_id}/checkout")
async def check_out(
    kid_id: str,
    data: CheckoutRequest,
    context: ChurchContext = Depends(get_church_context),
    service: KidsService = Depends(get_kids_service)
):
    """Close the open check-in; the security code must match"""
    return service.check_out(context, kid_id, data.codigo_seguranca)
