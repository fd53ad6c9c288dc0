from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.journeys.schemas import (
    TrilhaCreate, TrilhaUpdate, EtapaCreate, EtapaUpdate, PassoCreate, PassoUpdate,
    ReorderRequest, StepCompletion, StepCompletionResult, MyJourneyResponse
)
from connectvida.modules.journeys.service import JourneyService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/journeys", tags=["journeys"])


def get_journey_service(supabase: Client = Depends(get_service_supabase)) -> JourneyService:
    return JourneyService(supabase)


@router.get("/me", response_model=MyJourneyResponse)
async def get_my_journey(
    context: ChurchContext = Depends(get_church_context),
    service: JourneyService = Depends(get_journey_service)
):
    """The caller's growth journey with progress, locks and stats"""
    return service.get_my_journey(context.church_id, context.user_id)


@router.post("/steps/{passo_id}/complete", response_model=StepCompletionResult)
async def complete_step(
    passo_id: str,
    completion: Optional[StepCompletion] = None,
    context: ChurchContext = Depends(get_church_context),
    service: JourneyService = Depends(get_journey_service)
):
    """Complete a step; quiz steps are graded and limited to 3 failed attempts"""
    return service.complete_step(context.church_id, context.user_id, passo_id, completion)


@router.post("/progress/{member_id}/{passo_id}/unlock")
async def unlock_quiz(
    member_id: str,
    passo_id: str,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.unlock_quiz(context.church_id, member_id, passo_id)


@router.get("/admin")
async def get_admin_journey(
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    """Full structure of the church's active trilha for the journey editor"""
    return service.get_admin_journey(context.church_id)


@router.post("/trilhas", status_code=201)
async def create_trilha(
    data: TrilhaCreate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.create_trilha(context.church_id, data)


@router.put("/trilhas/{trilha_id}")
async def update_trilha(
    trilha_id: str,
    data: TrilhaUpdate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.update_trilha(context.church_id, trilha_id, data)


@router.delete("/trilhas/{trilha_id}", status_code=204)
async def delete_trilha(
    trilha_id: str,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    service.delete_trilha(context.church_id, trilha_id)
    return None


@router.post("/trilhas/{trilha_id}/etapas", status_code=201)
async def create_etapa(
    trilha_id: str,
    data: EtapaCreate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.create_etapa(context.church_id, trilha_id, data)


@router.put("/trilhas/{trilha_id}/etapas/order")
async def reorder_etapas(
    trilha_id: str,
    data: ReorderRequest,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.reorder_etapas(context.church_id, trilha_id, data.ids)


@router.put("/etapas/{etapa_id}")
async def update_etapa(
    etapa_id: str,
    data: EtapaUpdate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.update_etapa(context.church_id, etapa_id, data)


@router.delete("/etapas/{etapa_id}", status_code=204)
async def delete_etapa(
    etapa_id: str,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    service.delete_etapa(context.church_id, etapa_id)
    return None


@router.post("/etapas/{etapa_id}/passos", status_code=201)
async def create_passo(
    etapa_id: str,
    data: PassoCreate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.create_passo(context.church_id, etapa_id, data)


@router.put("/etapas/{etapa_id}/passos/order")
async def reorder_passos(
    etapa_id: str,
    data: ReorderRequest,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.reorder_passos(context.church_id, etapa_id, data.ids)


@router.put("/passos/{passo_id}")
async def update_passo(
    passo_id: str,
    data: PassoUpdate,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    return service.update_passo(context.church_id, passo_id, data)


@router.delete("/passos/{passo_id}", status_code=204)
async def delete_passo(
    passo_id: str,
    context: ChurchContext = Depends(require_permission("journey-config")),
    service: JourneyService = Depends(get_journey_service)
):
    service.delete_passo(context.church_id, passo_id)
    return None
