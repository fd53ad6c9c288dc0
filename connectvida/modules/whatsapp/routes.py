from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.whatsapp.schemas import MessageCreate, TemplateCreate, ProcessResult
from connectvida.modules.whatsapp.service import WhatsAppService
from connectvida.modules.whatsapp.gateway import WhatsAppGateway, get_whatsapp_gateway
from connectvida.core.dependencies import ChurchContext, get_church_context, require_any_permission
from supabase import Client

router = APIRouter(prefix="/whatsapp", tags=["whatsapp"])

require_whatsapp_admin = require_any_permission("system-settings", "notification-management")


def get_whatsapp_service(
    supabase: Client = Depends(get_service_supabase),
    gateway: WhatsAppGateway = Depends(get_whatsapp_gateway)
) -> WhatsAppService:
    return WhatsAppService(supabase, gateway)


@router.post("/session")
async def start_session(
    context: ChurchContext = Depends(require_whatsapp_admin),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    """Start the church's WhatsApp session; the returned qr_code must be scanned"""
    return {"session": service.start_session(context.church_id)}


@router.get("/session")
async def get_session(
    context: ChurchContext = Depends(get_church_context),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    return {"session": service.get_session(context.church_id)}


@router.post("/messages", status_code=201)
async def enqueue_message(
    data: MessageCreate,
    context: ChurchContext = Depends(require_whatsapp_admin),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    return service.enqueue(context.church_id, data)


@router.post("/process", response_model=ProcessResult)
async def process_pending(
    context: ChurchContext = Depends(require_whatsapp_admin),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    """Send a batch of pending messages"""
    return service.process_pending(context.church_id)


@router.get("/templates")
async def list_templates(
    context: ChurchContext = Depends(get_church_context),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    return service.list_templates(context.church_id)


@router.post("/templates", status_code=201)
async def create_template(
    data: TemplateCreate,
    context: ChurchContext = Depends(require_whatsapp_admin),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    return service.create_template(context.church_id, data)


@router.delete("/templates/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    context: ChurchContext = Depends(require_whatsapp_admin),
    service: WhatsAppService = Depends(get_whatsapp_service)
):
    service.delete_template(context.church_id, template_id)
    return None
