from fastapi import APIRouter, Depends, HTTPException
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.notifications.schemas import NotificationCreate, BillingNotification, TemplateCreate, EmailRequest
from connectvida.modules.notifications.service import NotificationService, send_email
from connectvida.modules.notifications.providers import ResendClient, get_resend_client
from connectvida.core.dependencies import (
    ChurchContext, get_user_context, get_church_context, require_permission, require_super_admin
)
from supabase import Client

router = APIRouter(prefix="/notifications", tags=["notifications"])


def get_notification_service(supabase: Client = Depends(get_service_supabase)) -> NotificationService:
    return NotificationService(supabase)


@router.get("")
async def list_my_notifications(
    context: ChurchContext = Depends(get_user_context),
    service: NotificationService = Depends(get_notification_service)
):
    return service.list_mine(context.church_id, context.user_id)


@router.post("/read-all")
async def mark_all_read(
    context: ChurchContext = Depends(get_user_context),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_all_read(context)


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: NotificationService = Depends(get_notification_service)
):
    return service.mark_read(context, notification_id)


@router.post("", status_code=201)
async def create_notification(
    data: NotificationCreate,
    context: ChurchContext = Depends(require_permission("notification-management")),
    service: NotificationService = Depends(get_notification_service)
):
    """In-app notification for a member, or a broadcast when user_id is omitted"""
    return service.create(context.church_id, data)


@router.post("/billing", status_code=201)
async def send_billing_notification(
    data: BillingNotification,
    context: ChurchContext = Depends(require_super_admin),
    service: NotificationService = Depends(get_notification_service)
):
    return service.send_billing_notification(data)


@router.get("/templates")
async def list_templates(
    context: ChurchContext = Depends(get_church_context),
    service: NotificationService = Depends(get_notification_service)
):
    return service.list_templates(context.church_id)


@router.post("/templates", status_code=201)
async def create_template(
    data: TemplateCreate,
    context: ChurchContext = Depends(require_permission("notification-management")),
    service: NotificationService = Depends(get_notification_service)
):
    return service.create_template(context.church_id, data)


@router.post("/email")
async def send_email_notification(
    data: EmailRequest,
    context: ChurchContext = Depends(get_user_context),
    client: ResendClient = Depends(get_resend_client)
):
    """Send an HTML email through Resend"""
    if not context.has_permission("notification-management"):
        raise HTTPException(status_code=403, detail="Insufficient permissions. Required: notification-management")
    return send_email(client, data.to, data.subject, data.htmlContent)
