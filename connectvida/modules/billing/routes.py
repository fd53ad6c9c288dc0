from fastapi import APIRouter, Depends, HTTPException, Request
from connectvida.config import settings
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.billing.schemas import (
    PlanCreate, PlanUpdate, PlanChangeRequestCreate, PlanChangeReview, CheckoutRequest,
    AsaasSubscriptionRequest, PixRequest, CheckoutResponse, PaymentLinkResponse
)
from connectvida.modules.billing.service import BillingService, check_billing_access
from connectvida.modules.billing.checkout import CheckoutService
from connectvida.modules.billing.webhooks import WebhookService
from connectvida.modules.billing.providers import (
    AsaasClient, AbacatePayClient, MercadoPagoClient,
    get_asaas_client, get_abacatepay_client, get_mercadopago_client, verify_abacatepay_signature
)
from connectvida.core.dependencies import (
    ChurchContext, get_user_context, require_church_admin, require_super_admin
)
from supabase import Client
from typing import Optional
import hmac
import json
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])


def get_billing_service(supabase: Client = Depends(get_service_supabase)) -> BillingService:
    return BillingService(supabase)


def get_checkout_service(
    supabase: Client = Depends(get_service_supabase),
    asaas: AsaasClient = Depends(get_asaas_client),
    abacatepay: AbacatePayClient = Depends(get_abacatepay_client),
    mercadopago: MercadoPagoClient = Depends(get_mercadopago_client),
) -> CheckoutService:
    return CheckoutService(supabase, asaas, abacatepay, mercadopago)


def get_webhook_service(supabase: Client = Depends(get_service_supabase)) -> WebhookService:
    return WebhookService(supabase)


# Plans

@router.get("/plans")
async def list_plans(service: BillingService = Depends(get_billing_service)):
    """Public plan catalogue ordered by price"""
    return service.list_plans()


@router.post("/plans", status_code=201)
async def create_plan(
    data: PlanCreate,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.create_plan(data)


@router.put("/plans/{plan_id}")
async def update_plan(
    plan_id: str,
    data: PlanUpdate,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.update_plan(plan_id, data)


@router.delete("/plans/{plan_id}", status_code=204)
async def delete_plan(
    plan_id: str,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    service.delete_plan(plan_id)
    return None


# Plan change requests

@router.post("/plan-requests", status_code=201)
async def create_plan_request(
    data: PlanChangeRequestCreate,
    context: ChurchContext = Depends(require_church_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.create_plan_request(context, data)


@router.get("/plan-requests")
async def list_plan_requests(
    status: Optional[str] = None,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.list_plan_requests(status)


@router.get("/plan-requests/pending-count")
async def count_pending_requests(
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return {"count": service.count_pending_requests()}


@router.post("/plan-requests/{request_id}/approve")
async def approve_plan_request(
    request_id: str,
    data: Optional[PlanChangeReview] = None,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.approve_plan_request(request_id, context.user_id, data.notes if data else None)


@router.post("/plan-requests/{request_id}/reject")
async def reject_plan_request(
    request_id: str,
    data: Optional[PlanChangeReview] = None,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.reject_plan_request(request_id, context.user_id, data.notes if data else None)


# Subscription

@router.post("/churches/{church_id}/activate")
async def activate_subscription(
    church_id: str,
    context: ChurchContext = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service)
):
    return service.activate_subscription(church_id)


@router.get("/churches/{church_id}/payments")
async def payment_history(
    church_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: BillingService = Depends(get_billing_service)
):
    check_billing_access(context, church_id)
    return service.payment_history(church_id)


# Checkouts

@router.post("/checkout/abacatepay", response_model=CheckoutResponse)
async def create_abacatepay_checkout(
    data: CheckoutRequest,
    context: ChurchContext = Depends(get_user_context),
    service: CheckoutService = Depends(get_checkout_service)
):
    check_billing_access(context, data.church_id)
    return service.abacatepay_checkout(data.church_id, data.payer_email)


@router.post("/pix/abacatepay")
async def create_abacatepay_pix(
    data: PixRequest,
    context: ChurchContext = Depends(get_user_context),
    service: CheckoutService = Depends(get_checkout_service)
):
    return service.abacatepay_pix(data)


@router.post("/pix/asaas")
async def create_asaas_pix(
    data: PixRequest,
    context: ChurchContext = Depends(get_user_context),
    service: CheckoutService = Depends(get_checkout_service)
):
    return service.asaas_pix(data)


@router.post("/subscriptions/asaas", response_model=PaymentLinkResponse)
async def create_asaas_subscription(
    data: AsaasSubscriptionRequest,
    context: ChurchContext = Depends(get_user_context),
    service: CheckoutService = Depends(get_checkout_service)
):
    check_billing_access(context, data.church_id)
    return service.asaas_subscription(data.church_id, data.plan_id)


@router.post("/subscriptions/mercadopago", response_model=PaymentLinkResponse)
async def create_mercadopago_subscription(
    data: CheckoutRequest,
    context: ChurchContext = Depends(get_user_context),
    service: CheckoutService = Depends(get_checkout_service)
):
    check_billing_access(context, data.church_id)
    return service.mercadopago_subscription(data.church_id, data.payer_email)


# Webhooks (public)

@router.post("/webhooks/asaas")
async def asaas_webhook(request: Request, service: WebhookService = Depends(get_webhook_service)):
    if settings.asaas_webhook_token:
        received = request.headers.get("asaas-access-token") or ""
        if not hmac.compare_digest(received.encode("utf-8"), settings.asaas_webhook_token.encode("utf-8")):
            raise HTTPException(status_code=401, detail="invalid_token")
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid_json")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="invalid_json")
    logger.info(f"ASAAS webhook received: {payload.get('event')}")
    return service.handle_asaas(payload)


@router.post("/webhooks/abacatepay")
async def abacatepay_webhook(request: Request, service: WebhookService = Depends(get_webhook_service)):
    raw = await request.body()
    signature = request.headers.get("X-Abacatepay-Signature") or request.headers.get("x-signature")
    if not verify_abacatepay_signature(raw, signature, settings.abacatepay_webhook_secret):
        raise HTTPException(status_code=401, detail="invalid_signature")
    try:
        payload = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid_json")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="invalid_json")
    return service.handle_abacatepay(payload)
