"""
Checkout flows: hosted checkout sessions, PIX QR codes and recurring subscriptions.
"""

from supabase import Client
from connectvida.config import settings
from connectvida.core.http_client import ProviderConfigError, ProviderError, raise_provider_http_error
from connectvida.modules.billing.providers import AsaasClient, AbacatePayClient, MercadoPagoClient
from connectvida.modules.billing.schemas import PixRequest
from connectvida.modules.billing.service import get_billing_church
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import date, timedelta
from typing import Any, Dict
import logging

logger = logging.getLogger(__name__)

PIX_DESCRIPTION_LIMIT = 140
SUBSCRIPTION_DUE_DAYS = 5


class CheckoutService:
    def __init__(self, supabase: Client, asaas: AsaasClient, abacatepay: AbacatePayClient,
                 mercadopago: MercadoPagoClient):
        self.supabase = supabase
        self.asaas = asaas
        self.abacatepay = abacatepay
        self.mercadopago = mercadopago

    def _store_payment_link(self, church_id: str, link: str, external_id: Any) -> None:
        self.supabase.table("igrejas").update({
            "link_pagamento_assinatura": link,
            "subscription_id_ext": external_id,
        }).eq("id", church_id).execute()

    def abacatepay_checkout(self, church_id: str, payer_email: str) -> Dict[str, str]:
        """Monthly checkout session for the church's subscription value."""
        church = get_billing_church(self.supabase, church_id)
        public_url = settings.app_public_url.rstrip("/")
        payload = {
            "amount": church.get("valor_mensal_assinatura"),
            "currency": "BRL",
            "description": f"Assinatura Connect Vida - {church['nome']}",
            "customer_email": payer_email,
            "success_url": f"{public_url}/payment-success?church_id={church['id']}",
            "cancel_url": f"{public_url}/payment-cancel",
            "external_reference": church["id"],
            "recurrence": {"interval": 1, "interval_type": "month"},
        }
        try:
            response = self.abacatepay.create_checkout_session(payload)
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)
        checkout_url = response.get("checkout_url") or response.get("url") or response.get("init_point")
        if not checkout_url:
            raise HTTPException(status_code=502, detail="Resposta da Abacate PAY não contém o link de checkout.")
        self._store_payment_link(church["id"], checkout_url, response.get("id") or response.get("session_id"))
        logger.info(f"Abacate PAY checkout created for church {church_id}")
        return {"checkoutUrl": checkout_url}

    def abacatepay_pix(self, data: PixRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"amount": round(data.amount * 100)}
        if data.expiresIn:
            payload["expiresIn"] = data.expiresIn
        if data.description:
            payload["description"] = data.description[:PIX_DESCRIPTION_LIMIT]
        if data.customer and data.customer.is_complete():
            payload["customer"] = data.customer.model_dump()
        if data.metadata:
            payload["metadata"] = data.metadata
        try:
            return self.abacatepay.create_pix_qr_code(payload)
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)

    def asaas_pix(self, data: PixRequest) -> Dict[str, Any]:
        """PIX charge through ASAAS, answered in the Abacate PAY response shape."""
        if not data.customer or not all([data.customer.name, data.customer.email,
                                         data.customer.cellphone, data.customer.taxId]):
            raise HTTPException(
                status_code=400,
                detail="Customer data is required for ASAAS (name, email, cellphone, taxId)"
            )
        value = round(data.amount, 2)
        description = (data.description or "")[:PIX_DESCRIPTION_LIMIT]
        customer = data.customer
        try:
            customer_id = self.asaas.find_customer_by_email(customer.email)
            if not customer_id:
                customer_id = self.asaas.create_customer(
                    customer.name, customer.email, cpf_cnpj=customer.taxId, mobile_phone=customer.cellphone
                )
            payment = self.asaas.create_pix_payment(customer_id, value, description)
            qr_code = self.asaas.get_pix_qr_code(payment["id"])
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)
        return {
            "data": {
                "id": payment["id"],
                "amount": value,
                "status": payment.get("status"),
                "brCode": qr_code.get("payload"),
                "brCodeBase64": qr_code.get("encodedImage"),
                "createdAt": payment.get("dateCreated"),
                "updatedAt": payment.get("dateUpdated"),
                "expiresAt": payment.get("dueDate"),
            },
            "error": None,
        }

    def asaas_subscription(self, church_id: str, plan_id: str) -> Dict[str, Any]:
        church = get_billing_church(self.supabase, church_id)
        plan = maybe_row(
            self.supabase.table("planos_assinatura")
            .select("id, nome, preco_mensal")
            .eq("id", plan_id)
            .maybe_single()
            .execute()
        )
        if not plan:
            raise HTTPException(status_code=404, detail="Plan not found")
        try:
            customer_id = church.get("asaas_customer_id")
            if not customer_id:
                customer_id = self.asaas.create_customer(
                    church["nome"], church.get("email"), cpf_cnpj=church.get("cnpj"),
                    external_reference=church["id"]
                )
                self.supabase.table("igrejas").update({"asaas_customer_id": customer_id}).eq("id", church_id).execute()
            subscription = self.asaas.create_subscription({
                "customer": customer_id,
                "billingType": "UNDEFINED",
                "nextDueDate": (date.today() + timedelta(days=SUBSCRIPTION_DUE_DAYS)).isoformat(),
                "value": plan["preco_mensal"],
                "cycle": "MONTHLY",
                "description": f"Assinatura Plano {plan['nome']} - Connect Vida",
                "externalReference": church_id,
            })
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)
        logger.info(f"ASAAS subscription created for church {church_id}")
        return {"paymentLink": subscription.get("paymentLink")}

    def mercadopago_subscription(self, church_id: str, payer_email: str) -> Dict[str, Any]:
        church = get_billing_church(self.supabase, church_id)
        payload = {
            "reason": f"Assinatura Connect Vida - {church['nome']}",
            "auto_recurring": {
                "frequency": 1,
                "frequency_type": "months",
                "transaction_amount": church.get("valor_mensal_assinatura"),
                "currency_id": "BRL",
            },
            "payer_email": payer_email,
            "back_url": settings.app_public_url,
            "external_reference": church["id"],
        }
        try:
            response = self.mercadopago.create_preapproval(payload)
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)
        payment_link = response.get("init_point")
        self._store_payment_link(church["id"], payment_link, response.get("id"))
        return {"paymentLink": payment_link}
