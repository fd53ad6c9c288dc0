"""
Payment provider webhooks. Both are public endpoints; authenticity is checked
with the shared ASAAS token or the Abacate PAY HMAC signature.
"""

from supabase import Client
from connectvida.modules.billing.service import add_months
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import date
from typing import Any, Dict, Optional
import uuid
import logging

logger = logging.getLogger(__name__)

ABACATEPAY_STATUS_MAP = {
    "paid": "Pago",
    "payment_succeeded": "Pago",
    "pending": "Pendente",
    "payment_pending": "Pendente",
    "failed": "Atrasado",
    "cancelled": "Cancelado",
    "canceled": "Cancelado",
}


def map_abacatepay_status(payload: Dict[str, Any]) -> str:
    raw = (payload.get("status") or payload.get("event_type") or "").lower()
    return ABACATEPAY_STATUS_MAP.get(raw, "Pendente")


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class WebhookService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def handle_asaas(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Record a confirmed ASAAS payment on the church referenced by externalReference."""
        if payload.get("event") != "PAYMENT_CONFIRMED":
            return {"message": "Evento não processado."}
        payment = payload.get("payment") or {}
        church_id = payment.get("externalReference")
        if not church_id:
            raise HTTPException(
                status_code=400,
                detail="ID da Igreja (externalReference) não encontrado no webhook."
            )
        church = maybe_row(
            self.supabase.table("igrejas")
            .select("id, historico_pagamentos")
            .eq("id", church_id)
            .maybe_single()
            .execute()
        )
        if not church:
            raise HTTPException(status_code=400, detail="Igreja não encontrada.")

        paid_on = _parse_date(payment.get("paymentDate")) or date.today()
        record = {
            "id": str(uuid.uuid4()),
            "data": paid_on.isoformat(),
            "valor": payment.get("value"),
            "status": "Pago",
            "metodo": f"ASAAS ({payment.get('billingType')})",
            "referencia": payment.get("id"),
            "registrado_por": "Webhook ASAAS",
        }
        history = list(church.get("historico_pagamentos") or []) + [record]
        history.sort(key=lambda r: r.get("data") or "", reverse=True)
        next_due = _parse_date(payment.get("nextDueDate")) or add_months(paid_on, 1)

        try:
            self.supabase.table("igrejas").update({
                "status": "active",
                "ultimo_pagamento_status": "Pago",
                "data_proximo_pagamento": next_due.isoformat(),
                "historico_pagamentos": history,
                "subscription_id_ext": payment.get("subscription"),
            }).eq("id", church_id).execute()
        except Exception as e:
            logger.error(f"ASAAS webhook failed to update church {church_id}: {e}")
            raise HTTPException(status_code=400, detail=str(e))
        logger.info(f"Church {church_id} updated from ASAAS webhook")
        return {"success": True}

    def handle_abacatepay(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        church_id = payload.get("external_reference")
        if not church_id:
            raise HTTPException(status_code=400, detail="missing_external_reference")
        status = map_abacatepay_status(payload)
        try:
            self.supabase.table("igrejas").update({
                "ultimo_pagamento_status": status,
                "data_proximo_pagamento": payload.get("next_billing_date"),
            }).eq("id", church_id).execute()
            self.supabase.table("eventos_aplicacao").insert({
                "user_id": None,
                "church_id": church_id,
                "event_name": "abacatepay_webhook",
                "event_details": payload,
            }).execute()
        except Exception as e:
            logger.error(f"Abacate PAY webhook failed for church {church_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Church {church_id} payment status -> {status} (Abacate PAY)")
        return {"received": True, "status": status}
