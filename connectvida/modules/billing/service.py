from supabase import Client
from connectvida.modules.billing.schemas import PlanCreate, PlanUpdate, PlanChangeRequestCreate
from connectvida.config.permissions_config import CHURCH_ADMIN_ROLES
from connectvida.core.dependencies import ChurchContext
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from calendar import monthrange
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

CHURCH_BILLING_COLUMNS = (
    "id, nome, email, cnpj, plano_id, limite_membros, valor_mensal_assinatura, status, "
    "ultimo_pagamento_status, data_proximo_pagamento, historico_pagamentos, "
    "link_pagamento_assinatura, subscription_id_ext, asaas_customer_id"
)


def add_months(day: date, months: int) -> date:
    """Same day `months` later, clamped to the last day of the target month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def check_billing_access(context: ChurchContext, church_id: str) -> None:
    """Super admin, or admin/pastor of the church itself."""
    if context.is_super_admin:
        return
    if context.church_id == church_id and context.role in CHURCH_ADMIN_ROLES:
        return
    raise HTTPException(status_code=403, detail="Forbidden")


def get_billing_church(supabase: Client, church_id: str) -> dict:
    church = maybe_row(
        supabase.table("igrejas")
        .select(CHURCH_BILLING_COLUMNS)
        .eq("id", church_id)
        .maybe_single()
        .execute()
    )
    if not church:
        raise HTTPException(status_code=404, detail="Igreja não encontrada.")
    return church


class BillingService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Plans

    def list_plans(self) -> List[dict]:
        try:
            result = self.supabase.table("planos_assinatura").select("*").order("preco_mensal").execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_plan(self, plan_id: str) -> dict:
        plan = maybe_row(
            self.supabase.table("planos_assinatura").select("*").eq("id", plan_id).maybe_single().execute()
        )
        if not plan:
            raise HTTPException(status_code=404, detail="Plan not found")
        return plan

    def create_plan(self, data: PlanCreate) -> dict:
        try:
            result = self.supabase.table("planos_assinatura").insert(data.model_dump()).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_plan(self, plan_id: str, data: PlanUpdate) -> dict:
        self._get_plan(plan_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("planos_assinatura").update(update_data).eq("id", plan_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_plan(self, plan_id: str) -> None:
        self._get_plan(plan_id)
        try:
            self.supabase.table("planos_assinatura").delete().eq("id", plan_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Plan change requests

    def create_plan_request(self, context: ChurchContext, data: PlanChangeRequestCreate) -> dict:
        """A church asks the super admins to move it to another plan."""
        church = get_billing_church(self.supabase, context.church_id)
        self._get_plan(data.requested_plan_id)
        if church.get("plano_id") == data.requested_plan_id:
            raise HTTPException(status_code=400, detail="A igreja já está neste plano")
        pending = self.supabase.table("plan_change_requests")\
            .select("id")\
            .eq("church_id", context.church_id)\
            .eq("status", "pending")\
            .execute()
        if pending.data:
            raise HTTPException(status_code=409, detail="Já existe uma solicitação pendente para esta igreja")
        try:
            result = self.supabase.table("plan_change_requests").insert({
                "church_id": context.church_id,
                "current_plan_id": church.get("plano_id"),
                "requested_plan_id": data.requested_plan_id,
                "requested_by": context.user_id,
                "status": "pending",
                "notes": data.notes,
            }).execute()
            logger.info(f"Plan change requested for church {context.church_id}")
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_plan_requests(self, status: Optional[str] = None) -> List[dict]:
        try:
            query = self.supabase.table("plan_change_requests").select("*")
            if status:
                query = query.eq("status", status)
            requests = query.order("created_at", desc=True).execute().data or []
            church_ids = list({r["church_id"] for r in requests})
            plan_ids = list({
                p for r in requests for p in (r.get("current_plan_id"), r.get("requested_plan_id")) if p
            })
            churches: Dict[str, str] = {}
            plans: Dict[str, str] = {}
            if church_ids:
                rows = self.supabase.table("igrejas").select("id, nome").in_("id", church_ids).execute()
                churches = {c["id"]: c["nome"] for c in (rows.data or [])}
            if plan_ids:
                rows = self.supabase.table("planos_assinatura").select("id, nome").in_("id", plan_ids).execute()
                plans = {p["id"]: p["nome"] for p in (rows.data or [])}
            return [
                {
                    **r,
                    "church_nome": churches.get(r["church_id"]),
                    "current_plan_nome": plans.get(r.get("current_plan_id")),
                    "requested_plan_nome": plans.get(r.get("requested_plan_id")),
                }
                for r in requests
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def count_pending_requests(self) -> int:
        try:
            result = self.supabase.table("plan_change_requests")\
                .select("id", count="exact")\
                .eq("status", "pending")\
                .execute()
            if result.count is not None:
                return result.count
            return len(result.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_pending_request(self, request_id: str) -> dict:
        request = maybe_row(
            self.supabase.table("plan_change_requests").select("*").eq("id", request_id).maybe_single().execute()
        )
        if not request:
            raise HTTPException(status_code=404, detail="Request not found")
        if request.get("status") != "pending":
            raise HTTPException(status_code=409, detail="Solicitação já foi analisada")
        return request

    def _review(self, request_id: str, status: str, reviewer_id: str, notes: Optional[str]) -> dict:
        update_data: Dict[str, Any] = {
            "status": status,
            "reviewed_by": reviewer_id,
            "reviewed_at": datetime.now(timezone.utc).isoformat(),
        }
        if notes is not None:
            update_data["notes"] = notes
        result = self.supabase.table("plan_change_requests").update(update_data).eq("id", request_id).execute()
        return result.data[0]

    def approve_plan_request(self, request_id: str, reviewer_id: str, notes: Optional[str] = None) -> dict:
        """Copy the requested plan onto the church and close the request."""
        request = self._get_pending_request(request_id)
        plan = self._get_plan(request["requested_plan_id"])
        try:
            self.supabase.table("igrejas").update({
                "plano_id": plan["id"],
                "limite_membros": plan.get("limite_membros"),
                "valor_mensal_assinatura": plan.get("preco_mensal"),
            }).eq("id", request["church_id"]).execute()
            reviewed = self._review(request_id, "approved", reviewer_id, notes)
            logger.info(f"Plan change {request_id} approved: church {request['church_id']} -> plan {plan['id']}")
            return reviewed
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reject_plan_request(self, request_id: str, reviewer_id: str, notes: Optional[str] = None) -> dict:
        self._get_pending_request(request_id)
        try:
            return self._review(request_id, "rejected", reviewer_id, notes)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Subscription state

    def activate_subscription(self, church_id: str) -> Dict[str, Any]:
        get_billing_church(self.supabase, church_id)
        try:
            result = self.supabase.table("igrejas").update({
                "status": "active",
                "ultimo_pagamento_status": "Confirmado",
                "data_proximo_pagamento": add_months(date.today(), 1).isoformat(),
            }).eq("id", church_id).execute()
            logger.info(f"Subscription activated for church {church_id}")
            return {"message": "Assinatura ativada com sucesso!", "church": result.data[0]}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def payment_history(self, church_id: str) -> Dict[str, Any]:
        church = get_billing_church(self.supabase, church_id)
        return {
            "status": church.get("status"),
            "ultimo_pagamento_status": church.get("ultimo_pagamento_status"),
            "data_proximo_pagamento": church.get("data_proximo_pagamento"),
            "valor_mensal_assinatura": church.get("valor_mensal_assinatura"),
            "historico_pagamentos": church.get("historico_pagamentos") or [],
        }
