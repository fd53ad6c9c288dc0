from supabase import Client
from connectvida.modules.finance.schemas import (
    TransactionFilters, TransactionCreate, TransactionUpdate, BudgetCreate, BudgetUpdate, GoalCreate, GoalUpdate
)
from connectvida.core.sharing import get_owned_record
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)

CONFIRMED = "Confirmado"


def budget_status(valor_orcado: float, valor_gasto: float, current: Optional[str] = None) -> str:
    """Excedido once spending passes the budget; Finalizado is kept as is."""
    if current == "Finalizado":
        return current
    return "Excedido" if (valor_gasto or 0) > (valor_orcado or 0) else "Ativo"


def summarize(transactions: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals of confirmed transactions."""
    entradas = 0.0
    saidas = 0.0
    by_category: Dict[str, float] = {}
    for t in transactions:
        if t.get("status") != CONFIRMED:
            continue
        value = float(t.get("valor") or 0)
        if t.get("tipo") == "Entrada":
            entradas += value
        else:
            saidas += value
        category = t.get("categoria") or "Sem categoria"
        by_category[category] = round(by_category.get(category, 0.0) + value, 2)
    return {
        "total_entradas": round(entradas, 2),
        "total_saidas": round(saidas, 2),
        "saldo": round(entradas - saidas, 2),
        "por_categoria": by_category,
    }


class FinanceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Transactions

    def _period_query(self, church_id: str, start_date: Optional[str], end_date: Optional[str]):
        query = self.supabase.table("transacoes_financeiras").select("*").eq("id_igreja", church_id)
        if start_date:
            query = query.gte("data_transacao", start_date)
        if end_date:
            query = query.lte("data_transacao", end_date)
        return query

    def list_transactions(self, church_id: str, filters: TransactionFilters) -> List[dict]:
        try:
            query = self._period_query(church_id, filters.start_date, filters.end_date)
            if filters.category and filters.category != "all":
                query = query.eq("categoria", filters.category)
            if filters.member_id:
                query = query.eq("membro_id", filters.member_id)
            rows = query.order("data_transacao", desc=True).execute().data or []
            term = (filters.search or "").strip().lower()
            if term:
                fields = ("descricao", "numero_documento", "responsavel")
                rows = [r for r in rows if any(term in (r.get(f) or "").lower() for f in fields)]
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_transaction(self, church_id: str, data: TransactionCreate) -> dict:
        try:
            result = self.supabase.table("transacoes_financeiras").insert({
                **data.model_dump(),
                "id_igreja": church_id,
                "recibo_emitido": False,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create transaction")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_transaction(self, church_id: str, transaction_id: str, data: TransactionUpdate) -> dict:
        get_owned_record(self.supabase, "transacoes_financeiras", transaction_id, church_id, "Transaction")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("transacoes_financeiras")\
                .update(update_data)\
                .eq("id", transaction_id)\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_transaction(self, church_id: str, transaction_id: str) -> None:
        get_owned_record(self.supabase, "transacoes_financeiras", transaction_id, church_id, "Transaction")
        try:
            self.supabase.table("transacoes_financeiras").delete().eq("id", transaction_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def approve_transaction(self, church_id: str, transaction_id: str, approver_id: str) -> dict:
        get_owned_record(self.supabase, "transacoes_financeiras", transaction_id, church_id, "Transaction")
        try:
            result = self.supabase.table("transacoes_financeiras").update({
                "status": CONFIRMED,
                "aprovado_por": approver_id,
                "data_aprovacao": datetime.now(timezone.utc).isoformat(),
            }).eq("id", transaction_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_receipt_issued(self, church_id: str, transaction_id: str) -> dict:
        get_owned_record(self.supabase, "transacoes_financeiras", transaction_id, church_id, "Transaction")
        try:
            result = self.supabase.table("transacoes_financeiras")\
                .update({"recibo_emitido": True})\
                .eq("id", transaction_id)\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def summary(self, church_id: str, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
        try:
            rows = self._period_query(church_id, start_date, end_date).execute().data or []
            return summarize(rows)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Budgets

    def list_budgets(self, church_id: str, mes_ano: Optional[str] = None) -> List[dict]:
        try:
            query = self.supabase.table("orcamentos").select("*").eq("id_igreja", church_id)
            if mes_ano:
                query = query.eq("mes_ano", mes_ano)
            rows = query.order("categoria").execute().data or []
            return [
                {**b, "valor_disponivel": round((b.get("valor_orcado") or 0) - (b.get("valor_gasto") or 0), 2)}
                for b in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_budget(self, church_id: str, data: BudgetCreate) -> dict:
        payload = data.model_dump()
        payload["status"] = budget_status(data.valor_orcado, data.valor_gasto)
        payload["id_igreja"] = church_id
        try:
            result = self.supabase.table("orcamentos").insert(payload).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_budget(self, church_id: str, budget_id: str, data: BudgetUpdate) -> dict:
        budget = get_owned_record(self.supabase, "orcamentos", budget_id, church_id, "Budget")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        merged = {**budget, **update_data}
        update_data["status"] = budget_status(merged.get("valor_orcado"), merged.get("valor_gasto"), merged.get("status"))
        try:
            result = self.supabase.table("orcamentos").update(update_data).eq("id", budget_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_budget(self, church_id: str, budget_id: str) -> None:
        get_owned_record(self.supabase, "orcamentos", budget_id, church_id, "Budget")
        try:
            self.supabase.table("orcamentos").delete().eq("id", budget_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Goals

    def list_goals(self, church_id: str) -> List[dict]:
        try:
            result = self.supabase.table("metas_financeiras")\
                .select("*")\
                .eq("id_igreja", church_id)\
                .order("data_limite")\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_goal(self, church_id: str, data: GoalCreate) -> dict:
        try:
            result = self.supabase.table("metas_financeiras").insert({
                **data.model_dump(),
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_goal(self, church_id: str, goal_id: str, data: GoalUpdate) -> dict:
        get_owned_record(self.supabase, "metas_financeiras", goal_id, church_id, "Goal")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("metas_financeiras").update(update_data).eq("id", goal_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_goal(self, church_id: str, goal_id: str) -> None:
        get_owned_record(self.supabase, "metas_financeiras", goal_id, church_id, "Goal")
        try:
            self.supabase.table("metas_financeiras").delete().eq("id", goal_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
