from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.finance.schemas import (
    TransactionFilters, TransactionCreate, TransactionUpdate, BudgetCreate, BudgetUpdate,
    GoalCreate, GoalUpdate, FinancialSummary
)
from connectvida.modules.finance.service import FinanceService
from connectvida.core.dependencies import ChurchContext, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/finance", tags=["finance"])

require_financial_panel = require_permission("financial-panel")


def get_finance_service(supabase: Client = Depends(get_service_supabase)) -> FinanceService:
    return FinanceService(supabase)


@router.get("/transactions")
async def list_transactions(
    search: Optional[str] = None,
    category: Optional[str] = None,
    member_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    filters = TransactionFilters(
        search=search, category=category, member_id=member_id,
        start_date=start_date, end_date=end_date,
    )
    return service.list_transactions(context.church_id, filters)


@router.post("/transactions", status_code=201)
async def create_transaction(
    data: TransactionCreate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.create_transaction(context.church_id, data)


@router.put("/transactions/{transaction_id}")
async def update_transaction(
    transaction_id: str,
    data: TransactionUpdate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.update_transaction(context.church_id, transaction_id, data)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: str,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    service.delete_transaction(context.church_id, transaction_id)
    return None


@router.post("/transactions/{transaction_id}/approve")
async def approve_transaction(
    transaction_id: str,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.approve_transaction(context.church_id, transaction_id, context.user_id)


@router.post("/transactions/{transaction_id}/receipt")
async def mark_receipt_issued(
    transaction_id: str,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.mark_receipt_issued(context.church_id, transaction_id)


@router.get("/summary", response_model=FinancialSummary)
async def get_summary(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    """Totals of confirmed transactions in the period"""
    return service.summary(context.church_id, start_date, end_date)


@router.get("/budgets")
async def list_budgets(
    mes_ano: Optional[str] = None,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.list_budgets(context.church_id, mes_ano)


@router.post("/budgets", status_code=201)
async def create_budget(
    data: BudgetCreate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.create_budget(context.church_id, data)


@router.put("/budgets/{budget_id}")
async def update_budget(
    budget_id: str,
    data: BudgetUpdate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.update_budget(context.church_id, budget_id, data)


@router.delete("/budgets/{budget_id}", status_code=204)
async def delete_budget(
    budget_id: str,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    service.delete_budget(context.church_id, budget_id)
    return None


@router.get("/goals")
async def list_goals(
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.list_goals(context.church_id)


@router.post("/goals", status_code=201)
async def create_goal(
    data: GoalCreate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.create_goal(context.church_id, data)


@router.put("/goals/{goal_id}")
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    return service.update_goal(context.church_id, goal_id, data)


@router.delete("/goals/{goal_id}", status_code=204)
async def delete_goal(
    goal_id: str,
    context: ChurchContext = Depends(require_financial_panel),
    service: FinanceService = Depends(get_finance_service)
):
    service.delete_goal(context.church_id, goal_id)
    return None
