from pydantic import BaseModel, Field
from typing import Dict, Optional, Literal


TransactionType = Literal["Entrada", "Saída"]
TransactionStatus = Literal["Pendente", "Confirmado", "Cancelado"]
BudgetStatus = Literal["Ativo", "Excedido", "Finalizado"]


class TransactionFilters(BaseModel):
    search: Optional[str] = None
    category: Optional[str] = None
    member_id: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class TransactionCreate(BaseModel):
    tipo: TransactionType
    categoria: str
    subcategoria: Optional[str] = None
    valor: float = Field(..., gt=0)
    data_transacao: str
    descricao: Optional[str] = None
    metodo_pagamento: Optional[str] = None
    responsavel: Optional[str] = None
    status: TransactionStatus = "Pendente"
    membro_id: Optional[str] = None
    membro_nome: Optional[str] = None
    numero_documento: Optional[str] = None
    centro_custo: Optional[str] = None


class TransactionUpdate(BaseModel):
    tipo: Optional[TransactionType] = None
    categoria: Optional[str] = None
    subcategoria: Optional[str] = None
    valor: Optional[float] = Field(None, gt=0)
    data_transacao: Optional[str] = None
    descricao: Optional[str] = None
    metodo_pagamento: Optional[str] = None
    responsavel: Optional[str] = None
    status: Optional[TransactionStatus] = None
    membro_id: Optional[str] = None
    membro_nome: Optional[str] = None
    numero_documento: Optional[str] = None
    centro_custo: Optional[str] = None


class BudgetCreate(BaseModel):
    categoria: str
    valor_orcado: float = Field(..., ge=0)
    valor_gasto: float = Field(0, ge=0)
    mes_ano: str


class BudgetUpdate(BaseModel):
    categoria: Optional[str] = None
    valor_orcado: Optional[float] = Field(None, ge=0)
    valor_gasto: Optional[float] = Field(None, ge=0)
    mes_ano: Optional[str] = None
    status: Optional[BudgetStatus] = None


class GoalCreate(BaseModel):
    nome: str
    valor_meta: float = Field(..., gt=0)
    valor_atual: float = 0
    data_inicio: Optional[str] = None
    data_limite: Optional[str] = None
    status: str = "Ativa"


class GoalUpdate(BaseModel):
    nome: Optional[str] = None
    valor_meta: Optional[float] = Field(None, gt=0)
    valor_atual: Optional[float] = None
    data_inicio: Optional[str] = None
    data_limite: Optional[str] = None
    status: Optional[str] = None


class FinancialSummary(BaseModel):
    total_entradas: float
    total_saidas: float
    saldo: float
    por_categoria: Dict[str, float]
