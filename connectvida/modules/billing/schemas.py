from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, Optional, Literal


RequestStatus = Literal["pending", "approved", "rejected"]


class PlanCreate(BaseModel):
    nome: str
    preco_mensal: float = Field(..., ge=0)
    limite_membros: Optional[int] = None
    limite_quizes_por_etapa: Optional[int] = None
    limite_armazenamento_mb: Optional[int] = None
    descricao: Optional[str] = None


class PlanUpdate(BaseModel):
    nome: Optional[str] = None
    preco_mensal: Optional[float] = Field(None, ge=0)
    limite_membros: Optional[int] = None
    limite_quizes_por_etapa: Optional[int] = None
    limite_armazenamento_mb: Optional[int] = None
    descricao: Optional[str] = None


class PlanChangeRequestCreate(BaseModel):
    requested_plan_id: str
    notes: Optional[str] = None


class PlanChangeReview(BaseModel):
    notes: Optional[str] = None


class CheckoutRequest(BaseModel):
    church_id: str
    payer_email: EmailStr


class AsaasSubscriptionRequest(BaseModel):
    church_id: str
    plan_id: str


class PixCustomer(BaseModel):
    name: Optional[str] = None
    cellphone: Optional[str] = None
    email: Optional[str] = None
    taxId: Optional[str] = None

    def is_complete(self) -> bool:
        return all([self.name, self.cellphone, self.email, self.taxId])


class PixRequest(BaseModel):
    amount: float = Field(..., gt=0)
    description: Optional[str] = None
    expiresIn: Optional[int] = None
    customer: Optional[PixCustomer] = None
    metadata: Optional[Dict[str, Any]] = None


class CheckoutResponse(BaseModel):
    checkoutUrl: str


class PaymentLinkResponse(BaseModel):
    paymentLink: Optional[str] = None
