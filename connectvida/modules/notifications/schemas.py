from pydantic import BaseModel, Field
from typing import List, Optional, Literal


BillingTemplate = Literal["BILLING", "PAYMENT_UPDATE"]


class NotificationCreate(BaseModel):
    titulo: str = Field(..., min_length=1)
    descricao: str = Field(..., min_length=1)
    tipo: str = "GERAL"
    user_id: Optional[str] = None  # None = broadcast to the church
    membro_id: Optional[str] = None
    link: Optional[str] = None


class BillingNotification(BaseModel):
    template: BillingTemplate
    titulo: str = ""
    descricao: str = ""
    admin_ids: List[str] = Field(default_factory=list)  # empty = every church admin
    link: Optional[str] = None


class TemplateCreate(BaseModel):
    tipo: str
    titulo: str
    descricao: str


class EmailRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    htmlContent: Optional[str] = None
