from pydantic import BaseModel
from typing import Optional, List, Dict


class PlanDetails(BaseModel):
    monthly_value: Optional[float] = None
    member_limit: Optional[int] = None


class ChurchRegister(BaseModel):
    admin_name: Optional[str] = None
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    church_name: Optional[str] = None
    cnpj: Optional[str] = None
    full_address: Optional[str] = None
    telefone_contato: Optional[str] = None
    selected_plan: Optional[str] = None
    plan_details: Optional[PlanDetails] = None


class ChurchRegisterResponse(BaseModel):
    churchId: str


class ChurchPublic(BaseModel):
    id: str
    nome: str


class SharingSettings(BaseModel):
    compartilha_escolas_da_mae: Optional[bool] = None
    compartilha_eventos_da_mae: Optional[bool] = None
    compartilha_jornada_da_mae: Optional[bool] = None
    compartilha_devocionais_da_mae: Optional[bool] = None


class ParentInfo(BaseModel):
    isChild: bool
    motherId: Optional[str] = None


class ChildChurchMetrics(BaseModel):
    members: int = 0
    leaders: int = 0
    ministries: int = 0


class ChildChurchResponse(SharingSettings):
    id: str
    nome: str
    nome_responsavel: Optional[str] = None
    email: Optional[str] = None
    telefone_contato: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None
    metrics: ChildChurchMetrics


class ChildChurchCreate(BaseModel):
    nome: Optional[str] = None
    nome_responsavel: Optional[str] = None
    email: Optional[str] = None
    panel_password: Optional[str] = None
    telefone_contato: Optional[str] = None
    endereco: Optional[str] = None
    cnpj: Optional[str] = None
    # Super admins pick the mother church explicitly; others default to their own church
    mother_church_id: Optional[str] = None


class ChildChurchCreateResponse(BaseModel):
    churchId: str
    pastorId: str


class ChurchUpdate(BaseModel):
    nome: Optional[str] = None
    nome_responsavel: Optional[str] = None
    email: Optional[str] = None
    telefone_contato: Optional[str] = None
    endereco: Optional[str] = None
    cnpj: Optional[str] = None
    panel_password: Optional[str] = None


class ResetPastorAccessResponse(BaseModel):
    ok: bool
    mode: str
    userId: str


class ChurchDeleteResponse(BaseModel):
    ok: bool
    counts: Dict[str, int]
