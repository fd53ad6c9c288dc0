from pydantic import BaseModel, Field
from typing import Optional, Literal


VolunteerRole = Literal["voluntario", "lider"]
ConfirmationStatus = Literal["Pendente", "Confirmado", "Recusado"]
DemandStatus = Literal["pendente", "em_andamento", "concluido"]


class MinistryCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    lider_id: Optional[str] = None


class MinistryUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    lider_id: Optional[str] = None


class MinistryRoleCreate(BaseModel):
    nome: str = Field(..., min_length=1)
    descricao: Optional[str] = None


class VolunteerAdd(BaseModel):
    membro_id: str
    papel: VolunteerRole = "voluntario"


class ScheduleCreate(BaseModel):
    data_servico: str
    observacoes: Optional[str] = None


class ScheduleVolunteerAdd(BaseModel):
    membro_id: str


class ConfirmationUpdate(BaseModel):
    status_confirmacao: ConfirmationStatus


class DemandCreate(BaseModel):
    titulo: str
    descricao: Optional[str] = None
    culto_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    prazo: Optional[str] = None
    status: DemandStatus = "pendente"
    prioridade: Optional[str] = None


class DemandUpdate(BaseModel):
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    culto_id: Optional[str] = None
    responsavel_id: Optional[str] = None
    prazo: Optional[str] = None
    prioridade: Optional[str] = None


class DemandStatusUpdate(BaseModel):
    status: str
