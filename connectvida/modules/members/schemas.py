from pydantic import BaseModel
from typing import Optional, List, Literal


MemberStatus = Literal["ativo", "pendente", "inativo"]


class MemberFilters(BaseModel):
    search: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    ministry: Optional[str] = None
    birthday_month: bool = False
    wedding_month: bool = False


class MemberUpdate(BaseModel):
    funcao: Optional[str] = None
    status: Optional[MemberStatus] = None
    extra_permissoes: Optional[List[str]] = None


class PersonalInfoUpdate(BaseModel):
    telefone: Optional[str] = None
    endereco: Optional[str] = None
    data_nascimento: Optional[str] = None
    estado_civil: Optional[str] = None
    profissao: Optional[str] = None
    conjuge_id: Optional[str] = None
    data_casamento: Optional[str] = None
    pais_cristaos: Optional[bool] = None
    tempo_igreja: Optional[str] = None
    batizado: Optional[bool] = None
    data_batismo: Optional[str] = None
    participa_ministerio: Optional[bool] = None
    ministerio_anterior: Optional[str] = None
    experiencia_anterior: Optional[str] = None
    data_conversao: Optional[str] = None
    dias_disponiveis: Optional[List[str]] = None
    horarios_disponiveis: Optional[List[str]] = None


class JourneySummary(BaseModel):
    completedSteps: int
    totalSteps: int
    percentage: float
    completedStages: int
