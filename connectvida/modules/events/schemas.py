from pydantic import BaseModel
from typing import List, Optional


class EventCreate(BaseModel):
    nome: str
    data_hora: str
    local: Optional[str] = None
    descricao: Optional[str] = None
    tipo: Optional[str] = "Outro"
    status: Optional[str] = "Planejado"
    capacidade_maxima: Optional[int] = None
    inscricoes_abertas: bool = True
    valor_inscricao: Optional[float] = None
    link_externo: Optional[str] = None
    imagem_capa: Optional[str] = None
    compartilhar_com_filhas: bool = False


class EventUpdate(BaseModel):
    nome: Optional[str] = None
    data_hora: Optional[str] = None
    local: Optional[str] = None
    descricao: Optional[str] = None
    tipo: Optional[str] = None
    status: Optional[str] = None
    capacidade_maxima: Optional[int] = None
    inscricoes_abertas: Optional[bool] = None
    valor_inscricao: Optional[float] = None
    link_externo: Optional[str] = None
    imagem_capa: Optional[str] = None
    compartilhar_com_filhas: Optional[bool] = None


class ProgramItem(BaseModel):
    horario: str
    atividade: str
    responsavel: Optional[str] = None


class EventProgram(BaseModel):
    items: List[ProgramItem]
