from pydantic import BaseModel
from typing import Optional, Literal


SchoolStatus = Literal["aberta", "fechada", "concluida"]
LessonType = Literal["texto", "video", "quiz", "presencial"]


class SchoolCreate(BaseModel):
    nome: str
    descricao: Optional[str] = None
    professor_id: Optional[str] = None
    status: SchoolStatus = "aberta"
    compartilhar_com_filhas: bool = False
    data_inicio: Optional[str] = None
    data_fim: Optional[str] = None


class SchoolUpdate(BaseModel):
    nome: Optional[str] = None
    descricao: Optional[str] = None
    professor_id: Optional[str] = None
    status: Optional[SchoolStatus] = None
    compartilhar_com_filhas: Optional[bool] = None
    data_inicio: Optional[str] = None
    data_fim: Optional[str] = None


class LessonCreate(BaseModel):
    titulo: str
    descricao: Optional[str] = None
    tipo_aula: LessonType = "texto"
    conteudo_texto: Optional[str] = None
    youtube_url: Optional[str] = None
    ordem: Optional[int] = None
