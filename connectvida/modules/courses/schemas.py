from pydantic import BaseModel, Field
from typing import Optional, Literal


CourseType = Literal["Presencial", "Online", "Híbrido"]
CourseCategory = Literal["Discipulado", "Liderança", "Teologia", "Ministério", "Evangelismo"]
CourseLevel = Literal["Básico", "Intermediário", "Avançado"]
CourseStatus = Literal["Rascunho", "Ativo", "Pausado", "Finalizado"]
LessonType = Literal["Video", "Texto", "PDF", "Quiz"]


class CourseCreate(BaseModel):
    nome: str = Field(..., min_length=1)
    descricao: Optional[str] = None
    tipo: CourseType = "Online"
    categoria: CourseCategory = "Discipulado"
    nivel: CourseLevel = "Básico"
    professor_id: Optional[str] = None
    duracao_horas: int = Field(0, ge=0)
    data_inicio: Optional[str] = None
    data_fim: Optional[str] = None
    certificado_disponivel: bool = True
    nota_minima_aprovacao: int = Field(70, ge=0, le=100)
    valor: float = Field(0, ge=0)


class CourseUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=1)
    descricao: Optional[str] = None
    tipo: Optional[CourseType] = None
    categoria: Optional[CourseCategory] = None
    nivel: Optional[CourseLevel] = None
    professor_id: Optional[str] = None
    duracao_horas: Optional[int] = Field(None, ge=0)
    status: Optional[CourseStatus] = None
    data_inicio: Optional[str] = None
    data_fim: Optional[str] = None
    certificado_disponivel: Optional[bool] = None
    nota_minima_aprovacao: Optional[int] = Field(None, ge=0, le=100)
    valor: Optional[float] = Field(None, ge=0)


class ModuleCreate(BaseModel):
    titulo: str = Field(..., min_length=1)
    descricao: Optional[str] = None
    ordem: Optional[int] = None


class CourseLessonCreate(BaseModel):
    titulo: str = Field(..., min_length=1)
    descricao: Optional[str] = None
    tipo: LessonType = "Video"
    conteudo: Optional[str] = None
    duracao_minutos: Optional[int] = Field(None, ge=0)
    obrigatoria: bool = True
    ordem: Optional[int] = None
