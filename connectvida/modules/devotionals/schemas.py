from pydantic import BaseModel, Field
from typing import List, Optional, Literal


DevotionalCategory = Literal["Diário", "Semanal", "Especial", "Temático"]
DevotionalStatus = Literal["Rascunho", "Publicado", "Arquivado", "Pendente"]


class DevotionalFilters(BaseModel):
    status: Optional[str] = None
    author_id: Optional[str] = None
    category: Optional[str] = None
    tag: Optional[str] = None
    search: Optional[str] = None


class DevotionalCreate(BaseModel):
    titulo: str
    conteudo: str
    versiculo_referencia: Optional[str] = None
    versiculo_texto: Optional[str] = None
    categoria: DevotionalCategory = "Diário"
    tags: List[str] = Field(default_factory=list)
    status: DevotionalStatus = "Rascunho"
    imagem_capa: Optional[str] = None
    featured: bool = False
    data_publicacao: Optional[str] = None
    compartilhar_com_filhas: bool = False


class DevotionalUpdate(BaseModel):
    titulo: Optional[str] = None
    conteudo: Optional[str] = None
    versiculo_referencia: Optional[str] = None
    versiculo_texto: Optional[str] = None
    categoria: Optional[DevotionalCategory] = None
    tags: Optional[List[str]] = None
    status: Optional[DevotionalStatus] = None
    imagem_capa: Optional[str] = None
    featured: Optional[bool] = None
    data_publicacao: Optional[str] = None
    compartilhar_com_filhas: Optional[bool] = None


class CommentCreate(BaseModel):
    conteudo: str = Field(..., min_length=1)
