from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    to_number: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


class TemplateCreate(BaseModel):
    nome: str
    conteudo: str


class ProcessResult(BaseModel):
    processed: int
    failed: int
