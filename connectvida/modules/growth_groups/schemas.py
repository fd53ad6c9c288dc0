from pydantic import BaseModel, Field
from typing import Optional, Literal


Weekday = Literal["Domingo", "Segunda", "Terça", "Quarta", "Quinta", "Sexta", "Sábado"]


class GroupCreate(BaseModel):
    nome: str = Field(..., min_length=1)
    descricao: Optional[str] = None
    meeting_day: Optional[Weekday] = None
    meeting_time: Optional[str] = None
    meeting_location: Optional[str] = None
    contact_phone: Optional[str] = None


class GroupUpdate(BaseModel):
    nome: Optional[str] = Field(None, min_length=1)
    descricao: Optional[str] = None
    meeting_day: Optional[Weekday] = None
    meeting_time: Optional[str] = None
    meeting_location: Optional[str] = None
    contact_phone: Optional[str] = None


class GroupPersonAdd(BaseModel):
    membro_id: str
