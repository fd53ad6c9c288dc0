from pydantic import BaseModel
from typing import Any, Dict, Optional


class KidCreate(BaseModel):
    nome_crianca: str
    data_nascimento: str
    responsavel_id: Optional[str] = None
    informacoes_especiais: Optional[str] = None
    alergias: Optional[str] = None
    medicamentos: Optional[str] = None
    autorizacao_fotos: bool = False
    contato_emergencia: Optional[Dict[str, Any]] = None


class KidUpdate(BaseModel):
    nome_crianca: Optional[str] = None
    data_nascimento: Optional[str] = None
    responsavel_id: Optional[str] = None
    informacoes_especiais: Optional[str] = None
    alergias: Optional[str] = None
    medicamentos: Optional[str] = None
    autorizacao_fotos: Optional[bool] = None
    contato_emergencia: Optional[Dict[str, Any]] = None


class CheckinRequest(BaseModel):
    observacoes: Optional[str] = None


class CheckoutRequest(BaseModel):
    codigo_seguranca: str


class CheckinResponse(BaseModel):
    checkin_id: str
    codigo_seguranca: str
