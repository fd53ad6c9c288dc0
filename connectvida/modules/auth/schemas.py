from pydantic import BaseModel, EmailStr
from typing import Optional, List, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class SuperAdminCreate(BaseModel):
    name: str
    email: EmailStr
    password: str


class ChurchSummary(BaseModel):
    nome: Optional[str] = None
    valor_mensal_assinatura: Optional[float] = None
    ultimo_pagamento_status: Optional[str] = None
    link_pagamento_assinatura: Optional[str] = None


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    is_super_admin: bool = False
    profile: Optional[Dict[str, Any]] = None
    church: Optional[ChurchSummary] = None
    personal: Optional[Dict[str, Any]] = None
    permissions: List[str] = []
