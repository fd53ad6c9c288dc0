import hashlib
import logging
import re
import time
from supabase import Client
from connectvida.modules.auth.schemas import LoginRequest, TokenResponse, SuperAdminCreate
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500

# list_users paging when locating an existing user by email
USERS_PER_PAGE = 200
MAX_USER_PAGES = 5

_DUPLICATE_USER_RE = re.compile(r"already|in use|registered", re.IGNORECASE)


def is_duplicate_user_error(error: Exception) -> bool:
    return bool(_DUPLICATE_USER_RE.search(str(error)))


def clear_auth_cache():
    _AUTH_USER_CACHE.clear()


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=auth_response.user.id,
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": user.id,
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        try:
            # Supabase tokens are stateless JWTs; drop our cached resolution too
            _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False


class AuthAdminService:
    """Auth admin API operations. Requires a service-role client."""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_user(self, email: str, password: str, user_metadata: Dict[str, Any]) -> str:
        """Create a confirmed auth user and return its id. Provider errors propagate."""
        response = self.supabase.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
            "user_metadata": user_metadata,
        })
        user = getattr(response, "user", None)
        if not user or not user.id:
            raise RuntimeError("Auth API did not return the created user")
        return user.id

    def update_user(self, user_id: str, attributes: Dict[str, Any]) -> None:
        self.supabase.auth.admin.update_user_by_id(user_id, attributes)

    def delete_user(self, user_id: str) -> None:
        self.supabase.auth.admin.delete_user(user_id)

    def find_user_by_email(self, email: str) -> Optional[Any]:
        """Scan list_users pages (200 per page, 5 pages at most) for a case-insensitive email match."""
        target = email.lower()
        for page in range(1, MAX_USER_PAGES + 1):
            users = self.supabase.auth.admin.list_users(page=page, per_page=USERS_PER_PAGE) or []
            for user in users:
                if (user.email or "").lower() == target:
                    return user
            if len(users) < USERS_PER_PAGE:
                break
        return None

    def create_or_reset_user(self, email: str, password: str, user_metadata: Dict[str, Any]) -> str:
        """Create the user, or when the email is taken reuse that user and reset its password and metadata."""
        try:
            return self.create_user(email, password, user_metadata)
        except Exception as e:
            if not is_duplicate_user_error(e):
                raise
            existing = self.find_user_by_email(email)
            if not existing or not existing.id:
                raise HTTPException(
                    status_code=500,
                    detail=f"Usuário com email {email} já existe, mas não foi possível localizar o ID."
                )
            self.update_user(existing.id, {
                "password": password,
                "email_confirm": True,
                "user_metadata": user_metadata,
            })
            return existing.id

    def ensure_super_admin(self, admin_data: SuperAdminCreate) -> str:
        """Create (or reset) the super admin auth user and its super_admins row."""
        try:
            user_id = self.create_or_reset_user(
                admin_data.email,
                admin_data.password,
                {"full_name": admin_data.name, "initial_role": "super_admin"},
            )

            # Drop stale rows registered with the same email under another id
            existing = self.supabase.table("super_admins")\
                .select("id, email")\
                .eq("email", admin_data.email)\
                .execute()
            conflict_ids = [row["id"] for row in (existing.data or []) if row["id"] != user_id]
            if conflict_ids:
                self.supabase.table("super_admins").delete().in_("id", conflict_ids).execute()

            self.supabase.table("super_admins").upsert(
                {"id": user_id, "nome_completo": admin_data.name, "email": admin_data.email},
                on_conflict="id",
            ).execute()
            logger.info(f"Super admin ready: {user_id}")
            return user_id
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating super admin: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def has_super_admins(self) -> bool:
        result = self.supabase.table("super_admins").select("id").limit(1).execute()
        return bool(result.data)


def get_super_admin_row(supabase: Client, user_id: str) -> Optional[dict]:
    return maybe_row(
        supabase.table("super_admins").select("id").eq("id", user_id).maybe_single().execute()
    )


def build_profile(supabase: Client, user_data: Dict[str, Any], member: Optional[dict],
                  super_admin: bool, permissions: list) -> Dict[str, Any]:
    """Profile payload for /auth/me. Users without a membros row get profile None."""
    church = None
    personal = None
    if member:
        if member.get("id_igreja"):
            church = maybe_row(
                supabase.table("igrejas")
                .select("nome, valor_mensal_assinatura, ultimo_pagamento_status, link_pagamento_assinatura")
                .eq("id", member["id_igreja"])
                .maybe_single()
                .execute()
            )
        personal = maybe_row(
            supabase.table("informacoes_pessoais")
            .select("*")
            .eq("membro_id", member["id"])
            .maybe_single()
            .execute()
        )
    return {
        "id": user_data["id"],
        "email": user_data.get("email"),
        "is_super_admin": super_admin,
        "profile": member,
        "church": church,
        "personal": personal,
        "permissions": permissions,
    }
