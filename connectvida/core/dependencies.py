"""
Core dependencies for route protection, church scoping and permission checking
"""

from dataclasses import dataclass, field
from fastapi import Depends, Header, HTTPException, Request, Security, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from connectvida.config.permissions_config import (
    ALL_PERMISSIONS,
    CHURCH_ADMIN_ROLES,
    get_effective_permissions,
)
from connectvida.database.supabase_client import get_supabase, get_service_supabase, maybe_row
from connectvida.modules.auth.service import AuthService, get_super_admin_row
from supabase import Client
from typing import List, Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()


@dataclass
class ChurchContext:
    """Who is calling and on behalf of which church."""
    user: Dict[str, Any]
    member: Optional[Dict[str, Any]]
    church_id: Optional[str]
    is_super_admin: bool = False
    role: Optional[str] = None
    permissions: List[str] = field(default_factory=list)

    @property
    def user_id(self) -> str:
        return self.user["id"]

    @property
    def is_church_admin(self) -> bool:
        return self.is_super_admin or self.role in CHURCH_ADMIN_ROLES

    def has_permission(self, permission: str) -> bool:
        return self.is_super_admin or permission in self.permissions


def _get_request_cache(request: Request) -> Dict[str, Any]:
    """Return request-scoped cache for access data (super admin flag, member row)."""
    if not hasattr(request.state, "access_cache"):
        request.state.access_cache = {}
    return request.state.access_cache


def get_auth_service(supabase: Client = Depends(get_supabase)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Extract current user info from JWT token"""
    token = credentials.credentials
    user_data = auth_service.get_current_user(token)
    return user_data


def is_super_admin(user_data: dict, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> bool:
    """A super admin is a user with a row in super_admins."""
    if cache is not None and "is_super_admin" in cache:
        return cache["is_super_admin"]
    try:
        result = bool(get_super_admin_row(supabase, user_data["id"]))
    except Exception as e:
        logger.error(f"Error checking super admin: {e}")
        result = False
    if cache is not None:
        cache["is_super_admin"] = result
    return result


def get_member(user_id: str, supabase: Client, cache: Optional[Dict[str, Any]] = None) -> Optional[dict]:
    """Return the caller's membros row (None for users without one). Uses request-scoped cache when provided."""
    if cache is not None and "member" in cache:
        return cache["member"]
    member = maybe_row(
        supabase.table("membros")
        .select("*")
        .eq("id", user_id)
        .maybe_single()
        .execute()
    )
    if cache is not None:
        cache["member"] = member
    return member


def get_user_context(
    request: Request,
    user_data: dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_service_supabase),
    x_church_id: Optional[str] = Header(default=None),
) -> ChurchContext:
    """Resolve the caller's member row, role and permissions. church_id may be None."""
    cache = _get_request_cache(request)
    if "context" in cache:
        return cache["context"]
    super_admin = is_super_admin(user_data, supabase, cache)
    member = get_member(user_data["id"], supabase, cache)
    church_id = member.get("id_igreja") if member else None
    if super_admin:
        # Super admins act on any church through the X-Church-Id header
        church_id = x_church_id or church_id
        context = ChurchContext(
            user=user_data,
            member=member,
            church_id=church_id,
            is_super_admin=True,
            role="super_admin",
            permissions=list(ALL_PERMISSIONS),
        )
    else:
        role = member.get("funcao") if member else None
        extra = (member.get("extra_permissoes") if member else None) or []
        context = ChurchContext(
            user=user_data,
            member=member,
            church_id=church_id,
            role=role,
            permissions=get_effective_permissions(role, extra),
        )
    cache["context"] = context
    return context


def get_church_context(context: ChurchContext = Depends(get_user_context)) -> ChurchContext:
    """Same as get_user_context, but the caller must be bound to a church."""
    if not context.church_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Church not found for user")
    return context


def require_permission(required_permission: str):
    """Factory function to create permission check dependency"""
    def check_permission(context: ChurchContext = Depends(get_church_context)) -> ChurchContext:
        if not context.has_permission(required_permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required: {required_permission}"
            )
        return context
    return check_permission


def require_any_permission(*permissions: str):
    """Like require_permission, passing when the caller holds at least one of the permissions."""
    def check_permissions(context: ChurchContext = Depends(get_church_context)) -> ChurchContext:
        if not any(context.has_permission(p) for p in permissions):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Insufficient permissions. Required one of: {', '.join(permissions)}"
            )
        return context
    return check_permissions


def require_super_admin(context: ChurchContext = Depends(get_user_context)) -> ChurchContext:
    if not context.is_super_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required"
        )
    return context


def require_church_admin(context: ChurchContext = Depends(get_church_context)) -> ChurchContext:
    """Admin or pastor of the current church, or a super admin."""
    if not context.is_church_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only church admins or pastors can perform this action"
        )
    return context


def can_manage_church(context: ChurchContext, church: Dict[str, Any]) -> bool:
    """Super admin, or admin/pastor of the church itself or of its mother church."""
    if context.is_super_admin:
        return True
    if context.role not in CHURCH_ADMIN_ROLES or not context.church_id:
        return False
    return context.church_id in (church.get("id"), church.get("parent_church_id"))


def check_church_management(church_id: str, context: ChurchContext, supabase: Client) -> dict:
    """Return the church row when the caller may administer it; 404/403 otherwise."""
    church = maybe_row(
        supabase.table("igrejas")
        .select("id, nome, parent_church_id, panel_password, email, nome_responsavel")
        .eq("id", church_id)
        .maybe_single()
        .execute()
    )
    if not church:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Church not found")
    if not can_manage_church(context, church):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You are not allowed to manage this church"
        )
    return church
