from fastapi import APIRouter, Depends, HTTPException
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.auth.schemas import LoginRequest, TokenResponse, MeResponse, SuperAdminCreate
from connectvida.modules.auth.service import AuthService, AuthAdminService, build_profile
from connectvida.core.dependencies import (
    ChurchContext, get_auth_service, get_current_token, get_user_context
)
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


def get_auth_admin_service(supabase: Client = Depends(get_service_supabase)) -> AuthAdminService:
    return AuthAdminService(supabase)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_me(
    context: ChurchContext = Depends(get_user_context),
    supabase: Client = Depends(get_service_supabase),
):
    """Current user with member profile, church summary, personal info and effective permissions."""
    return build_profile(
        supabase, context.user, context.member, context.is_super_admin, context.permissions
    )


@router.post("/super-admins", status_code=201)
async def create_super_admin(
    admin_data: SuperAdminCreate,
    context: ChurchContext = Depends(get_user_context),
    service: AuthAdminService = Depends(get_auth_admin_service),
):
    """Create or reset a super admin. Any authenticated user may bootstrap the first one."""
    if not context.is_super_admin and service.has_super_admins():
        raise HTTPException(status_code=403, detail="Super admin access required")
    user_id = service.ensure_super_admin(admin_data)
    return {"ok": True, "userId": user_id}
