from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.churches.schemas import (
    ChurchRegister, ChurchRegisterResponse, ChurchPublic, SharingSettings, ParentInfo,
    ChildChurchResponse, ChildChurchCreate, ChildChurchCreateResponse, ChurchUpdate,
    ResetPastorAccessResponse, ChurchDeleteResponse
)
from connectvida.modules.churches.service import ChurchService, CascadeDeleteError
from connectvida.core.dependencies import (
    ChurchContext, get_church_context, get_user_context, require_church_admin, require_super_admin,
    check_church_management
)
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/churches", tags=["churches"])


def get_church_service(supabase: Client = Depends(get_service_supabase)) -> ChurchService:
    return ChurchService(supabase)


@router.post("/register", response_model=ChurchRegisterResponse, status_code=201)
async def register_church(
    data: ChurchRegister,
    service: ChurchService = Depends(get_church_service)
):
    """Public signup: create a church and its admin user"""
    return service.register_church(data)


@router.get("/public/{church_id}", response_model=ChurchPublic)
async def get_public_church(
    church_id: str,
    service: ChurchService = Depends(get_church_service)
):
    """Church name for the public member signup page"""
    return service.get_public_church(church_id)


@router.get("")
async def list_churches(
    status: Optional[str] = None,
    context: ChurchContext = Depends(require_super_admin),
    service: ChurchService = Depends(get_church_service)
):
    """List every church (super admin)"""
    return service.list_churches(status)


@router.get("/current")
async def get_current_church(
    context: ChurchContext = Depends(get_church_context),
    service: ChurchService = Depends(get_church_service)
):
    return service.get_current_church(context.church_id)


@router.put("/current/sharing", response_model=SharingSettings)
async def update_sharing(
    data: SharingSettings,
    context: ChurchContext = Depends(require_church_admin),
    service: ChurchService = Depends(get_church_service)
):
    """Choose which kinds of mother church content this child church receives"""
    return service.update_sharing(context.church_id, data)


@router.get("/current/parent", response_model=ParentInfo)
async def get_parent_info(
    context: ChurchContext = Depends(get_church_context),
    service: ChurchService = Depends(get_church_service)
):
    return service.get_parent_info(context.church_id)


@router.get("/current/children", response_model=List[ChildChurchResponse])
async def list_children(
    context: ChurchContext = Depends(get_church_context),
    service: ChurchService = Depends(get_church_service)
):
    return service.list_children(context.church_id)


@router.post("/children", response_model=ChildChurchCreateResponse, status_code=201)
async def register_child_church(
    data: ChildChurchCreate,
    context: ChurchContext = Depends(get_user_context),
    service: ChurchService = Depends(get_church_service)
):
    """Create a child church under the caller's church (super admins may pick the mother)"""
    if context.is_super_admin:
        mother_id = data.mother_church_id or context.church_id
        if not mother_id:
            raise HTTPException(status_code=400, detail="mother_church_id is required")
    else:
        if not context.church_id:
            raise HTTPException(status_code=400, detail="Church not found for user")
        if not context.is_church_admin:
            raise HTTPException(status_code=403, detail="Only church admins or pastors can perform this action")
        if data.mother_church_id and data.mother_church_id != context.church_id:
            raise HTTPException(status_code=403, detail="You are not allowed to manage this church")
        mother_id = context.church_id
    return service.register_child_church(mother_id, data)


@router.put("/{church_id}")
async def update_church(
    church_id: str,
    data: ChurchUpdate,
    context: ChurchContext = Depends(get_user_context),
    service: ChurchService = Depends(get_church_service),
    supabase: Client = Depends(get_service_supabase)
):
    check_church_management(church_id, context, supabase)
    return service.update_church(church_id, data)


@router.post("/{church_id}/reset-pastor-access", response_model=ResetPastorAccessResponse)
async def reset_pastor_access(
    church_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: ChurchService = Depends(get_church_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Reset the pastor login of a church to its panel password"""
    church = check_church_management(church_id, context, supabase)
    return service.reset_pastor_access(church)


@router.delete("/{church_id}", response_model=ChurchDeleteResponse)
async def delete_church(
    church_id: str,
    context: ChurchContext = Depends(get_user_context),
    service: ChurchService = Depends(get_church_service),
    supabase: Client = Depends(get_service_supabase)
):
    """Delete a church and every row that belongs to it"""
    check_church_management(church_id, context, supabase)
    try:
        counts = service.delete_church(church_id)
    except CascadeDeleteError as e:
        return JSONResponse(status_code=500, content={"error": str(e), "counts": e.counts})
    return {"ok": True, "counts": counts}
