from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.admin.service import AdminService
from connectvida.modules.churches.service import CascadeDeleteError
from connectvida.core.dependencies import ChurchContext, require_super_admin
from supabase import Client

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_service_supabase)) -> AdminService:
    return AdminService(supabase)


@router.post("/reset-system")
async def reset_system(
    context: ChurchContext = Depends(require_super_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Delete every tenant row, keeping plans and super admins"""
    try:
        return {"success": True, "counts": service.reset_system()}
    except CascadeDeleteError as e:
        return JSONResponse(status_code=500, content={"error": str(e), "counts": e.counts})


@router.get("/overview")
async def overview(
    context: ChurchContext = Depends(require_super_admin),
    service: AdminService = Depends(get_admin_service)
):
    return service.overview()
