from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.devotionals.schemas import DevotionalFilters, DevotionalCreate, DevotionalUpdate, CommentCreate
from connectvida.modules.devotionals.service import DevotionalService
from connectvida.core.dependencies import ChurchContext, get_church_context, require_permission
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/devotionals", tags=["devotionals"])


def get_devotional_service(supabase: Client = Depends(get_service_supabase)) -> DevotionalService:
    return DevotionalService(supabase)


@router.get("")
async def list_devotionals(
    status: Optional[str] = None,
    author_id: Optional[str] = None,
    category: Optional[str] = None,
    tag: Optional[str] = None,
    search: Optional[str] = None,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    filters = DevotionalFilters(status=status, author_id=author_id, category=category, tag=tag, search=search)
    return service.list_devotionals(context, filters)


@router.post("/comments/{comment_id}/approve")
async def approve_comment(
    comment_id: str,
    context: ChurchContext = Depends(require_permission("devotional-approver")),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.approve_comment(context.church_id, comment_id)


@router.delete("/comments/{comment_id}", status_code=204)
async def delete_comment(
    comment_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    """Reject a comment (approvers) or remove one's own"""
    service.delete_comment(context, comment_id)
    return None


@router.get("/{devotional_id}")
async def get_devotional(
    devotional_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.get_details(context, devotional_id)


@router.post("", status_code=201)
async def create_devotional(
    data: DevotionalCreate,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    """Create a devotional; members without devotionals-management submit it as Pendente"""
    return service.create_devotional(context, data)


@router.put("/{devotional_id}")
async def update_devotional(
    devotional_id: str,
    data: DevotionalUpdate,
    context: ChurchContext = Depends(require_permission("devotionals-management")),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.update_devotional(context.church_id, devotional_id, data)


@router.delete("/{devotional_id}", status_code=204)
async def delete_devotional(
    devotional_id: str,
    context: ChurchContext = Depends(require_permission("devotionals-management")),
    service: DevotionalService = Depends(get_devotional_service)
):
    service.delete_devotional(context.church_id, devotional_id)
    return None


@router.post("/{devotional_id}/approve")
async def approve_devotional(
    devotional_id: str,
    context: ChurchContext = Depends(require_permission("devotional-approver")),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.approve(context.church_id, devotional_id)


@router.post("/{devotional_id}/like")
async def toggle_like(
    devotional_id: str,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.toggle_like(context, devotional_id)


@router.post("/{devotional_id}/comments", status_code=201)
async def add_comment(
    devotional_id: str,
    data: CommentCreate,
    context: ChurchContext = Depends(get_church_context),
    service: DevotionalService = Depends(get_devotional_service)
):
    return service.add_comment(context, devotional_id, data.conteudo)
