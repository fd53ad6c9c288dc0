from fastapi import APIRouter, Depends
from connectvida.database.supabase_client import get_service_supabase
from connectvida.modules.vocational_tests.schemas import VocationalTestSubmit
from connectvida.modules.vocational_tests.service import VocationalTestService, QUESTIONS, MINISTRIES
from connectvida.core.dependencies import ChurchContext, get_church_context, require_permission
from supabase import Client

router = APIRouter(prefix="/vocational-tests", tags=["vocational-tests"])


def get_vocational_test_service(supabase: Client = Depends(get_service_supabase)) -> VocationalTestService:
    return VocationalTestService(supabase)


@router.get("/questions")
async def list_questions():
    """The 40 statements of the test and the ministries they score"""
    return {
        "perguntas": QUESTIONS,
        "ministerios": [{"ministerio": key, "nome": name} for key, (_, name, _) in MINISTRIES.items()],
    }


@router.get("")
async def list_church_results(
    context: ChurchContext = Depends(require_permission("member-management")),
    service: VocationalTestService = Depends(get_vocational_test_service)
):
    return service.list_church_results(context.church_id)


@router.post("", status_code=201)
async def submit_test(
    data: VocationalTestSubmit,
    context: ChurchContext = Depends(get_church_context),
    service: VocationalTestService = Depends(get_vocational_test_service)
):
    return service.submit(context, data.respostas)


@router.get("/me")
async def get_my_latest(
    context: ChurchContext = Depends(get_church_context),
    service: VocationalTestService = Depends(get_vocational_test_service)
):
    """Latest result of the caller (null when the test was never taken)"""
    return service.get_latest(context.user_id)


@router.get("/me/history")
async def get_my_history(
    context: ChurchContext = Depends(get_church_context),
    service: VocationalTestService = Depends(get_vocational_test_service)
):
    return service.history(context.user_id)
