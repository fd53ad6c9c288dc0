from supabase import Client
from connectvida.modules.kids.schemas import KidCreate, KidUpdate
from connectvida.config.permissions_config import KIDS_MANAGER_ROLES
from connectvida.core.dependencies import ChurchContext
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import secrets
import string
import logging

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6

# (max age in years, group), checked in order
AGE_GROUPS = [
    (3, "Berçário"),
    (5, "Maternal"),
    (8, "Jardim"),
]
OLDEST_GROUP = "Juniores"


def generate_security_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def calculate_age(birth_date: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Whole years since birth, counted in 365.25-day years."""
    if not birth_date:
        return None
    try:
        born = date.fromisoformat(str(birth_date)[:10])
    except ValueError:
        return None
    today = today or date.today()
    return int((today - born).days / 365.25)


def age_group(age: Optional[int]) -> Optional[str]:
    if age is None:
        return None
    for limit, group in AGE_GROUPS:
        if age <= limit:
            return group
    return OLDEST_GROUP


def is_kids_manager(context: ChurchContext) -> bool:
    return context.role in KIDS_MANAGER_ROLES or context.has_permission("kids-management")


class KidsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _responsible_ids(self, member_id: str) -> List[str]:
        """The member and, when registered, their spouse."""
        ids = [member_id]
        personal = maybe_row(
            self.supabase.table("informacoes_pessoais")
            .select("conjuge_id")
            .eq("membro_id", member_id)
            .maybe_single()
            .execute()
        )
        if personal and personal.get("conjuge_id"):
            ids.append(personal["conjuge_id"])
        return ids

    def _check_responsible(self, context: ChurchContext, responsible_id: str) -> None:
        """Members register their own kids (or their spouse's); managers pick any member of the church."""
        if not is_kids_manager(context):
            if responsible_id not in self._responsible_ids(context.user_id):
                raise HTTPException(status_code=403, detail="Forbidden")
            return
        member = maybe_row(
            self.supabase.table("membros")
            .select("id, id_igreja")
            .eq("id", responsible_id)
            .maybe_single()
            .execute()
        )
        if not member or member.get("id_igreja") != context.church_id:
            raise HTTPException(status_code=400, detail="Responsible member not found in this church")

    def _with_age(self, kid: Dict[str, Any]) -> Dict[str, Any]:
        age = calculate_age(kid.get("data_nascimento"))
        return {**kid, "idade": age, "faixa_etaria": age_group(age)}

    def list_kids(self, context: ChurchContext) -> List[dict]:
        try:
            query = self.supabase.table("criancas").select("*").eq("id_igreja", context.church_id)
            if not is_kids_manager(context):
                query = query.in_("responsavel_id", self._responsible_ids(context.user_id))
            kids = query.order("nome_crianca").execute().data or []
            responsible = list({k["responsavel_id"] for k in kids if k.get("responsavel_id")})
            names: Dict[str, str] = {}
            if responsible:
                members = self.supabase.table("membros")\
                    .select("id, nome_completo")\
                    .in_("id", responsible)\
                    .execute()
                names = {m["id"]: m["nome_completo"] for m in (members.data or [])}
            return [
                {**self._with_age(k), "responsavel_nome": names.get(k.get("responsavel_id"))}
                for k in kids
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_kid(self, context: ChurchContext, kid_id: str) -> dict:
        """Kid row the caller may act on: managers see the church, others their own kids."""
        kid = maybe_row(
            self.supabase.table("criancas").select("*").eq("id", kid_id).maybe_single().execute()
        )
        if not kid or kid.get("id_igreja") != context.church_id:
            raise HTTPException(status_code=404, detail="Kid not found")
        if not is_kids_manager(context) and kid.get("responsavel_id") not in self._responsible_ids(context.user_id):
            raise HTTPException(status_code=403, detail="Forbidden")
        return kid

    def create_kid(self, context: ChurchContext, data: KidCreate) -> dict:
        payload = data.model_dump()
        payload["responsavel_id"] = payload.get("responsavel_id") or context.user_id
        self._check_responsible(context, payload["responsavel_id"])
        payload.update({"id_igreja": context.church_id, "status_checkin": "Ausente"})
        try:
            result = self.supabase.table("criancas").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create kid")
            return self._with_age(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_kid(self, context: ChurchContext, kid_id: str, data: KidUpdate) -> dict:
        self.get_kid(context, kid_id)
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if update_data.get("responsavel_id"):
            self._check_responsible(context, update_data["responsavel_id"])
        try:
            result = self.supabase.table("criancas").update(update_data).eq("id", kid_id).execute()
            return self._with_age(result.data[0])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_kid(self, context: ChurchContext, kid_id: str) -> None:
        self.get_kid(context, kid_id)
        try:
            self.supabase.table("kids_checkin").delete().eq("crianca_id", kid_id).execute()
            self.supabase.table("criancas").delete().eq("id", kid_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_in(self, context: ChurchContext, kid_id: str, notes: Optional[str] = None) -> Dict[str, str]:
        """Open a check-in and return its security code."""
        kid = self.get_kid(context, kid_id)
        if kid.get("status_checkin") == "Presente":
            raise HTTPException(status_code=409, detail="Criança já está presente")
        code = generate_security_code()
        now = datetime.now(timezone.utc).isoformat()
        try:
            result = self.supabase.table("kids_checkin").insert({
                "id_igreja": context.church_id,
                "crianca_id": kid_id,
                "data_checkin": now,
                "responsavel_checkin_id": context.user_id,
                "codigo_seguranca": code,
                "observacoes": notes,
            }).execute()
            self.supabase.table("criancas").update({
                "status_checkin": "Presente",
                "ultimo_checkin": now,
                "codigo_seguranca": code,
            }).eq("id", kid_id).execute()
            logger.info(f"Kid {kid_id} checked in by {context.user_id}")
            return {"checkin_id": result.data[0]["id"], "codigo_seguranca": code}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def check_out(self, context: ChurchContext, kid_id: str, code: str) -> dict:
        self.get_kid(context, kid_id)
        open_checkin = maybe_row(
            self.supabase.table("kids_checkin")
            .select("*")
            .eq("crianca_id", kid_id)
            .is_("data_checkout", "null")
            .order("data_checkin", desc=True)
            .limit(1)
            .maybe_single()
            .execute()
        )
        if not open_checkin:
            raise HTTPException(status_code=409, detail="Nenhum check-in em aberto para esta criança")
        if (code or "").strip().upper() != open_checkin.get("codigo_seguranca"):
            raise HTTPException(status_code=400, detail="Código de segurança inválido")
        try:
            result = self.supabase.table("kids_checkin").update({
                "data_checkout": datetime.now(timezone.utc).isoformat(),
                "responsavel_checkout_id": context.user_id,
            }).eq("id", open_checkin["id"]).execute()
            self.supabase.table("criancas").update({
                "status_checkin": "Ausente",
                "codigo_seguranca": None,
            }).eq("id", kid_id).execute()
            logger.info(f"Kid {kid_id} checked out by {context.user_id}")
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def history(self, context: ChurchContext, kid_id: Optional[str] = None) -> List[dict]:
        """Check-ins of the church (managers) or of the caller's kids."""
        try:
            query = self.supabase.table("kids_checkin").select("*").eq("id_igreja", context.church_id)
            if kid_id:
                self.get_kid(context, kid_id)
                query = query.eq("crianca_id", kid_id)
            elif not is_kids_manager(context):
                own = self.supabase.table("criancas")\
                    .select("id")\
                    .in_("responsavel_id", self._responsible_ids(context.user_id))\
                    .execute().data or []
                if not own:
                    return []
                query = query.in_("crianca_id", [k["id"] for k in own])
            return query.order("data_checkin", desc=True).execute().data or []
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
