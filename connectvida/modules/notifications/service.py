from supabase import Client
from connectvida.modules.notifications.schemas import NotificationCreate, BillingNotification, TemplateCreate
from connectvida.modules.notifications.providers import ResendClient
from connectvida.config.permissions_config import CHURCH_ADMIN_ROLES
from connectvida.core.dependencies import ChurchContext
from connectvida.core.http_client import ProviderConfigError, ProviderError, raise_provider_http_error
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_mine(self, church_id: Optional[str], user_id: str) -> List[dict]:
        """Notifications addressed to the user plus broadcasts of the user's church, newest first."""
        try:
            own = self.supabase.table("notificacoes")\
                .select("*")\
                .eq("user_id", user_id)\
                .execute().data or []
            broadcasts = []
            if church_id:
                broadcasts = self.supabase.table("notificacoes")\
                    .select("*")\
                    .eq("id_igreja", church_id)\
                    .is_("user_id", "null")\
                    .execute().data or []
            rows = own + broadcasts
            rows.sort(key=lambda n: n.get("created_at") or "", reverse=True)
            return rows
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _get_readable(self, context: ChurchContext, notification_id: str) -> dict:
        row = maybe_row(
            self.supabase.table("notificacoes").select("*").eq("id", notification_id).maybe_single().execute()
        )
        if not row:
            raise HTTPException(status_code=404, detail="Notification not found")
        is_mine = row.get("user_id") == context.user_id
        is_broadcast = row.get("user_id") is None and row.get("id_igreja") == context.church_id
        if not (is_mine or is_broadcast):
            raise HTTPException(status_code=404, detail="Notification not found")
        return row

    def mark_read(self, context: ChurchContext, notification_id: str) -> dict:
        self._get_readable(context, notification_id)
        try:
            result = self.supabase.table("notificacoes").update({"lida": True}).eq("id", notification_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_all_read(self, context: ChurchContext) -> Dict[str, int]:
        unread = [n for n in self.list_mine(context.church_id, context.user_id) if not n.get("lida")]
        if not unread:
            return {"updated": 0}
        try:
            self.supabase.table("notificacoes")\
                .update({"lida": True})\
                .in_("id", [n["id"] for n in unread])\
                .execute()
            return {"updated": len(unread)}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create(self, church_id: str, data: NotificationCreate) -> dict:
        try:
            result = self.supabase.table("notificacoes").insert({
                **data.model_dump(),
                "id_igreja": church_id,
                "lida": False,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def send_billing_notification(self, data: BillingNotification) -> Dict[str, int]:
        """Billing notice to the selected church admins, or to every church admin."""
        if not data.titulo.strip() or not data.descricao.strip():
            raise HTTPException(status_code=400, detail="Título e descrição são obrigatórios")
        try:
            query = self.supabase.table("membros").select("id, id_igreja, funcao")
            if data.admin_ids:
                query = query.in_("id", data.admin_ids)
            else:
                query = query.in_("funcao", list(CHURCH_ADMIN_ROLES))
            admins = query.execute().data or []
            if not admins:
                raise HTTPException(status_code=400, detail="Nenhum administrador encontrado")
            rows = [
                {
                    "id_igreja": admin["id_igreja"],
                    "user_id": admin["id"],
                    "tipo": data.template,
                    "titulo": data.titulo,
                    "descricao": data.descricao,
                    "link": data.link,
                    "lida": False,
                }
                for admin in admins
            ]
            self.supabase.table("notificacoes").insert(rows).execute()
            logger.info(f"{data.template} notification sent to {len(rows)} admins")
            return {"sent": len(rows)}
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_templates(self, church_id: str) -> List[dict]:
        try:
            own = self.supabase.table("notification_templates").select("*").eq("id_igreja", church_id).execute()
            system = self.supabase.table("notification_templates").select("*").is_("id_igreja", "null").execute()
            return (system.data or []) + (own.data or [])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_template(self, church_id: str, data: TemplateCreate) -> dict:
        try:
            result = self.supabase.table("notification_templates").insert({
                **data.model_dump(),
                "id_igreja": church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))


def send_email(client: ResendClient, to: Optional[str], subject: Optional[str], html: Optional[str]) -> Dict[str, Any]:
    if not to or not subject or not html:
        raise HTTPException(status_code=400, detail="Missing required fields: to, subject, htmlContent")
    try:
        return client.send_email(to, subject, html)
    except (ProviderConfigError, ProviderError) as e:
        raise_provider_http_error(e)
