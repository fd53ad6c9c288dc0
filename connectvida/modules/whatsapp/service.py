from supabase import Client
from connectvida.config import settings
from connectvida.modules.whatsapp.gateway import WhatsAppGateway
from connectvida.modules.whatsapp.schemas import MessageCreate, TemplateCreate
from connectvida.modules.churches.service import digits_only
from connectvida.core.http_client import ProviderConfigError, ProviderError, raise_provider_http_error
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class WhatsAppService:
    def __init__(self, supabase: Client, gateway: WhatsAppGateway):
        self.supabase = supabase
        self.gateway = gateway

    def start_session(self, church_id: str) -> dict:
        """Start a gateway session and store the QR code to be scanned."""
        try:
            response = self.gateway.start_session(church_id)
        except (ProviderConfigError, ProviderError) as e:
            raise_provider_http_error(e)
        qr = response.get("qr") if isinstance(response, dict) else None
        if not qr:
            raise HTTPException(status_code=502, detail="A API de WhatsApp não retornou um QR code.")
        try:
            result = self.supabase.table("whatsapp_sessions").upsert({
                "church_id": church_id,
                "status": "awaiting_qr",
                "qr_code": qr,
                "last_heartbeat": _now(),
            }, on_conflict="church_id").execute()
            logger.info(f"WhatsApp session started for church {church_id}")
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_session(self, church_id: str) -> Optional[dict]:
        try:
            return maybe_row(
                self.supabase.table("whatsapp_sessions")
                .select("*")
                .eq("church_id", church_id)
                .maybe_single()
                .execute()
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def enqueue(self, church_id: str, data: MessageCreate) -> dict:
        number = digits_only(data.to_number)
        if not number:
            raise HTTPException(status_code=400, detail="Número de telefone inválido")
        try:
            result = self.supabase.table("whatsapp_messages").insert({
                "church_id": church_id,
                "to_number": number,
                "body": data.body,
                "status": "pending",
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def process_pending(self, church_id: str) -> Dict[str, int]:
        """Send the oldest pending messages of the church, one batch at a time."""
        try:
            pending = self.supabase.table("whatsapp_messages")\
                .select("*")\
                .eq("church_id", church_id)\
                .eq("status", "pending")\
                .order("created_at")\
                .limit(settings.whatsapp_batch_size)\
                .execute().data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

        processed = 0
        failed = 0
        for message in pending:
            try:
                self.gateway.send_message(church_id, message["to_number"], message["body"])
                update = {"status": "sent", "sent_at": _now(), "error": None}
                processed += 1
            except ProviderError as e:
                logger.warning(f"WhatsApp message {message['id']} failed: {e}")
                update = {"status": "failed", "error": str(e)}
                failed += 1
            self.supabase.table("whatsapp_messages").update(update).eq("id", message["id"]).execute()
        logger.info(f"WhatsApp batch for church {church_id}: {processed} sent, {failed} failed")
        return {"processed": processed, "failed": failed}

    def list_templates(self, church_id: str) -> List[dict]:
        try:
            result = self.supabase.table("whatsapp_templates")\
                .select("*")\
                .eq("church_id", church_id)\
                .order("nome")\
                .execute()
            return result.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_template(self, church_id: str, data: TemplateCreate) -> dict:
        try:
            result = self.supabase.table("whatsapp_templates").insert({
                **data.model_dump(),
                "church_id": church_id,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_template(self, church_id: str, template_id: str) -> None:
        template = maybe_row(
            self.supabase.table("whatsapp_templates").select("*").eq("id", template_id).maybe_single().execute()
        )
        if not template or template.get("church_id") != church_id:
            raise HTTPException(status_code=404, detail="Template not found")
        try:
            self.supabase.table("whatsapp_templates").delete().eq("id", template_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
