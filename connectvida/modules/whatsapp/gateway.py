"""
Client for the self-hosted WhatsApp gateway.
"""

from typing import Any, Dict

from connectvida.config import settings
from connectvida.core.http_client import ProviderClient


def session_id_for(church_id: str) -> str:
    return f"church-{church_id}"


class WhatsAppGateway(ProviderClient):
    provider = "whatsapp"

    def _auth_headers(self) -> Dict[str, str]:
        # The gateway runs without auth unless a token is configured
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def start_session(self, church_id: str) -> Dict[str, Any]:
        return self.request("POST", "/sessions/start", json={"sessionId": session_id_for(church_id)})

    def send_message(self, church_id: str, to_number: str, body: str) -> Dict[str, Any]:
        return self.request("POST", "/messages/send", json={
            "sessionId": session_id_for(church_id),
            "to": to_number,
            "message": body,
        })


def get_whatsapp_gateway() -> WhatsAppGateway:
    return WhatsAppGateway(settings.whatsapp_api_url, settings.whatsapp_api_token, settings.http_timeout_seconds)
