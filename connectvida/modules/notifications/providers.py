"""
Transactional email through Resend.
"""

from typing import Any, Dict

from connectvida.config import settings
from connectvida.core.http_client import ProviderClient


class ResendClient(ProviderClient):
    provider = "resend"

    def __init__(self, base_url: str, token: str = None, sender: str = "", timeout: float = 15.0, transport=None):
        super().__init__(base_url, token, timeout, transport)
        self.sender = sender

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def send_email(self, to: str, subject: str, html: str) -> Dict[str, Any]:
        self._require_token("RESEND_API_KEY")
        return self.request("POST", "/emails", json={
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        })


def get_resend_client() -> ResendClient:
    return ResendClient(
        settings.resend_api_url, settings.resend_api_key, settings.email_from, settings.http_timeout_seconds
    )
