"""
Payment provider clients: ASAAS, Abacate PAY and Mercado Pago.
"""

import base64
import hashlib
import hmac
from datetime import date
from typing import Any, Dict, Optional

from connectvida.config import settings
from connectvida.core.http_client import ProviderClient, ProviderError
from connectvida.modules.churches.service import digits_only


class AsaasClient(ProviderClient):
    provider = "asaas"

    def _auth_headers(self) -> Dict[str, str]:
        return {"access_token": self.token or ""}

    def find_customer_by_email(self, email: str) -> Optional[str]:
        self._require_token("ASAAS_API_TOKEN")
        try:
            body = self.request("GET", "/customers", params={"email": email})
        except ProviderError:
            # Lookup failures fall through to customer creation
            return None
        data = body.get("data") if isinstance(body, dict) else None
        return data[0]["id"] if data else None

    def create_customer(self, name: str, email: str, cpf_cnpj: Optional[str] = None,
                        mobile_phone: Optional[str] = None, external_reference: Optional[str] = None) -> str:
        self._require_token("ASAAS_API_TOKEN")
        payload: Dict[str, Any] = {"name": name, "email": email}
        if cpf_cnpj:
            payload["cpfCnpj"] = digits_only(cpf_cnpj)
        if mobile_phone:
            payload["mobilePhone"] = mobile_phone
        if external_reference:
            payload["externalReference"] = external_reference
        body = self.request("POST", "/customers", json=payload)
        return body["id"]

    def create_pix_payment(self, customer_id: str, value: float, description: str) -> Dict[str, Any]:
        self._require_token("ASAAS_API_TOKEN")
        return self.request("POST", "/payments", json={
            "customer": customer_id,
            "billingType": "PIX",
            "value": value,
            "description": description,
            "dueDate": date.today().isoformat(),
        })

    def get_pix_qr_code(self, payment_id: str) -> Dict[str, Any]:
        self._require_token("ASAAS_API_TOKEN")
        return self.request("GET", f"/payments/{payment_id}/pixQrCode")

    def create_subscription(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_token("ASAAS_API_TOKEN")
        return self.request("POST", "/subscriptions", json=payload)


class AbacatePayClient(ProviderClient):
    provider = "abacatepay"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def create_checkout_session(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_token("ABACATEPAY_API_KEY")
        return self.request("POST", "/checkout/sessions", json=payload)

    def create_pix_qr_code(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_token("ABACATEPAY_API_KEY")
        return self.request("POST", "/pixQrCode/create", json=payload)


class MercadoPagoClient(ProviderClient):
    provider = "mercadopago"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def create_preapproval(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self._require_token("MERCADO_PAGO_ACCESS_TOKEN")
        return self.request("POST", "/preapproval", json=payload)


def verify_abacatepay_signature(raw_body: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """Base64 HMAC-SHA256 of the raw body. Verification is skipped when no secret is configured."""
    if not secret:
        return True
    if not signature:
        return False
    digest = hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).digest()
    expected = base64.b64encode(digest).decode("ascii")
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))


def get_asaas_client() -> AsaasClient:
    return AsaasClient(settings.asaas_api_url, settings.asaas_api_token, settings.http_timeout_seconds)


def get_abacatepay_client() -> AbacatePayClient:
    return AbacatePayClient(settings.abacatepay_api_url, settings.abacatepay_api_key, settings.http_timeout_seconds)


def get_mercadopago_client() -> MercadoPagoClient:
    return MercadoPagoClient(
        settings.mercado_pago_api_url, settings.mercado_pago_access_token, settings.http_timeout_seconds
    )
