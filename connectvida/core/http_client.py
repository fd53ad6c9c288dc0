"""
Base for outbound provider clients (payments, email, WhatsApp gateway).
"""

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class ProviderConfigError(Exception):
    """Provider credentials are missing from the environment."""


class ProviderError(Exception):
    """Provider answered with a non-2xx status or could not be reached."""

    def __init__(self, provider: str, message: str, status_code: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.details = details


def raise_provider_http_error(error: Exception) -> None:
    """Translate provider exceptions into HTTP errors: config -> 500, provider -> 502."""
    if isinstance(error, ProviderConfigError):
        raise HTTPException(status_code=500, detail=str(error))
    if isinstance(error, ProviderError):
        raise HTTPException(
            status_code=502,
            detail={"error": f"{error.provider}_error", "message": str(error), "details": error.details},
        )
    raise error


class ProviderClient:
    """Thin JSON-over-HTTP client. Subclasses set `provider` and implement `_auth_headers`."""

    provider = "provider"

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: float = 15.0,
                 transport: Optional[httpx.BaseTransport] = None):
        self.base_url = (base_url or "").rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport

    def _auth_headers(self) -> Dict[str, str]:
        return {}

    def _require_token(self, setting_name: str) -> None:
        if not self.token:
            raise ProviderConfigError(f"{setting_name} is not configured")

    def request(self, method: str, path: str, json: Any = None, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.request(method, url, json=json, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"{self.provider} request failed: {method} {path}: {e}")
            raise ProviderError(self.provider, f"{self.provider} unreachable: {e}")

        try:
            body = response.json()
        except ValueError:
            body = {"raw": response.text}

        if response.status_code >= 400:
            logger.error(f"{self.provider} error {response.status_code} on {method} {path}: {body}")
            message = body.get("message") if isinstance(body, dict) else None
            raise ProviderError(
                self.provider,
                message or f"{self.provider} returned HTTP {response.status_code}",
                status_code=response.status_code,
                details=body,
            )
        return body
