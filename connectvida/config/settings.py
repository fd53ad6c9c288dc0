from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Required for auth admin API and tenant-wide writes

    # Public URL of the web app, used for checkout return links
    app_public_url: str = "http://localhost:5173"

    # ASAAS
    asaas_api_url: str = "https://api.asaas.com/v3"
    asaas_api_token: Optional[str] = None
    asaas_webhook_token: Optional[str] = None

    # Abacate PAY
    abacatepay_api_url: str = "https://api.abacatepay.com/v1"
    abacatepay_api_key: Optional[str] = None
    abacatepay_webhook_secret: Optional[str] = None

    # Mercado Pago
    mercado_pago_api_url: str = "https://api.mercadopago.com"
    mercado_pago_access_token: Optional[str] = None

    # Resend (transactional email)
    resend_api_url: str = "https://api.resend.com"
    resend_api_key: Optional[str] = None
    email_from: str = "Connect Vida <noreply@connectvida.com.br>"

    # WhatsApp gateway
    whatsapp_api_url: str = "http://localhost:3001"
    whatsapp_api_token: Optional[str] = None
    whatsapp_batch_size: int = 25

    # Outbound HTTP
    http_timeout_seconds: float = 15.0

    # App
    app_name: str = "connectvida-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000,http://127.0.0.1:5173"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
