from typing import Any, Optional

from supabase import create_client, Client
from connectvida.config import settings


class SupabaseClient:
    _client: Client = None
    _service_client: Client = None

    @classmethod
    def get_client(cls) -> Client:
        if cls._client is None:
            cls._client = create_client(settings.supabase_url, settings.supabase_key)
        return cls._client

    @classmethod
    def get_service_client(cls) -> Client:
        """Client with service_role key; bypasses RLS. Needed for auth.admin and cross-tenant writes."""
        if cls._service_client is None and settings.supabase_service_role_key:
            cls._service_client = create_client(
                settings.supabase_url, settings.supabase_service_role_key
            )
        return cls._service_client or cls.get_client()

    @classmethod
    def reset_client(cls):
        cls._client = None
        cls._service_client = None


def get_supabase() -> Client:
    """Anon client, used for password sign-in and token validation."""
    return SupabaseClient.get_client()


def get_service_supabase() -> Client:
    """Service-role client, used by every service after permissions were checked."""
    return SupabaseClient.get_service_client()


def maybe_row(response: Any) -> Optional[dict]:
    """Return the row of a maybe_single() response, or None.

    Depending on the postgrest version maybe_single().execute() returns None
    instead of a response with empty data when nothing matches.
    """
    if response is None:
        return None
    data = getattr(response, "data", None)
    if isinstance(data, list):
        return data[0] if data else None
    return data or None
