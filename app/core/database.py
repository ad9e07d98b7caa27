"""
Supabase database client
"""
from functools import lru_cache
from typing import Optional
from supabase import Client, create_client

from app.core.config import Settings, get_settings
from app.domain.exceptions import ConfigurationError


@lru_cache()
def _create_admin_client(url: str, service_role_key: str) -> Client:
    return create_client(url, service_role_key)


def get_supabase_admin_client(settings: Optional[Settings] = None) -> Optional[Client]:
    """
    Get Supabase client with the service role key (cached) - bypasses RLS.

    Returns None when storage is not configured; callers treat that as
    "storage tier unavailable" rather than an error.
    """
    settings = settings or get_settings()
    if not settings.storage_configured:
        return None
    return _create_admin_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def get_supabase_user_client(token: str, settings: Optional[Settings] = None) -> Client:
    """
    Get Supabase client with the caller's JWT for RLS-aware reads.

    Args:
        token: Authorization header value forwarded from the caller
        settings: Settings to read the project URL and anon key from

    Raises:
        ConfigurationError: If SUPABASE_URL or SUPABASE_ANON_KEY is missing
    """
    settings = settings or get_settings()
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        raise ConfigurationError("Supabase Configuration Missing")

    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    client.postgrest.auth(strip_bearer(token))
    return client


def strip_bearer(token: str) -> str:
    """Remove a leading 'Bearer ' from an Authorization header value"""
    if token.startswith("Bearer "):
        return token[len("Bearer "):]
    return token
