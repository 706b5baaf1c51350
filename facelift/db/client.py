"""Supabase client initialization."""

from supabase import Client, create_client

from facelift.config import get_settings


def get_supabase_client() -> Client:
    """Get Supabase client instance.

    Raises:
        RuntimeError: If the Supabase URL or service key is not configured
    """
    settings = get_settings()
    if not settings.supabase_url or not settings.supabase_service_key:
        raise RuntimeError("Supabase is not configured (SUPABASE_URL / SUPABASE_SERVICE_KEY)")
    return create_client(settings.supabase_url, settings.supabase_service_key)
