"""
Fatebound Breach - Supabase Client

Cached factory for the Supabase client used by the persistence boundary.
"""

from functools import lru_cache

from supabase import Client, create_client

from src.config.settings import Settings, get_settings


def create_supabase_client(settings: Settings) -> Client:
    """Create a Supabase client from explicit settings."""
    return create_client(settings.supabase_url, settings.supabase_anon_key)


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Create and cache a Supabase client from environment settings."""
    return create_supabase_client(get_settings())
