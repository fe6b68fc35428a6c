from functools import lru_cache

from supabase import create_client, Client
from cloud_ide.core.config import settings


@lru_cache
def get_supabase() -> Client:
    """Create the Supabase client on first use."""
    return create_client(settings.supabase_url, settings.supabase_key)
