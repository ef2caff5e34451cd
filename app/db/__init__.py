from .supabase_client import SupabaseClient, get_supabase

__all__ = ["SupabaseClient", "get_supabase"]
