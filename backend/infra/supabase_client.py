from typing import Optional
from supabase import create_client, Client
from backend import config

_service_supabase: Optional[Client] = None

def get_service_supabase() -> Client:
    """
    Client Supabase service-role (écritures serveur, bypass RLS).
    Utilisé uniquement par le stockage des commandes ORDER_STORE_BACKEND=supabase.
    """
    global _service_supabase
    if not config.SUPABASE_URL or not config.SUPABASE_SERVICE_KEY:
        raise RuntimeError("SUPABASE_URL / SUPABASE_SERVICE_KEY manquants pour get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)
    return _service_supabase
