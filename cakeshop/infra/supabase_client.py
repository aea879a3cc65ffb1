"""
Clients Supabase.

Les clients anon et service sont construits une seule fois au démarrage
(lifespan) et rangés dans app.state; les routes les reçoivent via les
dépendances get_db / get_service_db, que les tests remplacent par
app.dependency_overrides.
"""
from typing import Optional
from fastapi import Request
from supabase import create_client, Client
from cakeshop.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY


def create_anon_client() -> Client:
    return create_client(SUPABASE_URL, SUPABASE_ANON)


def create_service_client() -> Optional[Client]:
    """Client service-role (bypass RLS); None si SUPABASE_SERVICE_KEY absent."""
    if not SUPABASE_SERVICE_KEY:
        return None
    return create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)


def get_db(request: Request) -> Client:
    client = getattr(request.app.state, "supabase", None)
    if client is None:
        raise RuntimeError("Client Supabase non initialisé (lifespan non exécuté ?)")
    return client


def get_service_db(request: Request) -> Client:
    """Client service-role si disponible, sinon le client anon (RLS)."""
    client = getattr(request.app.state, "service_supabase", None)
    return client if client is not None else get_db(request)
