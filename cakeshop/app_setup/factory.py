"""
Factory d’application pour les entrypoints (cakeshop.asgi, tests).
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_security_middleware, register_no_cache_middleware
from .exceptions import register_exception_handlers
from .routers import register_routers


def create_app() -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - middlewares (session, CORS, hosts, sécurité, no-cache)
      - gestionnaires d’exceptions
      - tous les routers (API v1, admin, health)
    """
    app = FastAPI(title="Cake Shop", lifespan=lifespan)
    register_basic_middlewares(app)
    register_security_middleware(app)
    register_no_cache_middleware(app)
    register_exception_handlers(app)
    register_routers(app)
    return app
