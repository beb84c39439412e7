"""
Factory d’application recommandée pour les entrypoints (ex: backend.asgi).
Ordonne les étapes d’initialisation de manière lisible et testable.
"""
from fastapi import FastAPI
from .lifespan import lifespan
from .middlewares import register_basic_middlewares, register_request_logging_middleware
from .exceptions import register_exception_handlers
from .routes import register_routes
from .routers import register_routers

def create_app() -> FastAPI:
    """
    Construit l’app FastAPI avec le lifespan et enregistre:
      - middlewares de base (CORS, proxy) et log des requêtes
      - gestionnaires d’exceptions ({"error": ...}) et routes simples
      - routers (payments, health)
    Retour:
      FastAPI prêt à être utilisé par le serveur ASGI.
    """
    app = FastAPI(title="Ecommerce Stripe Backend", lifespan=lifespan)
    register_request_logging_middleware(app)
    register_basic_middlewares(app)
    register_exception_handlers(app)
    register_routes(app)
    register_routers(app)
    return app
