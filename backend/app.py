# module backend.app
"""
Application FastAPI globale.
Toute la configuration (CORS, handlers, routers, lifespan) est faite par
backend.app_setup.factory.create_app; ce module n'expose que l'instance `app`.
"""
from backend.app_setup.factory import create_app

# App globale
app = create_app()
