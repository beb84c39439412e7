"""
Registre central des routers.
- Payments: checkout, sessions Stripe, commandes, webhook (chemins racine, contrat du frontend)
- Health: health_router
"""
from fastapi import FastAPI
from backend.payments import views as payments_views
from backend.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
