"""
Lifespan FastAPI: vérifications de démarrage.
- STRIPE_SECRET_KEY absente: fatal, SystemExit(1) avant de servir la moindre requête
  (sous uvicorn, le démarrage échoue avec le code de sortie propre à uvicorn).
- Clé publique / secret webhook absents: simple avertissement.
- Journalise le préfixe masqué de la clé, l'URL du frontend et le stockage des commandes.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI

from backend import config
from backend.payments import stripe_client

def check_startup_config(logger: logging.Logger = None) -> None:
    """
    Valide la configuration Stripe avant de servir la moindre requête.
    - Lève SystemExit(1) si la clé secrète manque (même contrat que `python -m backend`).
    """
    logger = logger or logging.getLogger("uvicorn.error")
    try:
        stripe_client.require_stripe()
    except RuntimeError as e:
        logger.error("%s", e)
        raise SystemExit(1)

    logger.info("Stripe key loaded: %s...", config.STRIPE_SECRET_KEY[:10])
    if not config.STRIPE_WEBHOOK_SECRET:
        logger.warning("STRIPE_WEBHOOK_SECRET is not set: every webhook call will be rejected")
    if not config.STRIPE_PUBLISHABLE_KEY:
        logger.warning("STRIPE_PUBLISHABLE_KEY is not set")
    logger.info("Frontend URL: %s", config.FRONTEND_URL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Phase startup: check_startup_config puis état exposé sur app.state.
    Phase shutdown: rien à libérer (pas de pool, pas de tâche de fond).
    """
    logger = logging.getLogger("uvicorn.error")
    check_startup_config(logger)
    app.state.order_store_backend = config.ORDER_STORE_BACKEND
    logger.info("Order store backend: %s", config.ORDER_STORE_BACKEND)
    yield
