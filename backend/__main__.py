"""
Point d'entrée principal pour le backend FastAPI.

Usage:
    python -m backend

Ce mode vérifie la configuration Stripe puis lance uvicorn. Variables d'environnement lues:
- STRIPE_SECRET_KEY: obligatoire, sinon arrêt immédiat (exit 1)
- PORT: port d'écoute (par défaut 4242)
- UVICORN_RELOAD: active le reload auto en dev ("1"/"true"/"yes")
- LOG_LEVEL: niveau de logs uvicorn (ex: "info", "debug")
"""
import logging
import os

import uvicorn

from backend.config import PORT
from backend.app_setup.lifespan import check_startup_config


def main() -> None:
    log_level = os.environ.get("LOG_LEVEL", "info")
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s:     %(name)s - %(message)s")
    # Échoue avant d'ouvrir le port si la clé Stripe manque
    check_startup_config(logging.getLogger("backend"))
    # Activer le reload uniquement si explicitement demandé (ex: en local)
    reload_flag = os.environ.get("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    uvicorn.run(
        "backend.asgi:app",  # on réutilise l'ASGI app unique
        host="0.0.0.0",
        port=PORT,
        reload=reload_flag,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
