"""
Gestionnaires d’exceptions utilisés par la factory.
- CheckoutError (et sous-classes): JSON {"error": message} (+ debug_id si présent).
- HTTPException (FastAPI et Starlette, 404 de routes inclus): même convention {"error": detail} pour toute l'API.
Le webhook Stripe répond lui-même en texte brut sur erreur de signature.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.payments.errors import CheckoutError

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers d'erreurs métier et HTTP.
    - Aucun détail interne (trace, exception brute) n'est renvoyé au client.
    """
    @app.exception_handler(CheckoutError)
    async def checkout_error_handler(request: Request, exc: CheckoutError):
        content = {"error": exc.message}
        if exc.debug_id:
            content["debug_id"] = exc.debug_id
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )
