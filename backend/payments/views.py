import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends, HTTPException
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from backend.orders.repository import OrderStore, get_order_store
from backend.payments import service as payments_service
from backend.payments.errors import CheckoutError, WebhookSignatureError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Payments API"])

# module backend.payments.views
@router.post("/create-checkout-session")
async def create_checkout_session(request: Request, store: OrderStore = Depends(get_order_store)):
    """
    Crée une session Checkout Stripe pour le panier envoyé par le frontend.
    - Entrée JSON: { "cartItems": [ { "product": {...}, "quantity": <int> } ], "customerInfo": {...} }
    - Étapes: validation -> line items -> session Stripe -> commande 'pending_payment'
    - Réponse: { "sessionId": "...", "url": "https://checkout.stripe.com/..." }
    - Erreurs: 400 (validation, carte, requête), 401/429/502 (Stripe), 500 opaque (debug_id)
    """
    try:
        body = await request.json()
    except Exception:
        body = {}
    if not isinstance(body, dict):
        body = {}

    # Appels Stripe + fichier bloquants: exécutés hors de la boucle d'événements
    result = await run_in_threadpool(
        payments_service.create_checkout_session,
        body.get("cartItems"),
        body.get("customerInfo"),
        store,
    )
    return JSONResponse(result)

@router.get("/checkout-session/{session_id}")
def get_checkout_session(session_id: str) -> Dict[str, Any]:
    """
    Statut de la session Stripe: {status, payment_status, customer_details, metadata}.
    - Erreurs Stripe: 500 avec le message brut.
    """
    return payments_service.get_session_status(session_id)

@router.get("/order/{session_id}")
def get_order(session_id: str, store: OrderStore = Depends(get_order_store)) -> Dict[str, Any]:
    """
    Détail d'une commande par identifiant de session Stripe (vue réduite).
    - 404 {"error": "Order not found"} si absente.
    """
    try:
        return payments_service.get_order_view(session_id, store)
    except CheckoutError:
        raise
    except Exception as e:
        logger.exception("Erreur get_order session_id=%s", session_id)
        raise HTTPException(status_code=500, detail=str(e))

@router.get("/orders")
def get_orders(store: OrderStore = Depends(get_order_store)):
    """Toutes les commandes (tests/admin, non authentifié)."""
    try:
        return payments_service.list_orders(store)
    except Exception as e:
        logger.exception("Erreur get_orders")
        raise HTTPException(status_code=500, detail=str(e))

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request):
    """
    Webhook Stripe: le body reste brut jusqu'à la vérification de signature.
    - Signature invalide: 400 texte "Webhook Error: <message>" (contrat Stripe, pas de JSON).
    - Sinon: {"received": true}, quel que soit le type d'événement.
    """
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    try:
        result = payments_service.handle_webhook(payload, sig_header)
    except WebhookSignatureError as e:
        return PlainTextResponse(f"Webhook Error: {e.message}", status_code=400)
    return JSONResponse(result)
