"""
Cas d'usage 'payments': orchestre cart, metadata, stripe et stockage des commandes.
Étapes du checkout, dans cet ordre strict:
  validation -> line items -> session Stripe -> enregistrement de la commande -> réponse
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import stripe

from backend import config
from backend.orders.repository import OrderStore
from . import cart as cart_logic
from . import metadata as meta
from . import stripe_client
from .errors import (
    InternalError,
    NotFoundError,
    UpstreamProviderError,
    ValidationError,
    WebhookSignatureError,
    map_stripe_error,
    stripe_message,
)
from .models import ORDER_STATUS_PENDING, OrderRecord, SessionStatus

logger = logging.getLogger(__name__)

# module backend.payments.service
def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

def validate_checkout_request(cart_items: Any, customer_info: Any) -> None:
    """
    Contrôles avant tout appel Stripe (fail fast, 400):
    - panier présent et non vide
    - infos client présentes
    - email client présent et contenant '@'
    """
    if not isinstance(cart_items, list) or not cart_items:
        raise ValidationError("Cart items are required")
    if not isinstance(customer_info, dict):
        raise ValidationError("Customer information is required")
    email = customer_info.get("email")
    if not isinstance(email, str) or "@" not in email:
        raise ValidationError("Valid customer email is required")

def redirect_urls(frontend_url: Optional[str] = None) -> Dict[str, str]:
    base = (frontend_url or config.FRONTEND_URL).rstrip("/")
    return {
        "success_url": f"{base}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{base}/checkout/cancel",
    }

def create_checkout_session(
    cart_items: Any,
    customer_info: Any,
    store: OrderStore,
    frontend_url: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Crée la session Stripe Checkout et enregistre la commande 'pending_payment'.
    - Retour: {"sessionId": ..., "url": ...}
    - Erreurs: ValidationError (400), UpstreamProviderError (400/401/429/502),
      InternalError (500 opaque, debug_id) y compris si l'enregistrement échoue
      après la création de la session.
    """
    try:
        validate_checkout_request(cart_items, customer_info)
        line_items = cart_logic.build_line_items(cart_items, config.SHIPPING_COST)
        if not line_items:
            raise ValidationError("No valid items in cart")
    except ValidationError as e:
        logger.info("payments.checkout validation failed: %s", e.message)
        raise

    logger.info("payments.checkout items=%s line_items=%s", len(cart_items), len(line_items))
    metadata = meta.make_metadata(customer_info, item_count=len(cart_items))
    urls = redirect_urls(frontend_url)

    try:
        session = stripe_client.create_session(
            line_items=[li.to_stripe() for li in line_items],
            success_url=urls["success_url"],
            cancel_url=urls["cancel_url"],
            customer_email=customer_info["email"],
            metadata=metadata,
        )
    except stripe.StripeError as e:
        logger.error(
            "payments.checkout stripe error type=%s message=%s code=%s param=%s",
            type(e).__name__, stripe_message(e), getattr(e, "code", None), getattr(e, "param", None),
        )
        raise map_stripe_error(e)
    except Exception:
        err = InternalError()
        logger.exception("payments.checkout session creation failed debug_id=%s", err.debug_id)
        raise err

    ids = meta.extract_order_ids(session, fallback=metadata)
    try:
        order = OrderRecord(
            order_id=ids["orderId"],
            order_reference=ids["orderReference"],
            customer_info=customer_info,
            cart_items=cart_items,
            total_amount=cart_logic.order_total(line_items),
            stripe_session_id=session["id"],
            created_at=_now_iso(),
            status=ORDER_STATUS_PENDING,
        )
        store.append(order)
    except Exception:
        # La session existe déjà chez Stripe: commande locale manquante
        err = InternalError()
        logger.exception(
            "payments.checkout order not stored debug_id=%s session_id=%s", err.debug_id, session.get("id")
        )
        raise err

    logger.info(
        "payments.checkout order stored order_id=%s email=%s items=%s total=%s session_id=%s",
        order.order_id, customer_info.get("email"), len(cart_items), order.total_amount, order.stripe_session_id,
    )
    return {"sessionId": session["id"], "url": session.get("url")}

def get_session_status(session_id: str) -> Dict[str, Any]:
    """
    Statut d'une session Stripe (lecture).
    - Toute erreur Stripe -> 500 avec le message brut.
    """
    try:
        session = stripe_client.get_session(session_id)
    except Exception as e:
        logger.exception("payments.get_session_status failed session_id=%s", session_id)
        raise UpstreamProviderError(stripe_message(e), status_code=500)
    return SessionStatus(
        status=session.get("status"),
        payment_status=session.get("payment_status"),
        customer_details=session.get("customer_details"),
        metadata=session.get("metadata"),
    ).model_dump()

def get_order_view(session_id: str, store: OrderStore) -> Dict[str, Any]:
    order = store.find_by_session_id(session_id)
    if not order:
        raise NotFoundError("Order not found")
    return order.to_view()

def list_orders(store: OrderStore) -> List[Dict[str, Any]]:
    return [order.to_json() for order in store.all()]

def handle_webhook(payload: bytes, sig_header: Optional[str]) -> Dict[str, Any]:
    """
    Webhook Stripe: vérifie la signature sur le body brut puis dispatch sur le type.
    - checkout.session.completed: journalisé (le statut de la commande n'est pas modifié).
    - Types inconnus: journalisés et acquittés de la même façon (pas de retry Stripe).
    - Signature/payload invalide: WebhookSignatureError (400 texte).
    """
    try:
        event = stripe_client.construct_event(payload, sig_header)
    except (ValueError, stripe.SignatureVerificationError) as e:
        message = stripe_message(e)
        logger.warning("Webhook Error: %s", message)
        raise WebhookSignatureError(message)

    event_type = event.get("type")
    if event_type == "checkout.session.completed":
        session = (event.get("data") or {}).get("object") or {}
        logger.info("Payment successful for session: %s", session.get("id"))
    else:
        logger.info("Unhandled event type %s", event_type)
    return {"received": True}
