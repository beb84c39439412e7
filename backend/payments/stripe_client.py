"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les objets Stripe sont convertis en dict pour le reste de l'application.
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

logger = logging.getLogger(__name__)

# module backend.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Soulève RuntimeError si la clé est absente (fatal au démarrage).
    """
    from backend import config
    if not config.STRIPE_SECRET_KEY:
        raise RuntimeError("STRIPE_SECRET_KEY is not set in environment variables")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe

def _to_dict(obj: Any) -> Dict[str, Any]:
    if obj is None:
        return {}
    if isinstance(obj, dict):
        return obj
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)

def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    customer_email: str,
    metadata: Dict[str, str],
    mode: str = "payment",
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe au format price_data
    - success_url / cancel_url: URLs de redirection du frontend
    - metadata: identifiants de commande (voir payments.metadata)
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://...", "metadata": {...}})
    """
    require_stripe()
    session = stripe.checkout.Session.create(
        payment_method_types=["card"],
        line_items=line_items,
        mode=mode,
        success_url=success_url,
        cancel_url=cancel_url,
        customer_email=customer_email,
        metadata=metadata,
    )
    return _to_dict(session)

def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "status", "payment_status", "customer_details", "metadata".
    """
    require_stripe()
    session = stripe.checkout.Session.retrieve(session_id)
    return _to_dict(session)

def construct_event(payload: bytes, sig_header: Optional[str], secret: Optional[str] = None) -> Dict[str, Any]:
    """
    Valide et parse un événement Stripe signé (webhook).
    - payload: body brut, jamais décodé en JSON avant la vérification
    - sig_header: en-tête Stripe-Signature
    - Lève stripe.SignatureVerificationError si la signature est invalide,
      ValueError si le payload signé n'est pas un objet JSON.
    """
    if secret is None:
        from backend.config import STRIPE_WEBHOOK_SECRET
        secret = STRIPE_WEBHOOK_SECRET
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, secret or "")
    except (AttributeError, TypeError) as e:
        # JSON valide mais pas un objet (ex: [] ou null)
        raise ValueError("Invalid payload: expected a JSON object") from e
    return _to_dict(event)
