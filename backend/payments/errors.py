"""
Erreurs métier du checkout et traduction des erreurs Stripe.
Chaque erreur porte son code HTTP; le rendu JSON {"error": ...} est fait
par les gestionnaires d'exceptions (backend.app_setup.exceptions).
"""
import logging
import time
from typing import Optional

import stripe

logger = logging.getLogger(__name__)

# module backend.payments.errors
class CheckoutError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None, debug_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.debug_id = debug_id


class ValidationError(CheckoutError):
    status_code = 400


class NotFoundError(CheckoutError):
    status_code = 404


class UpstreamProviderError(CheckoutError):
    """Erreur renvoyée par Stripe, code HTTP selon le sous-type."""
    status_code = 502


class InternalError(CheckoutError):
    """Erreur opaque: le client ne reçoit qu'un debug_id, le détail reste dans les logs."""
    status_code = 500

    def __init__(self, message: str = "Payment processing failed", debug_id: Optional[str] = None):
        super().__init__(message, debug_id=debug_id or new_debug_id())


class WebhookSignatureError(CheckoutError):
    status_code = 400


def new_debug_id() -> str:
    return str(int(time.time() * 1000))


def stripe_message(exc: Exception) -> str:
    """Message brut Stripe (sans le préfixe 'Request req_...')."""
    return getattr(exc, "user_message", None) or str(exc)


def map_stripe_error(exc: Exception) -> CheckoutError:
    """
    Traduit une exception levée pendant la création de session:
    - CardError / InvalidRequestError -> 400
    - AuthenticationError -> 401, RateLimitError -> 429, APIError -> 502
    - tout le reste -> 500 opaque avec debug_id
    """
    if isinstance(exc, stripe.CardError):
        return UpstreamProviderError(f"Card error: {stripe_message(exc)}", status_code=400)
    if isinstance(exc, stripe.InvalidRequestError):
        return UpstreamProviderError(f"Invalid request: {stripe_message(exc)}", status_code=400)
    if isinstance(exc, stripe.APIError):
        return UpstreamProviderError("Stripe API is temporarily unavailable", status_code=502)
    if isinstance(exc, stripe.AuthenticationError):
        return UpstreamProviderError("Authentication with Stripe failed", status_code=401)
    if isinstance(exc, stripe.RateLimitError):
        return UpstreamProviderError("Too many requests to Stripe API", status_code=429)
    err = InternalError()
    logger.error("payments.errors unmapped error debug_id=%s type=%s: %s", err.debug_id, type(exc).__name__, exc)
    return err
