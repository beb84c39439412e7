"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique panier, metadata Stripe, client Stripe et erreurs.
Les cas d'usage (service) et les vues s'importent explicitement.
"""

from .cart import build_line_items, validate_line_items, order_total, to_cents, shipping_line_item
from .metadata import make_metadata, new_order_id, new_order_reference, extract_order_ids
from .stripe_client import require_stripe, create_session, get_session, construct_event
from .errors import (
    CheckoutError,
    ValidationError,
    NotFoundError,
    UpstreamProviderError,
    InternalError,
    WebhookSignatureError,
    map_stripe_error,
)
from .models import LineItem, OrderRecord, SessionStatus, ORDER_STATUS_PENDING

__all__ = [
    # cart
    "build_line_items",
    "validate_line_items",
    "order_total",
    "to_cents",
    "shipping_line_item",
    # metadata
    "make_metadata",
    "new_order_id",
    "new_order_reference",
    "extract_order_ids",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "construct_event",
    # errors
    "CheckoutError",
    "ValidationError",
    "NotFoundError",
    "UpstreamProviderError",
    "InternalError",
    "WebhookSignatureError",
    "map_stripe_error",
    # models
    "LineItem",
    "OrderRecord",
    "SessionStatus",
    "ORDER_STATUS_PENDING",
]
