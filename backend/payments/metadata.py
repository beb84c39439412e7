"""
Identifiants de commande et métadonnées Stripe de la session Checkout.
Stripe limite les métadonnées (valeurs str, ~500 caractères au total):
seuls des identifiants courts et le nom client tronqué y sont stockés.
"""
import secrets
import string
import time
from typing import Any, Dict, Optional

CUSTOMER_NAME_MAX = 100
_ID_ALPHABET = string.ascii_lowercase + string.digits

# module backend.payments.metadata
def _now_ms() -> int:
    return int(time.time() * 1000)

def new_order_id(now_ms: Optional[int] = None) -> str:
    """order_<epochMillis>_<9 caractères [a-z0-9]>"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"order_{now_ms if now_ms is not None else _now_ms()}_{suffix}"

def new_order_reference(now_ms: Optional[int] = None) -> str:
    return f"ref_{now_ms if now_ms is not None else _now_ms()}"

def customer_name(customer_info: Dict[str, Any]) -> str:
    first = customer_info.get("firstName") or ""
    last = customer_info.get("lastName") or ""
    return f"{first} {last}".strip()[:CUSTOMER_NAME_MAX]

def make_metadata(customer_info: Dict[str, Any], item_count: int) -> Dict[str, str]:
    """
    Sérialise les métadonnées Stripe associées à la session.
    - orderId / orderReference: identifiants générés ici, repris dans la commande.
    - itemCount: nombre de lignes du panier (hors frais de port).
    - customerName: tronqué à 100 caractères.
    """
    now_ms = _now_ms()
    return {
        "orderId": new_order_id(now_ms),
        "customerEmail": str(customer_info.get("email") or ""),
        "itemCount": str(item_count),
        "customerName": customer_name(customer_info),
        "orderReference": new_order_reference(now_ms),
    }

def extract_order_ids(session: Dict[str, Any], fallback: Dict[str, str]) -> Dict[str, str]:
    """
    Extrait (orderId, orderReference) depuis la session Stripe créée.
    - Tolérant: reprend les valeurs envoyées si la réponse ne les contient pas.
    """
    meta = (session or {}).get("metadata") or {}
    return {
        "orderId": meta.get("orderId") or fallback["orderId"],
        "orderReference": meta.get("orderReference") or fallback["orderReference"],
    }
