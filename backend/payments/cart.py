"""
Logique panier pure (pas de Stripe, pas de stockage).
Transforme le panier du frontend en LineItem et ajoute la ligne de frais de port.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List

from backend.config import SHIPPING_COST
from .errors import ValidationError
from .models import LineItem

SHIPPING_NAME = "Shipping Cost"
SHIPPING_DESCRIPTION = "Express delivery (3-4 days via Fedex)"

# module backend.payments.cart
def to_cents(price: Any) -> int:
    """
    Convertit un prix en dollars en centimes (arrondi au plus proche, demi vers le haut).
    - Arrondi décimal sur la représentation du prix: 1.005 -> 101
      (round(1.005 * 100) en flottant donnerait 100).
    - Autorise str|float|int.
    - Retourne 0 si parsing impossible.
    """
    if isinstance(price, bool):
        return 0
    try:
        value = Decimal(str(price)) * 100
    except (InvalidOperation, ValueError):
        return 0
    if not value.is_finite():
        return 0
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

def _quantity(raw: Any) -> int:
    # Quantité absente, booléenne ou non entière -> 0 (rejetée à la validation)
    if raw is None or isinstance(raw, bool):
        return 0
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0

def _product(item: Any, index: int) -> Dict[str, Any]:
    product = item.get("product") if isinstance(item, dict) else None
    if not isinstance(product, dict):
        raise ValidationError(f"Missing product data for item {index}")
    images = product.get("images")
    first_image = images[0] if isinstance(images, list) and images else None
    return {
        "id": product.get("id") or f"item_{index}",
        "title": product.get("title") or "Unknown Product",
        "price": product.get("price") if product.get("price") is not None else 0,
        "images": [first_image] if isinstance(first_image, str) and first_image.strip() else [],
    }

def shipping_line_item(shipping_cost: float) -> LineItem:
    return LineItem(
        name=SHIPPING_NAME,
        description=SHIPPING_DESCRIPTION,
        unit_amount_cents=to_cents(shipping_cost),
        quantity=1,
    )

def validate_line_items(line_items: List[LineItem]) -> None:
    """
    Vérifie chaque ligne avant l'appel Stripe.
    - unit_amount_cents manquant (0) ou négatif, quantity <= 0
    - Soulève ValidationError avec l'index de la première ligne fautive.
    """
    for i, item in enumerate(line_items):
        if not item.unit_amount_cents:
            raise ValidationError(f"Item {i}: Missing price amount")
        if item.unit_amount_cents < 0:
            raise ValidationError(f"Item {i}: Invalid price amount")
        if item.quantity <= 0:
            raise ValidationError(f"Item {i}: Invalid quantity")

def build_line_items(cart_items: List[Dict[str, Any]], shipping_cost: float = SHIPPING_COST) -> List[LineItem]:
    """
    Construit les LineItem à partir du panier brut.
    - Valeurs par défaut pour les champs produit manquants (id, title, price, images).
    - Une seule image transmise à Stripe (la première, ignorée si vide ou non textuelle).
    - Ajoute la ligne "Shipping Cost" si shipping_cost > 0.
    - Soulève ValidationError si le panier est vide, si un produit manque
      ou si une ligne construite est invalide (aucune liste partielle).
    """
    if not cart_items:
        raise ValidationError("Cart items are required")

    line_items: List[LineItem] = []
    for i, item in enumerate(cart_items):
        product = _product(item, i)
        line_items.append(LineItem(
            name=str(product["title"]),
            description=f"Product ID: {product['id']}",
            images=product["images"],
            unit_amount_cents=to_cents(product["price"]),
            quantity=_quantity(item.get("quantity")),
        ))

    if shipping_cost > 0:
        line_items.append(shipping_line_item(shipping_cost))

    validate_line_items(line_items)
    return line_items

def order_total(line_items: List[LineItem]) -> float:
    """Total en dollars recalculé depuis les lignes (frais de port inclus)."""
    return sum(li.unit_amount_cents * li.quantity for li in line_items) / 100
