"""
Modèles pydantic de la feature 'payments'.
- LineItem: ligne de paiement côté Stripe (montant en centimes).
- OrderRecord: commande persistée (clés camelCase dans le fichier JSON).
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

ORDER_STATUS_PENDING = "pending_payment"

# module backend.payments.models
class LineItem(BaseModel):
    name: str
    description: str
    images: List[str] = Field(default_factory=list)
    unit_amount_cents: int
    quantity: int

    def to_stripe(self, currency: str = "usd") -> Dict[str, Any]:
        """Format attendu par stripe.checkout.Session.create (price_data)."""
        product_data: Dict[str, Any] = {"name": self.name, "description": self.description}
        if self.images:
            product_data["images"] = list(self.images)
        return {
            "price_data": {
                "currency": currency,
                "product_data": product_data,
                "unit_amount": self.unit_amount_cents,
            },
            "quantity": self.quantity,
        }


class OrderRecord(BaseModel):
    """
    Commande créée à la création d'une session Checkout.
    - customer_info / cart_items sont conservés tels que reçus du client.
    - total_amount en dollars, frais de port inclus.
    """
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(alias="orderId")
    order_reference: str = Field(alias="orderReference")
    customer_info: Dict[str, Any] = Field(alias="customerInfo")
    cart_items: List[Dict[str, Any]] = Field(alias="cartItems")
    total_amount: float = Field(alias="totalAmount")
    stripe_session_id: str = Field(alias="stripeSessionId")
    created_at: str = Field(alias="createdAt")
    status: str = ORDER_STATUS_PENDING

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_view(self) -> Dict[str, Any]:
        """Vue réduite renvoyée au frontend: le panier est réduit à un compteur."""
        return {
            "orderId": self.order_id,
            "customerInfo": self.customer_info,
            "itemCount": len(self.cart_items),
            "totalAmount": self.total_amount,
            "createdAt": self.created_at,
            "status": self.status,
        }


class SessionStatus(BaseModel):
    status: Optional[str] = None
    payment_status: Optional[str] = None
    customer_details: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
