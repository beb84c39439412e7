import json
import pytest

from backend.payments import build_line_items, order_total, to_cents, ValidationError
from backend.payments.cart import SHIPPING_NAME, SHIPPING_DESCRIPTION


def _item(price, quantity=1, **product):
    product.setdefault("id", "p")
    product.setdefault("title", "Produit")
    product["price"] = price
    return {"product": product, "quantity": quantity}


def test_shirt_cart_with_shipping(shirt_cart):
    line_items = build_line_items(shirt_cart, 50)
    assert [(li.unit_amount_cents, li.quantity) for li in line_items] == [(1999, 2), (5000, 1)]
    assert line_items[0].name == "Shirt"
    assert line_items[0].description == "Product ID: p1"
    assert line_items[1].name == SHIPPING_NAME
    assert line_items[1].description == SHIPPING_DESCRIPTION
    assert order_total(line_items) == pytest.approx(89.98)


@pytest.mark.parametrize("cart, shipping", [
    ([_item(10, 1)], 50),
    ([_item(10, 1)], 0),
    ([_item(1.5, 3), _item(2.25, 2), _item(100, 1)], 50),
    ([_item(0.01, 7), _item(999.99, 1)], 0),
])
def test_length_and_total_match_cart(cart, shipping):
    line_items = build_line_items(cart, shipping)
    assert len(line_items) == len(cart) + (1 if shipping > 0 else 0)
    subtotal = sum(it["product"]["price"] * it["quantity"] for it in cart)
    assert order_total(line_items) == pytest.approx(subtotal + shipping)


def test_missing_product_names_index():
    cart = [_item(10, 1), {"quantity": 1}, _item(5, 1)]
    with pytest.raises(ValidationError) as exc:
        build_line_items(cart, 50)
    assert exc.value.message == "Missing product data for item 1"
    assert exc.value.status_code == 400


def test_product_defaults_applied():
    # Prix fourni, le reste manquant -> valeurs par défaut
    line_items = build_line_items([{"product": {"price": 3}, "quantity": 1}], 0)
    li = line_items[0]
    assert li.name == "Unknown Product"
    assert li.description == "Product ID: item_0"
    assert li.images == []


def test_only_first_image_kept():
    cart = [_item(10, 1, images=["a.png", "b.png", "c.png"])]
    li = build_line_items(cart, 0)[0]
    assert li.images == ["a.png"]
    assert li.to_stripe()["price_data"]["product_data"]["images"] == ["a.png"]


@pytest.mark.parametrize("images", [[None], [""], ["   "], [42, "b.png"], "a.png", None])
def test_unusable_first_image_is_dropped(images):
    li = build_line_items([_item(10, 1, images=images)], 0)[0]
    assert li.images == []
    assert "images" not in li.to_stripe()["price_data"]["product_data"]


def test_missing_price_rejected():
    cart = [{"product": {"id": "p1", "title": "Sans prix"}, "quantity": 1}]
    with pytest.raises(ValidationError) as exc:
        build_line_items(cart, 50)
    assert exc.value.message == "Item 0: Missing price amount"


def test_negative_price_rejected():
    with pytest.raises(ValidationError) as exc:
        build_line_items([_item(10, 1), _item(-4, 1)], 50)
    assert exc.value.message == "Item 1: Invalid price amount"


@pytest.mark.parametrize("quantity", [0, -2, None, "abc", 1.5, True])
def test_invalid_quantity_rejected(quantity):
    with pytest.raises(ValidationError) as exc:
        build_line_items([_item(10, quantity)], 50)
    assert exc.value.message == "Item 0: Invalid quantity"


def test_empty_cart_rejected():
    with pytest.raises(ValidationError):
        build_line_items([], 50)


def test_builder_is_deterministic(shirt_cart):
    first = [li.model_dump() for li in build_line_items(shirt_cart, 50)]
    second = [li.model_dump() for li in build_line_items(shirt_cart, 50)]
    assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)


def test_builder_does_not_mutate_cart(shirt_cart):
    before = json.dumps(shirt_cart, sort_keys=True)
    build_line_items(shirt_cart, 50)
    assert json.dumps(shirt_cart, sort_keys=True) == before


@pytest.mark.parametrize("price, cents", [
    (19.99, 1999),
    (0.125, 13),   # demi vers le haut
    ("7.3", 730),
    (1.005, 101),  # arrondi décimal, pas flottant
    (10, 1000),
    ("abc", 0),
    (None, 0),
    (float("nan"), 0),
])
def test_to_cents(price, cents):
    assert to_cents(price) == cents


def test_stripe_line_item_format(shirt_cart):
    shipping = build_line_items(shirt_cart, 50)[-1].to_stripe()
    assert shipping == {
        "price_data": {
            "currency": "usd",
            "product_data": {"name": "Shipping Cost", "description": "Express delivery (3-4 days via Fedex)"},
            "unit_amount": 5000,
        },
        "quantity": 1,
    }
