"""Cart totals shown on the cart page: subtotal, shipping fee and total.

Shipping is a fixed threshold rule: free from ``FREE_SHIPPING_THRESHOLD``
upwards, a flat ``SHIPPING_FEE`` below it.
"""

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel

from ordering.cart.items import CartLineItem
from shared.config import get_settings


class CartSummary(BaseModel):
    subtotal: Decimal
    shipping_fee: Decimal
    total: Decimal


def calculate_subtotal(items: Iterable[CartLineItem]) -> Decimal:
    return sum((item.line_total for item in items), Decimal("0"))


def shipping_fee_for(subtotal: Decimal) -> Decimal:
    settings = get_settings()
    if subtotal >= settings.FREE_SHIPPING_THRESHOLD:
        return Decimal("0")
    return settings.SHIPPING_FEE


def summarize(items: Iterable[CartLineItem]) -> CartSummary:
    subtotal = calculate_subtotal(items)
    shipping_fee = shipping_fee_for(subtotal)
    return CartSummary(subtotal=subtotal, shipping_fee=shipping_fee, total=subtotal + shipping_fee)
