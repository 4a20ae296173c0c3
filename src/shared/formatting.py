"""Display formatting for prices, dates and delivery addresses.

Prices are three-decimal KWD amounts. Amounts arriving from the cart are
strings and may be missing or garbage, so ``parse_amount`` never raises.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any

import structlog

logger = structlog.get_logger(__name__)

PRICE_QUANTUM = Decimal("0.001")


def parse_amount(value: Any) -> Decimal:
    """Parse a price-like value, treating missing or unparseable input as 0."""
    if value is None or value == "":
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def quantize_amount(amount: Decimal) -> Decimal:
    # Widen the context so very large amounts keep their three decimals
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, amount.adjusted() + 4)
        return amount.quantize(PRICE_QUANTUM)


def format_amount(value: Any) -> str:
    """``2.5`` → ``"2.500"``."""
    return f"{quantize_amount(parse_amount(value))}"


def format_price(value: Any, currency: str = "KWD") -> str:
    """``"7.5"`` → ``"7.500 KWD"``."""
    return f"{format_amount(value)} {currency}"


def format_date(value: datetime | str | None) -> str:
    if not value:
        return "N/A"

    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.error("Error formatting date", value=value)
            return "Invalid date"

    return f"{value:%B} {value.day}, {value.year} at {value:%I:%M %p}"


def format_address(address: Mapping[str, Any] | Any | None) -> str:
    """Render a delivery address on one line."""
    if address is None:
        return "No address provided"
    if not isinstance(address, Mapping):
        address = address.to_dict()

    def part(name: str) -> str:
        return address.get(name) or ""

    parts = []
    if part("first_name") or part("last_name"):
        parts.append(f"{part('first_name')} {part('last_name')}".strip())
    if part("address1"):
        parts.append(part("address1"))
    if part("address2"):
        parts.append(part("address2"))
    if part("city") or part("province") or part("zip"):
        parts.append(f"{part('city')}, {part('province')} {part('zip')}".strip())
    if part("country"):
        parts.append(part("country"))

    return ", ".join(parts) or "No address provided"
