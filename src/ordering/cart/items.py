"""Cart line items and their customizations.

Line items are value objects: a cart change replaces a line, never edits it
in place. The persisted cart record is a JSON list of line items in
camelCase (``variantId``, ``variantTitle``, ``toppingNames``); Python code
uses the snake_case field names.
"""

import json
from decimal import Decimal as D
from enum import Enum
from typing import Any

from protean import invariant
from protean.fields import Decimal, Integer, List, String, Text, ValueObject

from ordering.domain import ordering
from shared.errors import ValidationError
from shared.formatting import parse_amount

MAX_TOPPINGS = 3


class ToppingCategory(Enum):
    ADDONS = "addons"
    SAUCES = "sauces"


@ordering.value_object
class ContainerOption:
    id = String(required=True, max_length=100)
    name = String(required=True, max_length=100, sanitize=False)
    price = Decimal(default=D("0"))


@ordering.value_object
class Topping:
    id = String(required=True, max_length=100)
    name = String(required=True, max_length=100, sanitize=False)
    price = Decimal(default=D("0"))
    category = String(required=True, choices=ToppingCategory)


@ordering.value_object
class Customizations:
    container = ValueObject(ContainerOption)
    toppings = List(content_type=ValueObject(Topping))
    topping_names = String(max_length=500, sanitize=False)

    @invariant.post
    def at_most_three_toppings(self):
        if len(self.toppings or []) > MAX_TOPPINGS:
            raise ValidationError({"toppings": [f"At most {MAX_TOPPINGS} toppings can be chosen"]})

    @property
    def container_name(self) -> str | None:
        return self.container.name if self.container is not None else None

    @property
    def topping_display(self) -> str | None:
        """Topping names as one display string, e.g. ``"Oreo Crumbs, Honey"``."""
        if self.topping_names:
            return self.topping_names
        if self.toppings:
            return ", ".join(t.name for t in self.toppings)
        return None


@ordering.value_object
class CartLineItem:
    """One line of the cart, keyed by ``variant_id``."""

    variant_id = String(required=True, min_length=1, max_length=100)
    quantity = Integer(required=True, min_value=1)
    title = String(max_length=255, sanitize=False)
    price = String(max_length=50)
    image = Text(sanitize=False)
    variant_title = String(max_length=255, sanitize=False)
    customizations = ValueObject(Customizations)

    @property
    def unit_price(self) -> D:
        return parse_amount(self.price)

    @property
    def line_total(self) -> D:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "CartLineItem":
        return self.replace(quantity=quantity)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "CartLineItem":
        """Build a line from its persisted (camelCase) or snake_case shape."""
        if not isinstance(record, dict):
            raise ValidationError({"item": ["Cart line must be an object"]})

        customizations = _pick(record, "customizations")
        return cls(
            variant_id=_pick(record, "variant_id", "variantId"),
            quantity=_pick(record, "quantity"),
            title=_pick(record, "title"),
            price=_as_text(_pick(record, "price")),
            image=_pick(record, "image"),
            variant_title=_pick(record, "variant_title", "variantTitle"),
            customizations=_customizations_from_record(customizations) if customizations else None,
        )

    def to_record(self) -> dict[str, Any]:
        record = {
            "variantId": self.variant_id,
            "quantity": self.quantity,
            "title": self.title,
            "price": self.price,
            "image": self.image,
            "variantTitle": self.variant_title,
        }
        if self.customizations is not None:
            record["customizations"] = _customizations_to_record(self.customizations)
        return {key: value for key, value in record.items() if value is not None}


def _pick(record: dict[str, Any], *names: str) -> Any:
    for name in names:
        if record.get(name) is not None:
            return record[name]
    return None


def _as_text(value: Any) -> str | None:
    # Prices may arrive as JSON numbers
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _customizations_from_record(record: dict[str, Any]) -> Customizations:
    container = _pick(record, "container")
    return Customizations(
        container=ContainerOption(**container) if container else None,
        toppings=[Topping(**topping) for topping in _pick(record, "toppings") or []],
        topping_names=_pick(record, "topping_names", "toppingNames"),
    )


def _customizations_to_record(customizations: Customizations) -> dict[str, Any]:
    record: dict[str, Any] = {}
    if customizations.container is not None:
        record["container"] = {
            "id": customizations.container.id,
            "name": customizations.container.name,
            "price": str(customizations.container.price),
        }
    if customizations.toppings:
        record["toppings"] = [
            {"id": t.id, "name": t.name, "price": str(t.price), "category": t.category} for t in customizations.toppings
        ]
    if customizations.topping_names:
        record["toppingNames"] = customizations.topping_names
    return record


def dump_cart(items: list[CartLineItem] | tuple[CartLineItem, ...]) -> str:
    """Serialize a cart snapshot into its persisted JSON shape."""
    return json.dumps([item.to_record() for item in items])


def load_cart(raw: str) -> list[CartLineItem]:
    """Parse a persisted cart record; raises ``ValidationError`` when corrupt."""
    try:
        records = json.loads(raw)
    except ValueError as exc:
        raise ValidationError({"cart": [f"Cart record is not valid JSON: {exc}"]}) from exc
    if not isinstance(records, list):
        raise ValidationError({"cart": ["Cart record must be a list of line items"]})
    return [CartLineItem.from_record(record) for record in records]
