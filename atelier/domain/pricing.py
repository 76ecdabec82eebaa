"""Configuration pricing.

``resolve_price`` turns a product and a chosen configuration into a unit
price. It only reads the product's own option catalogs, so option ids that
belong to another product (or to nothing) simply contribute nothing.
The product argument is duck-typed: ORM models and plain test doubles
both work as long as they expose ``base_price``, ``material_options``,
``color_options``, ``sizes`` and ``fabrics``.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable, Mapping, Optional

from atelier.domain.configuration import COLOR, FABRIC, MATERIAL, SIZE, canonical_configuration

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# configuration key -> (product attribute, modifier attribute, display key, display attribute)
MODIFIER_GROUPS = (
    (MATERIAL, "material_options", "price_modifier", "materialName", "name"),
    (COLOR, "color_options", "price_modifier", "colorName", "name"),
    (FABRIC, "fabrics", "price", "fabricName", "name"),
)


def money(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def find_option(options: Optional[Iterable[Any]], option_id: Any) -> Optional[Any]:
    if not options or not isinstance(option_id, str):
        return None
    for option in options:
        if option.id == option_id:
            return option
    return None


def _modifier(option: Any, attribute: str) -> Decimal:
    try:
        return money(getattr(option, attribute, None))
    except (InvalidOperation, ValueError):
        return ZERO


def starting_price(product: Any, configuration: Mapping[str, Any]) -> Decimal:
    size = find_option(getattr(product, "sizes", None), configuration.get(SIZE))
    if size is not None and size.price is not None:
        return money(size.price)
    return money(product.base_price)


def resolve_price(product: Any, configuration: Optional[Mapping[str, Any]]) -> Decimal:
    config = canonical_configuration(configuration)
    total = starting_price(product, config)

    for key, attribute, modifier_attr, _, _ in MODIFIER_GROUPS:
        option = find_option(getattr(product, attribute, None), config.get(key))
        if option is not None:
            total += _modifier(option, modifier_attr)

    # catalog rules keep modifiers from going below zero; clamp in case they don't
    return max(money(total), ZERO)


def describe_configuration(product: Any, configuration: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Configuration plus human readable names for the selected options."""
    config = canonical_configuration(configuration)
    described = dict(config)

    for key, attribute, _, display_key, display_attr in MODIFIER_GROUPS:
        if key in config:
            option = find_option(getattr(product, attribute, None), config[key])
            described[display_key] = getattr(option, display_attr, None) if option else None

    if SIZE in config:
        size = find_option(getattr(product, "sizes", None), config[SIZE])
        described["sizeLabel"] = size.label if size else None

    return described


def calculate_shipping(subtotal: Decimal, threshold: Decimal, flat_fee: Decimal) -> Decimal:
    """Free shipping from ``threshold`` up, flat fee below it."""
    return ZERO if subtotal >= threshold else money(flat_fee)


def calculate_tax(subtotal: Decimal, rate: Decimal) -> Decimal:
    return money(subtotal * rate)
