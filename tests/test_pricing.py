from __future__ import annotations

from decimal import Decimal

import pytest

from utils.errors import ValidationError
from utils.pricing import (
    CARD_UNIT_PRICES,
    card_order_total,
    card_unit_price,
    effective_price,
    line_total,
    variant_surcharge,
)
from utils.qr_schema import CatalogItem


def _item(price, variants=None) -> CatalogItem:
    return CatalogItem.model_validate({"name": "Pizza", "price": price, "variants": variants or []})


SIZED = [
    {
        "name": "Size",
        "options": [
            {"name": "Small", "price": 0},
            {"name": "Large", "price": 100},
        ],
    },
    {
        "name": "Crust",
        "options": [
            {"name": "Thin", "price": -50},
            {"name": "Cheese", "price": 80},
        ],
    },
]


def test_item_without_variants_costs_its_price():
    item = _item(500)
    assert effective_price(item, {}) == Decimal("500.00")
    assert effective_price(item, None) == Decimal("500.00")
    assert effective_price(item, {"Size": "Large"}) == Decimal("500.00")


def test_surcharges_of_selected_options_are_added():
    item = _item(500, SIZED)
    assert effective_price(item, {"Size": "Large", "Crust": "Cheese"}) == Decimal("680.00")


def test_selection_order_does_not_matter():
    item = _item(500, SIZED)
    forward = {"Size": "Large", "Crust": "Thin"}
    backward = {"Crust": "Thin", "Size": "Large"}
    assert effective_price(item, forward) == effective_price(item, backward) == Decimal("550.00")


def test_unknown_variant_or_option_adds_nothing():
    item = _item(500, SIZED)
    assert variant_surcharge(item, {"Colour": "Red"}) == Decimal("0")
    assert variant_surcharge(item, {"Size": "Gigantic"}) == Decimal("0")
    assert variant_surcharge(item, {"Size": ""}) == Decimal("0")


def test_negative_surcharge_never_goes_below_zero():
    item = _item(30, SIZED)
    assert effective_price(item, {"Crust": "Thin"}) == Decimal("0.00")


def test_line_total_multiplies_unit_price():
    item = _item(500, SIZED)
    assert line_total(item, {"Size": "Large"}, 3) == Decimal("1800.00")


def test_decimal_prices_round_half_up():
    item = _item("0.125")
    assert effective_price(item) == Decimal("0.13")


def test_card_price_table():
    assert CARD_UNIT_PRICES["nfc"] == Decimal("2.00")
    assert card_unit_price("Business") == Decimal("0.50")
    assert card_order_total("stickers", 250) == Decimal("50.00")
    assert card_order_total("tags", 10) == Decimal("3.00")


def test_unknown_card_type_is_rejected():
    with pytest.raises(ValidationError) as excinfo:
        card_unit_price("hologram")
    assert excinfo.value.fields[0]["field"] == "cardType"


def test_card_quantity_must_be_positive():
    with pytest.raises(ValidationError) as excinfo:
        card_order_total("nfc", 0)
    assert excinfo.value.fields[0]["field"] == "cardQuantity"
