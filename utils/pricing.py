# =============================================================================
# 💰 utils/pricing.py
# -----------------------------------------------------------------------------
# Preisberechnung für Artikel mit Varianten und für Karten-Bestellungen.
# Wird bei jeder Bestellung serverseitig neu ausgeführt – Preise aus dem
# Client werden nie übernommen.
# =============================================================================

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Mapping, Optional

from utils.errors import ValidationError
from utils.qr_schema import CatalogItem

CENT = Decimal("0.01")

# Stückpreise in DZD
CARD_UNIT_PRICES: dict[str, Decimal] = {
    "business": Decimal("0.50"),
    "nfc": Decimal("2.00"),
    "tags": Decimal("0.30"),
    "stickers": Decimal("0.20"),
}

Selection = Optional[Mapping[str, str]]


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def variant_surcharge(item: CatalogItem, selection: Selection = None) -> Decimal:
    """
    Summe der Aufpreise der gewählten Optionen.
    Nicht gewählte Varianten und unbekannte Optionsnamen zählen 0.
    """
    if not item.variants or not selection:
        return Decimal("0")

    total = Decimal("0")
    for variant in item.variants:
        chosen = selection.get(variant.name)
        if not chosen:
            continue
        option = next((opt for opt in variant.options if opt.name == chosen), None)
        if option is not None:
            total += option.price
    return total


def effective_price(item: CatalogItem, selection: Selection = None) -> Decimal:
    price = item.price + variant_surcharge(item, selection)
    # negative Aufpreise dürfen den Preis nicht unter 0 drücken
    return money(max(price, Decimal("0")))


def line_total(item: CatalogItem, selection: Selection, quantity: int) -> Decimal:
    return money(effective_price(item, selection) * quantity)


def card_unit_price(card_type: str) -> Decimal:
    key = (card_type or "").strip().lower()
    if key not in CARD_UNIT_PRICES:
        allowed = ", ".join(sorted(CARD_UNIT_PRICES))
        raise ValidationError.invalid("cardType", f"must be one of: {allowed}")
    return CARD_UNIT_PRICES[key]


def card_order_total(card_type: str, quantity: int) -> Decimal:
    if quantity < 1:
        raise ValidationError.invalid("cardQuantity", "must be at least 1")
    return money(card_unit_price(card_type) * quantity)
