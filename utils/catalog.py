# =============================================================================
# 🍽️ utils/catalog.py
# -----------------------------------------------------------------------------
# Normalisiert die gespeicherten Menü-, Produkt- und Vitrine-Dokumente.
#   • filtert lokale Vorschau-Bilder (blob:) heraus
#   • berechnet die Verfügbarkeit für den übergebenen Wochentag
#   • behält die Reihenfolge aus der Datenbank bei
# Fehlerhafte Artikel werden übersprungen, ein kaputtes Dokument ergibt einen
# leeren Katalog – die Landingpage bleibt immer erreichbar.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from utils.qr_schema import (
    CONTENT_DOCUMENT,
    CatalogItem,
    Category,
    MenuDocument,
    NormalizedItem,
    ProductsDocument,
    VitrineDocument,
)

logger = logging.getLogger(__name__)

TRANSIENT_IMAGE_PREFIXES = ("blob:",)
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def is_transient_image(url: Optional[str]) -> bool:
    return not url or url.strip().lower().startswith(TRANSIENT_IMAGE_PREFIXES)


def valid_images(item: CatalogItem) -> list[str]:
    images = [url for url in item.images if not is_transient_image(url)]
    if images:
        return images
    # Altdaten: einzelnes Bild in imageUrl
    if item.image_url and not is_transient_image(item.image_url):
        return [item.image_url]
    return []


def normalize_weekday(weekday: Optional[str]) -> str:
    return (weekday or "").strip().lower()


def is_available_on(item: CatalogItem, weekday: Optional[str]) -> bool:
    return item.availability.get(normalize_weekday(weekday), True)


def normalize_item(raw: Any, weekday: Optional[str]) -> Optional[NormalizedItem]:
    try:
        item = CatalogItem.model_validate(raw)
    except PydanticValidationError as exc:
        name = raw.get("name") if isinstance(raw, dict) else None
        logger.warning(f"⚠️ Ungültiger Katalogartikel übersprungen ({name!r}): {exc.error_count()} Fehler")
        return None

    data = item.model_dump()
    data["images"] = valid_images(item)
    data["available_today"] = is_available_on(item, weekday)
    return NormalizedItem.model_validate(data)


def _normalize_items(raw_items: Any, weekday: Optional[str]) -> list[NormalizedItem]:
    if not isinstance(raw_items, list):
        return []
    items = []
    for raw in raw_items:
        item = normalize_item(raw, weekday)
        if item is not None:
            items.append(item)
    return items


def _document_fields(raw: dict[str, Any], exclude: tuple[str, ...]) -> dict[str, Any]:
    # None-Werte fallen auf die Standardwerte des Dokuments zurück
    return {key: value for key, value in raw.items() if key not in exclude and value is not None}


def normalize_menu(raw: Any, weekday: Optional[str]) -> MenuDocument:
    """Menü-Dokument → Kategorien → Artikel; ohne categories-Liste ein leeres Menü."""
    if not isinstance(raw, dict) or not isinstance(raw.get("categories"), list):
        if raw:
            logger.warning("⚠️ Menü-Dokument ohne categories-Liste – leerer Katalog")
        return MenuDocument()

    categories = []
    for raw_category in raw["categories"]:
        if not isinstance(raw_category, dict):
            continue
        categories.append(
            Category(
                name=str(raw_category.get("name") or ""),
                items=_normalize_items(raw_category.get("items"), weekday),
            )
        )

    header = _document_fields(raw, ("categories", "kind"))
    try:
        document = CONTENT_DOCUMENT.validate_python({**header, "kind": "menu"})
    except PydanticValidationError:
        logger.warning("⚠️ Menü-Kopfdaten ungültig – Standardwerte verwendet")
        document = MenuDocument()
    return document.model_copy(update={"categories": categories})


def normalize_products(raw: Any, weekday: Optional[str]) -> ProductsDocument:
    """Produktliste; akzeptiert das Objektformat und ältere nackte Listen."""
    if isinstance(raw, list):
        raw = {"products": raw}
    if not isinstance(raw, dict) or not isinstance(raw.get("products"), list):
        if raw:
            logger.warning("⚠️ Produkt-Dokument ohne products-Liste – leerer Katalog")
        return ProductsDocument()

    header = _document_fields(raw, ("products", "kind"))
    try:
        document = CONTENT_DOCUMENT.validate_python({**header, "kind": "products"})
    except PydanticValidationError:
        logger.warning("⚠️ Produkt-Kopfdaten ungültig – Standardwerte verwendet")
        document = ProductsDocument()
    return document.model_copy(update={"products": _normalize_items(raw["products"], weekday)})


def normalize_vitrine(raw: Any) -> Optional[VitrineDocument]:
    if not isinstance(raw, dict) or not raw:
        return None
    try:
        return CONTENT_DOCUMENT.validate_python({**raw, "kind": "vitrine"})
    except PydanticValidationError as exc:
        logger.warning(f"⚠️ Vitrine-Dokument ungültig ({exc.error_count()} Fehler) – nicht angezeigt")
        return None


def find_menu_item(menu: MenuDocument, category_name: str, item_name: str) -> Optional[NormalizedItem]:
    for category in menu.categories:
        if category.name != category_name:
            continue
        for item in category.items:
            if item.name == item_name:
                return item
    return None
