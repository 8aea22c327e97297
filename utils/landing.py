# =============================================================================
# 🔄 utils/landing.py – Landingpage-Resolver
# -----------------------------------------------------------------------------
# Entscheidet beim Scan, was ein QR-Code anzeigt:
#   1) Berechtigung des Besitzers (Abo / Testphase)   → sonst ForbiddenError
#   2) type == direct + originalUrl                  → Weiterleitung, sonst nichts
#   3) Seite aus Links / Menü / Vitrine / Produkt zusammensetzen
#   4) Sprache: Hinweis des Clients, sonst aus den Texten erkannt
# Reine Logik ohne Datenbankzugriff; der QR-Code wird vorher geladen.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from utils.billing_access import require_entitlement
from utils.catalog import normalize_menu, normalize_products, normalize_vitrine
from utils.language import language_for_documents, normalize_language_hint
from utils.qr_schema import (
    MenuDocument,
    NormalizedItem,
    ProductsDocument,
    QRLink,
    VitrineDocument,
    dump_document,
)

logger = logging.getLogger(__name__)

MENU_TYPES = {"menu", "both"}


@dataclass(frozen=True)
class LandingRedirect:
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"mode": "redirect", "url": self.url}


@dataclass(frozen=True)
class LandingPage:
    qr_id: str
    name: str
    qr_type: str
    language: str
    links: list[QRLink] = field(default_factory=list)
    menu: Optional[MenuDocument] = None
    vitrine: Optional[VitrineDocument] = None
    products: Optional[ProductsDocument] = None
    styling: dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def product(self) -> Optional[NormalizedItem]:
        # Nur das erste Produkt wird angezeigt und bestellt
        if self.products is None or not self.products.products:
            return None
        return self.products.products[0]

    @property
    def product_key(self) -> Optional[str]:
        return f"{self.product.name}-0" if self.product is not None else None

    @property
    def sections(self) -> list[str]:
        present = [
            ("links", bool(self.links)),
            ("menu", self.menu is not None),
            ("vitrine", self.vitrine is not None),
            ("products", self.product is not None),
        ]
        return [name for name, shown in present if shown]

    def to_dict(self) -> dict[str, Any]:
        products: Optional[dict[str, Any]] = None
        if self.products is not None and self.product is not None:
            products = {
                "storeName": self.products.store_name,
                "currency": self.products.currency,
                "orderable": self.products.orderable,
                "product": dump_document(self.product),
                "productKey": self.product_key,
            }
        return {
            "mode": "page",
            "id": self.qr_id,
            "name": self.name,
            "type": self.qr_type,
            "language": self.language,
            "direction": "rtl" if self.language == "ar" else "ltr",
            "sections": self.sections,
            "links": [dump_document(link) for link in self.links],
            "menu": dump_document(self.menu) if self.menu is not None else None,
            "vitrine": dump_document(self.vitrine) if self.vitrine is not None else None,
            "products": products,
            "styling": self.styling,
        }


LandingResult = LandingRedirect | LandingPage


def _parse_links(raw_links: Any) -> list[QRLink]:
    if not isinstance(raw_links, list):
        return []
    links = []
    for raw in raw_links:
        try:
            links.append(QRLink.model_validate(raw))
        except PydanticValidationError:
            logger.warning(f"⚠️ Ungültiger Link übersprungen: {raw!r}")
    return links


def _styling(qr: Any) -> dict[str, Optional[str]]:
    return {
        "foregroundColor": qr.foreground_color,
        "backgroundColor": qr.background_color,
        "primaryColor": qr.primary_color,
        "accentColor": qr.accent_color,
        "logoUrl": qr.logo_url,
    }


def resolve_landing(
    qr: Any,
    weekday: str,
    language_hint: Optional[str] = None,
    now: Optional[datetime] = None,
) -> LandingResult:
    """
    Löst einen geladenen QR-Code in Weiterleitung oder Seite auf.
    Wirft ForbiddenError, wenn das Konto des Besitzers nicht berechtigt ist.
    """
    require_entitlement(qr.user, now)

    qr_type = str(qr.type or "").lower()
    original_url = (qr.original_url or "").strip()
    if qr_type == "direct" and original_url:
        return LandingRedirect(url=original_url)

    menu = None
    if qr_type in MENU_TYPES:
        document = normalize_menu(qr.menu, weekday)
        if document.has_items():
            menu = document

    vitrine = normalize_vitrine(qr.vitrine) if qr_type == "vitrine" else None

    products = None
    if qr.products:
        document = normalize_products(qr.products, weekday)
        if document.products:
            products = document

    language = normalize_language_hint(language_hint) or language_for_documents(
        menu=menu, vitrine=vitrine, products=products
    )

    return LandingPage(
        qr_id=qr.slug,
        name=qr.name or "",
        qr_type=qr_type,
        language=language,
        links=_parse_links(qr.links),
        menu=menu,
        vitrine=vitrine,
        products=products,
        styling=_styling(qr),
    )
