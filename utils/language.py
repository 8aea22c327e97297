from __future__ import annotations

import re
from typing import Iterable, Iterator, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from utils.qr_schema import MenuDocument, ProductsDocument, VitrineDocument


SUPPORTED_LANGUAGES = ("en", "ar")

# Arabic, Arabic Supplement, Presentation Forms A + B
_ARABIC_RE = re.compile("[\u0600-\u06FF\u0750-\u077F\uFB50-\uFDFF\uFE70-\uFEFF]")


def contains_arabic(text: Optional[str]) -> bool:
    return bool(text) and _ARABIC_RE.search(text) is not None


def detect_language(texts: Iterable[Optional[str]]) -> str:
    """Gibt 'ar' beim ersten Text mit arabischen Zeichen zurück, sonst 'en'."""
    if isinstance(texts, str):
        texts = [texts]
    for text in texts or ():
        if contains_arabic(text):
            return "ar"
    return "en"


def normalize_language_hint(hint: Optional[str]) -> Optional[str]:
    value = (hint or "").strip().lower()
    return value if value in SUPPORTED_LANGUAGES else None


def _document_texts(
    menu: Optional["MenuDocument"],
    vitrine: Optional["VitrineDocument"],
    products: Optional["ProductsDocument"],
) -> Iterator[Optional[str]]:
    # 1) Namen des Geschäfts
    if vitrine is not None:
        yield vitrine.hero.business_name
    if menu is not None:
        yield menu.restaurant_name
    if products is not None:
        yield products.store_name

    # 2) Kategorien
    if menu is not None:
        for category in menu.categories:
            yield category.name

    # 3) Artikel in Dokumentreihenfolge
    if menu is not None:
        for category in menu.categories:
            for item in category.items:
                yield item.name
                yield item.description
    if products is not None:
        for item in products.products:
            yield item.name
            yield item.description
    if vitrine is not None:
        yield vitrine.hero.tagline
        yield vitrine.about.description
        for service in vitrine.services:
            yield service.name
            yield service.description


def language_for_documents(
    menu: Optional["MenuDocument"] = None,
    vitrine: Optional["VitrineDocument"] = None,
    products: Optional["ProductsDocument"] = None,
) -> str:
    return detect_language(_document_texts(menu, vitrine, products))
