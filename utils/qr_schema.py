# utils/qr_schema.py
"""
Definiert die Inhaltsdokumente eines QR-Codes (Menü, Produkte, Vitrine).

Die JSON-Spalten in qr_codes sind frei geformt; erst hier werden sie zu
geschlossenen, getaggten Typen. Jeder Lesezugriff auf Inhalte geht über
diese Modelle (siehe utils/catalog.py), nie über rohe Dicts.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
    field_validator,
)


# Geldbeträge: intern Decimal, in JSON als Zahl
Money = Annotated[
    Decimal,
    PlainSerializer(lambda value: float(value), return_type=float, when_used="json"),
]

DEFAULT_CURRENCY = "DZD"


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# =============================================================================
# 🧾 Katalog-Bausteine
# =============================================================================

class VariantOption(_Document):
    name: str
    price: Money = Decimal("0")

    @field_validator("price", mode="before")
    @classmethod
    def _empty_price_is_zero(cls, value: Any) -> Any:
        return 0 if value in (None, "") else value


class Variant(_Document):
    name: str
    options: list[VariantOption] = Field(default_factory=list)


class CatalogItem(_Document):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    price: Money = Field(ge=0)
    images: list[str] = Field(default_factory=list)
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    availability: dict[str, bool] = Field(default_factory=dict)
    variants: list[Variant] = Field(default_factory=list)

    @field_validator("images", mode="before")
    @classmethod
    def _only_string_urls(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, list):
            return [v for v in value if isinstance(v, str) and v.strip()]
        return value

    @field_validator("availability", mode="before")
    @classmethod
    def _lowercase_weekdays(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, dict):
            return {str(day).strip().lower(): flag for day, flag in value.items()}
        return value


class NormalizedItem(CatalogItem):
    """Katalogartikel nach dem Normalisieren (gültige Bilder, heutige Verfügbarkeit)."""

    available_today: bool = Field(default=True, alias="availableToday")


class Category(_Document):
    name: str = ""
    items: list[NormalizedItem] = Field(default_factory=list)


# =============================================================================
# 📄 Dokumente pro Darstellungsmodus
# =============================================================================

class MenuDocument(_Document):
    kind: Literal["menu"] = "menu"
    restaurant_name: str = Field(default="", alias="restaurantName")
    description: Optional[str] = None
    currency: str = DEFAULT_CURRENCY
    orderable: bool = False
    cod_form_enabled: bool = Field(default=False, alias="codFormEnabled")
    categories: list[Category] = Field(default_factory=list)

    def has_items(self) -> bool:
        return any(category.items for category in self.categories)


class ProductsDocument(_Document):
    kind: Literal["products"] = "products"
    store_name: Optional[str] = Field(default=None, alias="storeName")
    currency: str = DEFAULT_CURRENCY
    orderable: bool = False
    products: list[NormalizedItem] = Field(default_factory=list)


class VitrineCta(_Document):
    type: Optional[str] = None
    label: Optional[str] = None
    link: Optional[str] = None


class VitrineHero(_Document):
    business_name: str = Field(default="", alias="businessName")
    tagline: Optional[str] = None
    ctas: list[VitrineCta] = Field(default_factory=list)


class VitrineAbout(_Document):
    description: Optional[str] = None
    city: Optional[str] = None


class VitrineService(_Document):
    name: str = ""
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    image_description: Optional[str] = Field(default=None, alias="imageDescription")


class VitrineGalleryItem(_Document):
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    title: Optional[str] = None
    description: Optional[str] = None


class VitrineTestimonial(_Document):
    author: str = ""
    city: Optional[str] = None
    text: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=0, le=5)


class VitrineContact(_Document):
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    social_media: dict[str, str] = Field(default_factory=dict, alias="socialMedia")


class VitrineQuickLink(_Document):
    label: str = ""
    url: Optional[str] = None


class VitrineFooter(_Document):
    business_name: Optional[str] = Field(default=None, alias="businessName")
    copyright: Optional[str] = None
    quick_links: list[VitrineQuickLink] = Field(default_factory=list, alias="quickLinks")


class VitrineDocument(_Document):
    kind: Literal["vitrine"] = "vitrine"
    hero: VitrineHero = Field(default_factory=VitrineHero)
    about: VitrineAbout = Field(default_factory=VitrineAbout)
    services: list[VitrineService] = Field(default_factory=list)
    gallery: list[VitrineGalleryItem] = Field(default_factory=list)
    testimonials: list[VitrineTestimonial] = Field(default_factory=list)
    contact: VitrineContact = Field(default_factory=VitrineContact)
    footer: VitrineFooter = Field(default_factory=VitrineFooter)


ContentDocument = Annotated[
    Union[MenuDocument, ProductsDocument, VitrineDocument],
    Field(discriminator="kind"),
]

CONTENT_DOCUMENT = TypeAdapter(ContentDocument)


# =============================================================================
# 🔗 Links
# =============================================================================

class QRLink(_Document):
    type: str = "website"
    label: str = ""
    url: str


def dump_document(document: BaseModel) -> dict[str, Any]:
    """Serialisiert ein Dokument im gespeicherten (camelCase) Format."""
    return document.model_dump(mode="json", by_alias=True)
