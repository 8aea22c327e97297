from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from utils.errors import ForbiddenError
from utils.landing import LandingPage, LandingRedirect, resolve_landing

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def _owner(**overrides):
    values = {
        "email": "owner@example.com",
        "is_active": True,
        "is_admin": False,
        "has_active_subscription": False,
        "trial_end": NOW + timedelta(days=3),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def _qr(**overrides):
    values = {
        "slug": "a1b2c3d4e5",
        "name": "Demo",
        "type": "url",
        "original_url": None,
        "links": [],
        "menu": None,
        "products": None,
        "vitrine": None,
        "foreground_color": "#000000",
        "background_color": "#FFFFFF",
        "primary_color": None,
        "accent_color": None,
        "logo_url": None,
        "user": _owner(),
    }
    values.update(overrides)
    return SimpleNamespace(**values)


class _ExplodingQR:
    """Direkter Code, dessen Inhaltsfelder nicht gelesen werden dürfen."""

    slug = "direct0001"
    name = "Direct"
    type = "direct"
    original_url = "https://example.com/target"
    user = _owner()

    @property
    def menu(self):
        raise AssertionError("menu was read")

    @property
    def products(self):
        raise AssertionError("products was read")

    @property
    def vitrine(self):
        raise AssertionError("vitrine was read")

    @property
    def links(self):
        raise AssertionError("links was read")


MENU = {
    "restaurantName": "Bistro",
    "categories": [{"name": "Drinks", "items": [{"name": "Tea", "price": 100}]}],
}


def test_direct_code_redirects_without_touching_content():
    result = resolve_landing(_ExplodingQR(), "monday", now=NOW)
    assert isinstance(result, LandingRedirect)
    assert result.to_dict() == {"mode": "redirect", "url": "https://example.com/target"}


def test_direct_code_without_url_renders_page():
    result = resolve_landing(_qr(type="direct", original_url="  "), "monday", now=NOW)
    assert isinstance(result, LandingPage)


def test_expired_trial_is_forbidden_even_for_direct_codes():
    owner = _owner(trial_end=NOW - timedelta(days=1))
    with pytest.raises(ForbiddenError) as excinfo:
        resolve_landing(_qr(type="direct", original_url="https://x.test", user=owner), "monday", now=NOW)
    assert excinfo.value.to_dict()["redirect"] == "/payment"


def test_subscription_or_admin_keeps_page_alive():
    expired = NOW - timedelta(days=1)
    subscribed = _owner(trial_end=expired, has_active_subscription=True)
    admin = _owner(trial_end=expired, is_admin=True)
    assert resolve_landing(_qr(user=subscribed), "monday", now=NOW)
    assert resolve_landing(_qr(user=admin), "monday", now=NOW)


def test_inactive_owner_is_forbidden():
    with pytest.raises(ForbiddenError):
        resolve_landing(_qr(user=_owner(is_active=False)), "monday", now=NOW)


def test_billing_exempt_domain(monkeypatch):
    monkeypatch.setenv("BILLING_EXEMPT_DOMAINS", "@partner.dz")
    owner = _owner(email="boss@partner.dz", trial_end=NOW - timedelta(days=30))
    assert resolve_landing(_qr(user=owner), "monday", now=NOW)


def test_menu_section_needs_items():
    page = resolve_landing(_qr(type="menu", menu=MENU), "monday", now=NOW)
    assert page.sections == ["menu"]

    empty = {"restaurantName": "Bistro", "categories": [{"name": "Drinks", "items": []}]}
    page = resolve_landing(_qr(type="menu", menu=empty), "monday", now=NOW)
    assert page.sections == []


def test_menu_is_ignored_for_other_types():
    page = resolve_landing(_qr(type="url", menu=MENU), "monday", now=NOW)
    assert page.menu is None


def test_both_type_shows_links_and_menu():
    links = [{"type": "instagram", "url": "https://instagram.com/bistro"}, {"type": "broken"}]
    page = resolve_landing(_qr(type="both", menu=MENU, links=links), "monday", now=NOW)
    assert page.sections == ["links", "menu"]
    assert [link.url for link in page.links] == ["https://instagram.com/bistro"]


def test_vitrine_section_only_for_vitrine_type():
    vitrine = {"hero": {"businessName": "Atelier"}}
    assert resolve_landing(_qr(type="vitrine", vitrine=vitrine), "monday", now=NOW).sections == ["vitrine"]
    assert resolve_landing(_qr(type="menu", vitrine=vitrine), "monday", now=NOW).vitrine is None


def test_products_show_first_product_only():
    products = {
        "storeName": "Shop",
        "orderable": True,
        "products": [{"name": "Mug", "price": 300}, {"name": "Shirt", "price": 1200}],
    }
    page = resolve_landing(_qr(type="products", products=products), "monday", now=NOW)
    assert page.sections == ["products"]
    assert page.product.name == "Mug"
    payload = page.to_dict()
    assert payload["products"]["productKey"] == "Mug-0"
    assert payload["products"]["product"]["price"] == 300.0


def test_language_detected_from_content():
    menu = {"restaurantName": "مطعم الشام", "categories": [{"name": "Drinks", "items": [{"name": "Tea", "price": 1}]}]}
    page = resolve_landing(_qr(type="menu", menu=menu), "monday", now=NOW)
    assert page.language == "ar"
    assert page.to_dict()["direction"] == "rtl"


def test_language_hint_wins():
    menu = {"restaurantName": "مطعم الشام", "categories": [{"name": "Drinks", "items": [{"name": "Tea", "price": 1}]}]}
    page = resolve_landing(_qr(type="menu", menu=menu), "monday", language_hint="en", now=NOW)
    assert page.language == "en"

    page = resolve_landing(_qr(type="menu", menu=menu), "monday", language_hint="de", now=NOW)
    assert page.language == "ar"


def test_styling_is_passed_through():
    page = resolve_landing(_qr(primary_color="#FF0000"), "monday", now=NOW)
    assert page.to_dict()["styling"]["primaryColor"] == "#FF0000"
