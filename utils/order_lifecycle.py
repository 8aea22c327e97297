# =============================================================================
# 🧾 utils/order_lifecycle.py
# -----------------------------------------------------------------------------
# Bestellungen anlegen, Status ändern, auflisten, auswerten.
#
# Statusübergänge stehen ausschließlich in ORDER_TRANSITIONS:
#   pending   → pending | confirmed | cancelled
#   confirmed → confirmed | delivered | cancelled
#   delivered, cancelled → Endzustand
# Ein Übergang wird als bedingtes UPDATE ausgeführt (WHERE status = gelesener
# Status); wer das Rennen verliert, bekommt ConflictError.
# =============================================================================

from __future__ import annotations

import logging
import math
import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from models.order import ORDER_STATUSES, ORDER_TYPES, Order
from models.qrcode import QRCode
from models.user import User
from utils.billing_access import require_entitlement
from utils.catalog import WEEKDAYS, find_menu_item, normalize_menu, normalize_products
from utils.errors import ConflictError, IllegalTransitionError, NotFoundError, ValidationError
from utils.landing import MENU_TYPES
from utils.order_schema import CardOrderRequest, OrderItemIn, QROrderRequest, parse_order_request
from utils.pricing import card_order_total, effective_price, line_total, money
from utils.qr_schema import MenuDocument, NormalizedItem, ProductsDocument

logger = logging.getLogger(__name__)

ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"pending", "confirmed", "cancelled"}),
    "confirmed": frozenset({"confirmed", "delivered", "cancelled"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}

# Spalte, die beim Erreichen eines Status einmalig gesetzt wird
STATUS_TIMESTAMPS = {
    "confirmed": "confirmed_at",
    "cancelled": "cancelled_at",
    "delivered": "delivered_at",
}

PRODUCTS_CATEGORY = "Products"
MAX_PAGE_SIZE = 100

_BASE36 = string.digits + string.ascii_uppercase


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_number() -> str:
    """ORD-<letzte 6 Ziffern des ms-Zeitstempels>-<6 Zeichen Base36>"""
    stamp = str(int(time.time() * 1000))[-6:]
    suffix = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"ORD-{stamp}-{suffix}"


# =============================================================================
# 🔀 Statusübergänge
# =============================================================================

def check_transition(current: str, target: str) -> None:
    if target not in ORDER_STATUSES:
        raise IllegalTransitionError(
            f"Unknown order status: {target}",
            details={"from": current, "to": target},
        )
    allowed = ORDER_TRANSITIONS.get(current)
    if allowed is None:
        raise IllegalTransitionError(
            f"Order has unknown status: {current}",
            details={"from": current, "to": target},
        )
    if not allowed:
        raise IllegalTransitionError(
            f"Order is already {current}",
            details={"from": current, "to": target},
        )
    if target not in allowed:
        raise IllegalTransitionError(
            f"Cannot change order status from {current} to {target}",
            details={"from": current, "to": target},
        )


def transition_order(
    db: Session,
    order: Order,
    status: str,
    admin_notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Order:
    now = now or _utc_now()

    current = db.execute(
        select(Order.status).where(Order.id == order.id).with_for_update()
    ).scalar_one_or_none()
    if current is None:
        db.rollback()
        raise NotFoundError("Order not found")

    try:
        check_transition(current, status)
    except IllegalTransitionError:
        db.rollback()
        raise

    values: dict[str, Any] = {"status": status, "updated_at": now}
    column = STATUS_TIMESTAMPS.get(status)
    if column:
        # bereits gesetzte Zeitstempel bleiben erhalten
        values[column] = func.coalesce(getattr(Order, column), now)
    if admin_notes:
        values["admin_notes"] = admin_notes

    result = db.execute(
        update(Order)
        .where(Order.id == order.id, Order.status == current)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise ConflictError("Order was modified concurrently, please retry")

    db.commit()
    db.refresh(order)
    logger.info(f"🔀 Bestellung {order.order_number}: {current} → {status}")
    return order


def update_admin_notes(db: Session, order: Order, admin_notes: Optional[str]) -> Order:
    order.admin_notes = admin_notes or None
    db.commit()
    db.refresh(order)
    return order


def delete_order(db: Session, order: Order) -> None:
    number = order.order_number
    db.delete(order)
    db.commit()
    logger.info(f"🗑️ Bestellung gelöscht: {number}")


# =============================================================================
# 🛒 Bestellung anlegen
# =============================================================================

def _weekday(now: datetime) -> str:
    return WEEKDAYS[now.weekday()]


def _resolve_item(
    item_in: OrderItemIn,
    menu: Optional[MenuDocument],
    products: Optional[ProductsDocument],
) -> Optional[tuple[NormalizedItem, str, str]]:
    """Sucht den bestellten Artikel im gespeicherten Katalog → (Artikel, key, Kategorie)."""
    if menu is not None:
        item = find_menu_item(menu, item_in.category_name, item_in.item_name)
        if item is not None:
            return item, f"{item_in.category_name}-{item.name}", item_in.category_name

    if products is not None and products.products:
        # nur das erste Produkt ist bestellbar
        first = products.products[0]
        if first.name == item_in.item_name:
            return first, f"{first.name}-0", PRODUCTS_CATEGORY
    return None


def _create_card_order(request: CardOrderRequest) -> Order:
    total = card_order_total(request.card_type, request.card_quantity)
    return Order(
        order_number=generate_order_number(),
        order_type="card_order",
        status="pending",
        items=[],
        customer_info=request.customer_info.model_dump(),
        total_amount=total,
        notes=request.notes,
        card_type=request.card_type.strip().lower(),
        card_quantity=request.card_quantity,
    )


def _create_qr_order(db: Session, request: QROrderRequest, now: datetime) -> Order:
    qr = db.scalar(select(QRCode).where(QRCode.slug == request.qr_code_id))
    if qr is None:
        raise NotFoundError("QR code not found")

    require_entitlement(qr.user, now)

    weekday = _weekday(now)
    # Menü nur für Codes, deren Landingpage es auch zeigt
    menu = normalize_menu(qr.menu, weekday) if qr.menu and (qr.type or "").lower() in MENU_TYPES else None
    products = normalize_products(qr.products, weekday) if qr.products else None
    if menu is not None and not menu.orderable:
        menu = None
    if products is not None and not products.orderable:
        products = None
    if menu is None and (products is None or not products.products):
        raise ValidationError.invalid("qrCodeId", "This QR code is not orderable")

    lines: list[dict[str, Any]] = []
    total = Decimal("0")
    for index, item_in in enumerate(request.items):
        resolved = _resolve_item(item_in, menu, products)
        if resolved is None:
            raise ValidationError.invalid(f"items.{index}", f"Unknown item: {item_in.item_name}")
        item, key, category = resolved
        if not item.available_today:
            raise ValidationError.invalid(f"items.{index}", f"Item not available today: {item.name}")

        unit_price = effective_price(item, item_in.selected_variants)
        total += line_total(item, item_in.selected_variants, item_in.quantity)
        line: dict[str, Any] = {
            "key": key,
            "itemName": item.name,
            "categoryName": category,
            "quantity": item_in.quantity,
            "price": float(unit_price),
        }
        if item.images:
            line["imageUrl"] = item.images[0]
        if item_in.selected_variants:
            line["selectedVariants"] = dict(item_in.selected_variants)
        lines.append(line)

    return Order(
        order_number=generate_order_number(),
        order_type="qr_order",
        status="pending",
        items=lines,
        customer_info=request.customer_info.model_dump(),
        total_amount=money(total),
        notes=request.notes,
        qr_code_id=qr.id,
        qr_code_owner_id=qr.user_id,
    )


def create_order(db: Session, payload: Any, now: Optional[datetime] = None) -> Order:
    """
    Legt eine Bestellung an. Preise und Summe werden immer aus dem
    gespeicherten Katalog bzw. der Kartenpreisliste berechnet.
    """
    now = now or _utc_now()
    request = parse_order_request(payload)

    if isinstance(request, CardOrderRequest):
        order = _create_card_order(request)
    else:
        order = _create_qr_order(db, request, now)

    order.created_at = now
    order.updated_at = now
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"🛒 Neue Bestellung {order.order_number} ({order.order_type}, {order.total_amount})")
    return order


# =============================================================================
# 🔎 Lesen & Auswerten
# =============================================================================

def visible_to(user: User):
    """Eigene QR-Bestellungen; Karten-Bestellungen nur für Admins."""
    own = and_(Order.order_type == "qr_order", Order.qr_code_owner_id == user.id)
    if user.is_admin:
        return or_(own, Order.order_type == "card_order")
    return own


def get_order(db: Session, order_id: int, user: User) -> Order:
    order = db.scalar(select(Order).where(Order.id == order_id, visible_to(user)))
    if order is None:
        raise NotFoundError("Order not found")
    return order


def list_orders(
    db: Session,
    user: User,
    *,
    page: int = 1,
    limit: int = 10,
    status: Optional[str] = None,
    search_term: Optional[str] = None,
    order_type: Optional[str] = None,
) -> dict[str, Any]:
    if status and status not in ORDER_STATUSES:
        raise ValidationError.invalid("status", f"must be one of: {', '.join(ORDER_STATUSES)}")
    if order_type and order_type not in ORDER_TYPES:
        raise ValidationError.invalid("orderType", f"must be one of: {', '.join(ORDER_TYPES)}")

    page = max(page, 1)
    limit = min(max(limit, 1), MAX_PAGE_SIZE)

    query = select(Order).where(visible_to(user))
    if status:
        query = query.where(Order.status == status)
    if order_type:
        query = query.where(Order.order_type == order_type)
    if search_term:
        query = query.where(Order.order_number.ilike(f"%{search_term.strip()}%"))

    total = db.scalar(select(func.count()).select_from(query.subquery())) or 0
    orders = db.scalars(
        query.order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "data": [serialize_order(order) for order in orders],
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit),
    }


def order_stats(db: Session, user: User) -> dict[str, Any]:
    """Anzahl und Summe pro Status für die QR-Bestellungen des Besitzers."""
    rows = db.execute(
        select(Order.status, func.count(Order.id), func.sum(Order.total_amount))
        .where(Order.qr_code_owner_id == user.id)
        .group_by(Order.status)
    ).all()

    stats = [
        {"status": status, "count": count, "totalAmount": float(amount or 0)}
        for status, count, amount in rows
    ]
    revenue = sum(
        (Decimal(str(amount or 0)) for status, _, amount in rows if status in ("confirmed", "delivered")),
        Decimal("0"),
    )
    return {
        "stats": stats,
        "totalOrders": sum(count for _, count, _ in rows),
        "totalRevenue": float(revenue),
    }


def _iso(ts: Optional[datetime]) -> Optional[str]:
    return ts.isoformat() if ts else None


def serialize_order(order: Order) -> dict[str, Any]:
    qr = order.qr_code
    return {
        "id": order.id,
        "orderNumber": order.order_number,
        "orderType": order.order_type,
        "status": order.status,
        "items": order.items or [],
        "customerInfo": order.customer_info or {},
        "totalAmount": float(order.total_amount or 0),
        "notes": order.notes,
        "adminNotes": order.admin_notes,
        "qrCodeId": qr.slug if qr is not None else None,
        "qrCodeName": qr.name if qr is not None else None,
        "qrCodeOwnerId": order.qr_code_owner_id,
        "cardType": order.card_type,
        "cardQuantity": order.card_quantity,
        "createdAt": _iso(order.created_at),
        "updatedAt": _iso(order.updated_at),
        "confirmedAt": _iso(order.confirmed_at),
        "cancelledAt": _iso(order.cancelled_at),
        "deliveredAt": _iso(order.delivered_at),
    }
