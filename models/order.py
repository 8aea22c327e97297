# =============================================================================
# 🧾 models/order.py
# -----------------------------------------------------------------------------
# Bestellungen zu einem QR-Code (qr_order) oder Karten/Sticker-Bestellungen
# ohne QR-Bezug (card_order) – eine gemeinsame Tabelle, zwei Formen.
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint, DateTime, Enum, ForeignKey, Integer, JSON, Numeric,
    String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base

if TYPE_CHECKING:
    from models.qrcode import QRCode


ORDER_STATUSES = ("pending", "confirmed", "cancelled", "delivered")
ORDER_TYPES = ("qr_order", "card_order")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        # qr_order: beide Schlüssel gesetzt, card_order: beide leer
        CheckConstraint(
            "(order_type = 'qr_order' AND qr_code_id IS NOT NULL AND qr_code_owner_id IS NOT NULL)"
            " OR (order_type = 'card_order' AND qr_code_id IS NULL AND qr_code_owner_id IS NULL)",
            name="ck_orders_type_references",
        ),
        CheckConstraint("total_amount >= 0", name="ck_orders_total_non_negative"),
    )

    # ---------------------------------------------------------------------
    # 🧾 Basisattribute
    # ---------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    order_number: Mapped[str] = mapped_column(String(40), unique=True, index=True)
    order_type: Mapped[str] = mapped_column(
        Enum(*ORDER_TYPES, name="order_type", create_constraint=True, validate_strings=True),
        default="qr_order",
        index=True,
    )
    status: Mapped[str] = mapped_column(
        Enum(*ORDER_STATUSES, name="order_status", create_constraint=True, validate_strings=True),
        default="pending",
        index=True,
    )

    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    customer_info: Mapped[dict[str, Any]] = mapped_column(JSON)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"))

    notes: Mapped[Optional[str]] = mapped_column(Text)
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)

    # ---------------------------------------------------------------------
    # 🔗 QR-Bezug (nur qr_order)
    # ---------------------------------------------------------------------
    qr_code_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("qr_codes.id", ondelete="CASCADE"), nullable=True, index=True
    )
    qr_code_owner_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True
    )
    qr_code: Mapped[Optional["QRCode"]] = relationship("QRCode", back_populates="orders")

    # ---------------------------------------------------------------------
    # 💳 Karten-Bestellung (nur card_order)
    # ---------------------------------------------------------------------
    card_type: Mapped[Optional[str]] = mapped_column(String(50))
    card_quantity: Mapped[Optional[int]] = mapped_column(Integer)

    # ---------------------------------------------------------------------
    # 🕒 Zeitstempel – *_at werden genau einmal gesetzt
    # ---------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    delivered_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, number='{self.order_number}', type='{self.order_type}', "
            f"status='{self.status}', total={self.total_amount})>"
        )
