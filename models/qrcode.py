# =============================================================================
# 📦 QRCode Model – Konfiguration einer QR-Landingpage (SQLAlchemy 2.0)
# =============================================================================

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional, TYPE_CHECKING

from sqlalchemy import (
    String, Text, Integer, DateTime, JSON,
    ForeignKey, func, event
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from database import Base

if TYPE_CHECKING:
    from models.order import Order
    from models.qr_scan import QRScan
    from models.user import User


QR_TYPES = ("direct", "url", "menu", "vitrine", "products", "both")


# =============================================================================
# 🧩 QRCode-Datenmodell
# =============================================================================
class QRCode(Base):
    """
    Zentrales QR-Code Modell.
    Ein Code löst beim Scannen in genau einen Darstellungsmodus auf
    (Weiterleitung, Link-Hub, Menü, Produkt, Vitrine). Die Inhalte liegen
    als JSON-Dokumente vor und werden erst beim Lesen validiert
    (siehe utils/qr_schema.py).
    """
    __tablename__ = "qr_codes"

    # ---------------------------------------------------------------------
    # 🧾 Basisattribute
    # ---------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="url")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Öffentliche Kennung in allen URLs und API-Antworten
    slug: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
        default=lambda: uuid.uuid4().hex[:10],
    )

    # ---------------------------------------------------------------------
    # 🔗 Beziehungen
    # ---------------------------------------------------------------------
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    user: Mapped["User"] = relationship("User", back_populates="qrcodes")

    scans: Mapped[list["QRScan"]] = relationship(
        "QRScan",
        back_populates="qr",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="QRScan.id",
    )

    orders: Mapped[list["Order"]] = relationship(
        "Order",
        back_populates="qr_code",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ---------------------------------------------------------------------
    # 📄 Inhalt
    # ---------------------------------------------------------------------
    original_url: Mapped[Optional[str]] = mapped_column(Text)
    links: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    menu: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    # Neue Datensätze: {"products": [...], "orderable": ...}; ältere: nackte Liste
    products: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    vitrine: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)

    # ---------------------------------------------------------------------
    # 📊 Scan-Zähler (nur über utils/scan_counter.py verändern)
    # ---------------------------------------------------------------------
    scan_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # ---------------------------------------------------------------------
    # 🎨 Design (wird nur durchgereicht)
    # ---------------------------------------------------------------------
    foreground_color: Mapped[str] = mapped_column(String(20), default="#000000")
    background_color: Mapped[str] = mapped_column(String(20), default="#FFFFFF")
    primary_color: Mapped[Optional[str]] = mapped_column(String(20))
    accent_color: Mapped[Optional[str]] = mapped_column(String(20))
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))

    # ---------------------------------------------------------------------
    # 🕒 Zeitstempel
    # ---------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    # ---------------------------------------------------------------------
    # 📌 Repräsentation
    # ---------------------------------------------------------------------
    def __repr__(self) -> str:
        return (
            f"<QRCode(id={self.id}, type='{self.type}', slug='{self.slug}', "
            f"scans={self.scan_count})>"
        )


# =============================================================================
# ⚙️ Event: Automatische Slug-Erzeugung
# =============================================================================

from sqlalchemy.orm import Mapper
from sqlalchemy.engine import Connection


@event.listens_for(QRCode, "before_insert")  # type: ignore[misc]
def set_unique_slug(mapper: Mapper, connection: Connection, target: Any) -> None:
    """
    Garantiert, dass jeder QR-Code einen gültigen, eindeutigen Slug erhält.
    """
    if not getattr(target, "slug", None):
        target.slug = uuid.uuid4().hex[:10]
