# =============================================================================
# 👤 models/user.py
# Konto eines Händlers (SQLAlchemy 2.0)
# Login & Passwörter liegen außerhalb dieses Kerns – hier zählen nur
# Identität, Rolle und Berechtigung (Abo / Testphase).
# =============================================================================

from __future__ import annotations

import os
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime, timedelta, timezone

from sqlalchemy import String, Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base

if TYPE_CHECKING:
    from models.qrcode import QRCode


def _trial_end() -> datetime:
    days = int(os.getenv("TRIAL_DAYS", "14"))
    return datetime.now(timezone.utc) + timedelta(days=days)


class User(Base):
    __tablename__ = "users"

    # =========================================================================
    # 🧩 Basisinformationen
    # =========================================================================
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(100))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    role: Mapped[str] = mapped_column(String(20), default="user")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # =========================================================================
    # 💼 Testphase / Abo
    # =========================================================================
    trial_start: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )
    trial_end: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_trial_end
    )
    has_active_subscription: Mapped[bool] = mapped_column(Boolean, default=False)

    # =========================================================================
    # 🕒 Zeitstempel
    # =========================================================================
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc)
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc)
    )

    # =========================================================================
    # 🔗 Beziehungen
    # =========================================================================
    qrcodes: Mapped[List["QRCode"]] = relationship(
        "QRCode",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"

    # =========================================================================
    # 📌 Representation
    # =========================================================================
    def __repr__(self) -> str:
        return (
            f"<User(id={self.id}, email='{self.email}', role='{self.role}', "
            f"active={self.is_active}, subscribed={self.has_active_subscription})>"
        )
