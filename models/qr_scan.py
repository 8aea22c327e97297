# =============================================================================
# 📊 models/qr_scan.py
# -----------------------------------------------------------------------------
# Scan-Historie eines QR-Codes. Einträge werden nur angehängt.
# Der Zähler selbst steht in qr_codes.scan_count (siehe utils/scan_counter.py).
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from database import Base

if TYPE_CHECKING:
    from models.qrcode import QRCode


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QRScan(Base):
    __tablename__ = "qr_scans"
    __table_args__ = (
        # Historie eines Codes chronologisch lesen
        Index("ix_qr_scans_qr_id_timestamp", "qr_id", "timestamp"),
        {"mysql_engine": "InnoDB", "mysql_charset": "utf8mb4"},
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    qr_id: Mapped[int] = mapped_column(ForeignKey("qr_codes.id", ondelete="CASCADE"), nullable=False)

    # 🔹 Client-Infos (gekürzt auf Spaltenlänge)
    user_agent: Mapped[Optional[str]] = mapped_column(String(255))
    location: Mapped[Optional[str]] = mapped_column(String(100))

    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utc_now, nullable=False)

    qr: Mapped["QRCode"] = relationship("QRCode", back_populates="scans")

    def __repr__(self) -> str:
        return f"<QRScan qr_id={self.qr_id} at={self.timestamp}>"
