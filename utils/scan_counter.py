# =============================================================================
# 📊 utils/scan_counter.py
# -----------------------------------------------------------------------------
# Zählt Scans eines QR-Codes.
#   • scan_count wird direkt in der Datenbank erhöht (kein Lesen-dann-Schreiben)
#   • jeder Aufruf legt zusätzlich einen Eintrag in qr_scans an
#   • Zähler und Historie landen in derselben Transaktion
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.qr_scan import QRScan
from models.qrcode import QRCode
from utils.errors import NotFoundError

logger = logging.getLogger(__name__)


def _clip(value: Optional[str], length: int) -> Optional[str]:
    return value[:length] if value else None


def record_scan(
    db: Session,
    slug: str,
    *,
    user_agent: Optional[str] = None,
    location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> int:
    """
    Erhöht scan_count um 1 und hängt einen Scan an die Historie.
    Gibt den neuen Zählerstand zurück; unbekannter Slug → NotFoundError.
    """
    # Das UPDATE kommt zuerst: die Zeile ist ab hier gesperrt
    result = db.execute(
        update(QRCode)
        .where(QRCode.slug == slug)
        .values(scan_count=QRCode.scan_count + 1, updated_at=QRCode.updated_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        raise NotFoundError("QR code not found")

    qr_id, scan_count = db.execute(
        select(QRCode.id, QRCode.scan_count).where(QRCode.slug == slug)
    ).one()

    db.add(
        QRScan(
            qr_id=qr_id,
            user_agent=_clip(user_agent, 255),
            location=_clip(location, 100),
            timestamp=now or datetime.now(timezone.utc),
        )
    )
    db.commit()
    logger.info(f"📈 Scan gezählt: {slug} → {scan_count}")
    return scan_count


def record_scan_best_effort(
    db: Session,
    slug: str,
    *,
    user_agent: Optional[str] = None,
    location: Optional[str] = None,
) -> Optional[int]:
    """Wie record_scan, aber Fehler blockieren die Landingpage nie."""
    try:
        return record_scan(db, slug, user_agent=user_agent, location=location)
    except NotFoundError:
        logger.warning(f"⚠️ Scan für unbekannten QR-Code übersprungen: {slug}")
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning(f"⚠️ Scan für {slug} nicht gespeichert: {exc}")
    return None

