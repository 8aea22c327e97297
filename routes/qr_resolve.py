# =============================================================================
# 🔄 Öffentlicher QR-Resolver
# -----------------------------------------------------------------------------
# Routen ohne Login (werden beim Scannen aufgerufen):
#       GET  /qrcodes/public/{id}     → öffentliche Ansicht des Codes
#       GET  /qrcodes/landing/{id}    → Landingpage (zählt den Scan)
#       POST /qrcodes/{id}/scan       → Scan explizit zählen
#       GET  /qrcodes/redirect/{id}   → Ziel-URL für url/direct-Codes
#
# {id} ist immer der öffentliche Slug des QR-Codes.
# =============================================================================

from __future__ import annotations
from typing import Any, Dict, Optional

import logging
from datetime import datetime, timezone
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from database import get_db
from models.qrcode import QRCode
from utils.billing_access import require_entitlement
from utils.catalog import WEEKDAYS, normalize_menu, normalize_products, normalize_vitrine
from utils.errors import NotFoundError
from utils.landing import resolve_landing
from utils.qr_schema import dump_document
from utils.scan_counter import record_scan, record_scan_best_effort

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qrcodes", tags=["QR-Resolver"])

REDIRECT_TYPES = {"url", "direct"}

def _is_test_user_agent(user_agent: str) -> bool:
    ua = (user_agent or "").lower()
    return (
        ua.startswith("curl/")
        or "postmanruntime" in ua
        or "insomnia" in ua
        or "httpie/" in ua
    )


def _should_track_scan(qr: QRCode, request: Request) -> bool:
    force_track = (request.query_params.get("track") or "").lower() in {"1", "true", "yes"}
    if force_track:
        return True

    # Hinter einem Proxy kommt jeder Scan von 127.0.0.1: nur User-Agent und
    # Besitzer-Vorschau filtern, nie die Client-IP
    user_agent = request.headers.get("user-agent", "")
    if _is_test_user_agent(user_agent):
        return False

    # Eigene Vorschau-Aufrufe des Besitzers nicht als echten Scan zählen
    session_user_id = request.session.get("user_id")
    if session_user_id and int(session_user_id) == int(qr.user_id):
        return False

    return True


def _today() -> str:
    return WEEKDAYS[datetime.now(timezone.utc).weekday()]


def _get_qr(db: Session, slug: str) -> QRCode:
    qr = db.scalar(select(QRCode).where(QRCode.slug == slug))
    if qr is None:
        raise NotFoundError("QR code not found")
    return qr


def serialize_public_qr(qr: QRCode, weekday: Optional[str] = None) -> Dict[str, Any]:
    """Öffentliche Projektion: Inhalte & Design, keine Besitzerdaten."""
    weekday = weekday or _today()
    vitrine = normalize_vitrine(qr.vitrine)
    return {
        "id": qr.slug,
        "name": qr.name,
        "type": qr.type,
        "originalUrl": qr.original_url,
        "links": qr.links or [],
        "menu": dump_document(normalize_menu(qr.menu, weekday)) if qr.menu else None,
        "products": dump_document(normalize_products(qr.products, weekday)) if qr.products else None,
        "vitrine": dump_document(vitrine) if vitrine is not None else None,
        "scanCount": qr.scan_count,
        "foregroundColor": qr.foreground_color,
        "backgroundColor": qr.background_color,
        "primaryColor": qr.primary_color,
        "accentColor": qr.accent_color,
        "logoUrl": qr.logo_url,
    }


def _client_address(request: Request) -> Optional[str]:
    # erster Eintrag von X-Forwarded-For = ursprünglicher Client
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.client.host if request.client else None


def _client(request: Request) -> Dict[str, Optional[str]]:
    return {
        "user_agent": request.headers.get("user-agent"),
        "location": _client_address(request),
    }


@router.get("/public/{qr_id}")
def get_public_qr(qr_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    return serialize_public_qr(_get_qr(db, qr_id))


# =============================================================================
# ✅ Landingpage: Scan zählen (best effort) + Darstellung auflösen
# =============================================================================
@router.get("/landing/{qr_id}")
def get_landing(
    qr_id: str,
    request: Request,
    lang: Optional[str] = Query(default=None),
    weekday: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    qr = _get_qr(db, qr_id)

    if _should_track_scan(qr, request):
        record_scan_best_effort(db, qr.slug, **_client(request))

    result = resolve_landing(qr, weekday or _today(), language_hint=lang)
    return result.to_dict()


@router.post("/{qr_id}/scan")
def post_scan(qr_id: str, request: Request, db: Session = Depends(get_db)) -> Dict[str, Any]:
    count = record_scan(db, qr_id, **_client(request))
    return {"id": qr_id, "scanCount": count}


@router.get("/redirect/{qr_id}")
def get_redirect(qr_id: str, db: Session = Depends(get_db)) -> Dict[str, Any]:
    qr = _get_qr(db, qr_id)
    target = (qr.original_url or "").strip()
    if (qr.type or "").lower() not in REDIRECT_TYPES or not target:
        raise NotFoundError("QR code has no redirect target")

    require_entitlement(qr.user)
    return {
        "url": target,
        "name": qr.name,
        "backgroundColor": qr.background_color,
        "foregroundColor": qr.foreground_color,
        "logoUrl": qr.logo_url,
    }
