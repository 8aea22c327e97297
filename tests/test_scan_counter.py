from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select

from helpers.factories import seed_qr, seed_user
from models.qr_scan import QRScan
from models.qrcode import QRCode
from utils.errors import NotFoundError
from utils.scan_counter import record_scan, record_scan_best_effort


def test_scan_increments_and_appends_history(session_local):
    user_id = seed_user(session_local, "scan@example.com")
    qr_id = seed_qr(session_local, user_id, "scanme0001")

    with session_local() as db:
        assert record_scan(db, "scanme0001", user_agent="Mozilla/5.0", location="10.0.0.1") == 1
        assert record_scan(db, "scanme0001") == 2
        assert db.scalar(select(func.count(QRScan.id)).where(QRScan.qr_id == qr_id)) == 2


def test_unknown_slug_raises_not_found(session_local):
    with session_local() as db:
        with pytest.raises(NotFoundError):
            record_scan(db, "missing000")


def test_best_effort_swallows_not_found(session_local, caplog):
    with session_local() as db:
        assert record_scan_best_effort(db, "missing000") is None
    assert "unbekannten QR-Code" in caplog.text


def test_scan_does_not_touch_content(session_local):
    user_id = seed_user(session_local, "content@example.com")
    seed_qr(session_local, user_id, "content001", type="menu", menu={"categories": []})

    with session_local() as db:
        record_scan(db, "content001")
        qr = db.scalar(select(QRCode).where(QRCode.slug == "content001"))
        assert qr.menu == {"categories": []}
        assert qr.updated_at is None


def test_hundred_concurrent_scans_are_all_counted(file_session_local):
    user_id = seed_user(file_session_local, "busy@example.com")
    qr_id = seed_qr(file_session_local, user_id, "busyqr0001", scan_count=5)

    def scan(_):
        with file_session_local() as db:
            return record_scan(db, "busyqr0001")

    with ThreadPoolExecutor(max_workers=10) as pool:
        counts = list(pool.map(scan, range(100)))

    with file_session_local() as db:
        final = db.scalar(select(QRCode.scan_count).where(QRCode.id == qr_id))
        history = db.scalar(select(func.count(QRScan.id)).where(QRScan.qr_id == qr_id))

    assert final == 105
    assert history == 100
    # jeder Aufruf sieht einen eigenen Zählerstand
    assert sorted(counts) == list(range(6, 106))
