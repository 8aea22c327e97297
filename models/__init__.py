# =============================================================================
# 📦 models/__init__.py
# -----------------------------------------------------------------------------
# Registriert alle Modelle an Base.metadata
# =============================================================================

from .user import User
from .qrcode import QRCode
from .qr_scan import QRScan
from .order import Order

__all__ = [
    "User",
    "QRCode",
    "QRScan",
    "Order",
]
