# =============================================================================
# 🧠 QR-Bild-Generator
# -----------------------------------------------------------------------------
# Rendert die öffentliche Landingpage-URL eines QR-Codes als PNG in den
# Farben des Codes. Nichts wird auf die Platte geschrieben.
# =============================================================================

from __future__ import annotations
from typing import Optional
from io import BytesIO
import os, logging
import qrcode
import qrcode.image.styledpil
import qrcode.image.styles.moduledrawers as mod
import qrcode.image.styles.colormasks as mask
from qrcode.constants import ERROR_CORRECT_H
from PIL import Image, ImageColor, ImageOps

logger = logging.getLogger(__name__)

DEFAULT_FG = "#000000"
DEFAULT_BG = "#FFFFFF"
# Vite-Dev-Server des Frontends
DEFAULT_APP_DOMAIN = "http://localhost:5173"


def landing_url(slug: str, base: Optional[str] = None) -> str:
    """
    Öffentliche URL, die im QR-Code steckt.
    APP_DOMAIN ist das Frontend: es liefert /landing/{slug} aus und holt die
    Daten über GET /qrcodes/landing/{slug} von dieser API.
    """
    domain = (base or os.getenv("APP_DOMAIN", DEFAULT_APP_DOMAIN)).rstrip("/")
    return f"{domain}/landing/{slug}"


def _color(value: Optional[str], fallback: str) -> tuple[int, int, int]:
    try:
        return ImageColor.getrgb(value or fallback)[:3]
    except ValueError:
        logger.warning(f"⚠️ Ungültige Farbe {value!r} – verwende {fallback}")
        return ImageColor.getrgb(fallback)[:3]


def render_qr_png(
    payload: str,
    fg: Optional[str] = DEFAULT_FG,
    bg: Optional[str] = DEFAULT_BG,
    size: int = 600,
) -> bytes:
    """Erzeugt das PNG und gibt die Bytes zurück."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    back = _color(bg, DEFAULT_BG)
    color_mask = mask.SolidFillColorMask(
        front_color=_color(fg, DEFAULT_FG),
        back_color=back,
    )

    img = qr.make_image(
        image_factory=qrcode.image.styledpil.StyledPilImage,
        module_drawer=mod.SquareModuleDrawer(),
        color_mask=color_mask,
    ).convert("RGB")

    img = img.resize((size, size), Image.Resampling.LANCZOS)
    img = ImageOps.expand(img, border=8, fill=back)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    logger.info(f"✅ QR-Bild erzeugt ({size}px): {payload}")
    return buffer.getvalue()
