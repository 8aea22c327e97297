from io import BytesIO

from PIL import Image

from utils.qr_generator import landing_url, render_qr_png

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_render_returns_png_bytes():
    data = render_qr_png("https://example.com/landing/abc", size=300)
    assert data.startswith(PNG_MAGIC)

    img = Image.open(BytesIO(data))
    # 8 px Rand auf jeder Seite
    assert img.size == (316, 316)


def test_render_uses_background_color():
    data = render_qr_png("hello", fg="#112233", bg="#FFEECC", size=200)
    img = Image.open(BytesIO(data)).convert("RGB")
    assert img.getpixel((0, 0)) == (255, 238, 204)


def test_invalid_color_falls_back(caplog):
    data = render_qr_png("hello", fg="not-a-color", bg=None, size=128)
    img = Image.open(BytesIO(data)).convert("RGB")
    assert img.getpixel((0, 0)) == (255, 255, 255)
    assert "Ungültige Farbe" in caplog.text


def test_landing_url_uses_domain(monkeypatch):
    monkeypatch.setenv("APP_DOMAIN", "https://qr.example.com/")
    assert landing_url("abc123") == "https://qr.example.com/landing/abc123"
    assert landing_url("abc123", base="http://x.test") == "http://x.test/landing/abc123"


def test_landing_url_defaults_to_frontend(monkeypatch):
    monkeypatch.delenv("APP_DOMAIN", raising=False)
    # die Seite liefert das Frontend aus, nicht diese API
    assert landing_url("abc123") == "http://localhost:5173/landing/abc123"
