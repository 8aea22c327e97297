# =============================================================================
# 🧩 init_db.py
# -----------------------------------------------------------------------------
# Initialisiert die Datenbank für QR-Landing:
#   - Erstellt alle Tabellen (users, qr_codes, qr_scans, orders)
#   - Optional: Erstellt einen Admin-Benutzer (ADMIN_EMAIL)
# =============================================================================

import os

from sqlalchemy import select

from database import Base, engine, SessionLocal
import models  # noqa: F401  – registriert alle Modelle an Base.metadata
from models.user import User


def create_tables() -> None:
    print("🛠️ Erstelle Tabellen in der Datenbank...")
    Base.metadata.create_all(bind=engine)
    print("✅ Tabellen wurden erfolgreich erstellt.\n")


def ensure_admin(email: str) -> User:
    db = SessionLocal()
    try:
        admin = db.scalar(select(User).where(User.email == email))
        if admin is None:
            admin = User(email=email, name="Administrator", role="admin", is_active=True)
            db.add(admin)
            db.commit()
            db.refresh(admin)
            print(f"  🆕 Admin-Benutzer erstellt: {email}")
        else:
            print("  ✔️ Admin-Benutzer existiert bereits.")
        return admin
    finally:
        db.close()


if __name__ == "__main__":
    create_tables()
    print("👤 Prüfe auf Admin-Benutzer...")
    ensure_admin(os.getenv("ADMIN_EMAIL", "admin@example.com"))
