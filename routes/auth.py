# routes/auth.py
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from models.user import User

# ─────────────────────────────────────────────
# 🔐 Sitzungs-Benutzer
# Login & Sitzungsvergabe übernimmt die umgebende App; hier wird nur die
# user_id aus der Sitzung (Starlette SessionMiddleware) aufgelöst.
# ─────────────────────────────────────────────


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Gibt den aktuell eingeloggten Benutzer zurück."""
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Nicht eingeloggt.")

    user = db.get(User, int(user_id))
    if not user:
        request.session.clear()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Benutzer nicht gefunden.")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Konto deaktiviert.")
    return user
