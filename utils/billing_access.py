from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from utils.errors import ForbiddenError

load_dotenv(dotenv_path=Path(__file__).resolve().parent.parent / ".env")


def _normalized(value: Any) -> str:
    return str(value or "").strip().lower()


def billing_exempt_emails() -> set[str]:
    raw = os.getenv("BILLING_EXEMPT_EMAILS", "")
    return {item.strip().lower() for item in raw.split(",") if item.strip()}


def billing_exempt_domains() -> set[str]:
    raw = os.getenv("BILLING_EXEMPT_DOMAINS", "")
    return {item.strip().lower().lstrip("@") for item in raw.split(",") if item.strip()}


def billing_redirect_path() -> str:
    return os.getenv("BILLING_REDIRECT_PATH", "/payment")


def is_billing_exempt_email(email: str | None) -> bool:
    normalized = _normalized(email)
    if not normalized:
        return False
    if normalized in billing_exempt_emails():
        return True
    if "@" not in normalized:
        return False
    domain = normalized.rsplit("@", 1)[1]
    return domain in billing_exempt_domains()


def is_billing_exempt_user(user: Any) -> bool:
    user_email = getattr(user, "email", None)
    return is_billing_exempt_email(user_email)


def _as_utc(ts: Optional[datetime]) -> Optional[datetime]:
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def is_trial_active(user: Any, now: Optional[datetime] = None) -> bool:
    trial_end = _as_utc(getattr(user, "trial_end", None))
    if trial_end is None:
        return False
    return trial_end > (now or datetime.now(timezone.utc))


def is_entitled(user: Any, now: Optional[datetime] = None) -> bool:
    """Abo aktiv, Testphase läuft, Admin oder intern freigestellt."""
    if user is None or not getattr(user, "is_active", False):
        return False
    if getattr(user, "is_admin", False) or is_billing_exempt_user(user):
        return True
    if getattr(user, "has_active_subscription", False):
        return True
    return is_trial_active(user, now)


def require_entitlement(user: Any, now: Optional[datetime] = None) -> None:
    if not is_entitled(user, now):
        raise ForbiddenError(
            "Subscription or trial required for this QR code",
            details={"redirect": billing_redirect_path()},
        )
