# =============================================================================
# 🚀 QR-Landing – Hauptapplikation (main.py)
# =============================================================================

from __future__ import annotations
import os
import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware
from sqlalchemy.exc import SQLAlchemyError

from dotenv import load_dotenv
from typing import Dict

import models  # noqa: F401  – alle Modelle registrieren
from utils.errors import CoreError

# -------------------------------------------------------------------------
# 1️⃣ .env laden (muss ganz oben sein!)
# -------------------------------------------------------------------------
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

# -------------------------------------------------------------------------
# 🪵 Logging
# -------------------------------------------------------------------------
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
logger = logging.getLogger("qr_landing")

# -------------------------------------------------------------------------
# 2️⃣ FastAPI App
# -------------------------------------------------------------------------
app = FastAPI(title="QR Landing", version="1.0")

# -------------------------------------------------------------------------
# 3️⃣ Session Middleware (user_id setzt die Login-App)
# -------------------------------------------------------------------------
app.add_middleware(
    SessionMiddleware,
    secret_key=os.getenv("SESSION_SECRET", "qr-landing-secret-key"),
    max_age=60 * 60 * 24 * 7,
    session_cookie=os.getenv("SESSION_COOKIE_NAME", "qr_landing_session"),
    same_site=os.getenv("SESSION_SAME_SITE", "lax"),
    https_only=os.getenv("SESSION_HTTPS_ONLY", "0") in {"1", "true", "yes"},
)

# -------------------------------------------------------------------------
# 4️⃣ Fehler → JSON
# -------------------------------------------------------------------------
@app.exception_handler(CoreError)
async def core_error_handler(request: Request, exc: CoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [
        {
            # "body"/"query"/"path" vorne weglassen
            "field": ".".join(str(part) for part in error["loc"][1:]) or str(error["loc"][0]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "code": "validation_error", "fields": fields},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"❌ Datenbankfehler bei {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "code": "internal_error"},
    )

# -------------------------------------------------------------------------
# 5️⃣ Routen laden
# -------------------------------------------------------------------------
from routes import qr_resolve   # öffentliche Scan-Routen
from routes import api          # QR-Verwaltung für Besitzer
from routes import orders

app.include_router(qr_resolve.router)
app.include_router(api.router)
app.include_router(orders.router)

# -------------------------------------------------------------------------
# 6️⃣ Health
# -------------------------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}
