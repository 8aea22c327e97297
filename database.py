# =============================================================================
# 🗄️ database.py
# -----------------------------------------------------------------------------
# SQLAlchemy-Datenbankkonfiguration für QR-Landingpages & Bestellungen
# Unterstützt MySQL (PyMySQL) + .env + optionale DATABASE_URL (z. B. SQLite)
# =============================================================================

import os
from urllib.parse import quote_plus

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

# 🔹 .env laden (z. B. aus .env-Datei im Projektverzeichnis)
load_dotenv()

# 🔹 MySQL-Parameter aus Umgebungsvariablen
MYSQL_USER = os.getenv("MYSQL_USER", "root")
MYSQL_PASS = os.getenv("MYSQL_PASS", "")
MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
MYSQL_PORT = os.getenv("MYSQL_PORT", "3306")
MYSQL_DB   = os.getenv("MYSQL_DB", "qr_landing")

# 🔹 Passwort sicher escapen (bei Sonderzeichen wie @, #, !, %)
encoded_pass = quote_plus(MYSQL_PASS)

# 🔹 Verbindungs-URL: DATABASE_URL hat Vorrang, sonst MySQL + PyMySQL
SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL") or (
    f"mysql+pymysql://{MYSQL_USER}:{encoded_pass}@{MYSQL_HOST}:{MYSQL_PORT}/{MYSQL_DB}?charset=utf8mb4"
)


def build_engine(url: str, **kwargs):
    """
    Erstellt die Engine passend zum Backend.
    MySQL: pool_pre_ping + pool_recycle halten Verbindungen frisch.
    SQLite: Threads dürfen sich die Verbindung teilen, Schreibsperren warten.
    """
    if url.startswith("sqlite"):
        sqlite_engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
            **kwargs,
        )

        in_memory = url in ("sqlite://", "sqlite:///:memory:")

        @event.listens_for(sqlite_engine, "connect")
        def _on_connect(dbapi_connection, _record):
            # ON DELETE CASCADE greift in SQLite nur mit diesem Pragma
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()
            if not in_memory:
                # Transaktionen steuert SQLAlchemy (siehe _begin_immediate)
                dbapi_connection.isolation_level = None

        if not in_memory:
            @event.listens_for(sqlite_engine, "begin")
            def _begin_immediate(conn):
                # Schreibsperre gleich zu Beginn holen: parallele Schreiber
                # warten (timeout) statt mit "database is locked" abzubrechen
                conn.exec_driver_sql("BEGIN IMMEDIATE")

        return sqlite_engine
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=280,
        **kwargs,
    )


# 🔹 Engine erstellen
engine = build_engine(SQLALCHEMY_DATABASE_URL)

# 🔹 SessionFactory – erzeugt Session für jede Anfrage
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# 🔹 Basisklasse für alle SQLAlchemy-Modelle
Base = declarative_base()


# 🔹 Dependency für FastAPI
def get_db():
    """
    Erstellt eine neue Datenbank-Session pro Anfrage und schließt sie automatisch.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
