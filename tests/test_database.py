from sqlalchemy import inspect, text

from database import Base, build_engine


def test_database_connection(session_local):
    """Überprüft, ob eine Verbindung zur Datenbank besteht."""
    with session_local() as db:
        assert db.execute(text("SELECT 1")).scalar() == 1


def test_required_tables_exist(session_local):
    """Alle Modelle sind an Base.metadata registriert."""
    tables = inspect(session_local.kw["bind"]).get_table_names()

    required = ["users", "qr_codes", "qr_scans", "orders"]
    missing = [t for t in required if t not in tables]
    assert not missing, f"❌ Fehlende Tabellen: {missing}"


def test_sqlite_enforces_foreign_keys(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'fk.db'}")
    Base.metadata.create_all(bind=engine)
    with engine.connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
    engine.dispose()
