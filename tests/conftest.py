import sys, os, pytest, pytest_asyncio, httpx
from httpx import ASGITransport

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Tests laufen nie gegen MySQL
os.environ.setdefault("DATABASE_URL", "sqlite://")

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, build_engine, get_db
from main import app
from models.user import User
from routes.auth import get_current_user


@pytest_asyncio.fixture
async def client():
    """Erstellt einen funktionierenden Testclient."""
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def session_local():
    """In-Memory-SQLite mit allen Tabellen; eine Verbindung für alle Sessions."""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield testing_session_local
    engine.dispose()


@pytest.fixture
def file_session_local(tmp_path):
    """Datei-SQLite: jeder Thread bekommt eine eigene Verbindung."""
    engine = build_engine(f"sqlite:///{tmp_path / 'concurrent.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def api_env(session_local):
    def override_get_db():
        db = session_local()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client, session_local

    app.dependency_overrides.clear()


@pytest.fixture
def login_as(session_local):
    """Setzt den eingeloggten Benutzer für alle folgenden Requests."""

    def _login(user_id: int) -> None:
        def override_current_user():
            with session_local() as db:
                user = db.get(User, user_id)
                db.expunge(user)
                return user

        app.dependency_overrides[get_current_user] = override_current_user

    return _login
