import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from verifypro.config import settings
from verifypro.database import get_db, get_session_factory
from verifypro.dependencies import get_verifier
from verifypro.main import app
from verifypro.services.auth_service import auth_service
from verifypro.services.verification import VerificationResult
from verifypro.services.verification_runner import verification_runner

FIXED_SCORE = 88


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class FixedVerifier:
    def __init__(self, status="verified", score=FIXED_SCORE):
        self.status = status
        self.score = score
        self.calls = 0

    async def verify(self, document):
        self.calls += 1
        return VerificationResult(status=self.status, confidence_score=self.score)


@pytest.fixture
def tmp_data(tmp_path):
    data_path = tmp_path / "VerifyProData"
    data_path.mkdir()
    return data_path


@pytest.fixture
def test_db(tmp_data):
    db_path = tmp_data / "db.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    from verifypro.database import init_db
    init_db(db_path)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestSession
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db_session(test_db):
    db = test_db()
    yield db
    db.close()


@pytest.fixture
def verifier(test_db):
    fixed = FixedVerifier()
    app.dependency_overrides[get_verifier] = lambda: fixed
    return fixed


@pytest.fixture
def fresh_auth_service():
    """Reset session state for each test."""
    auth_service.clear()
    yield auth_service
    auth_service.clear()
    verification_runner.cancel_all()


@pytest.fixture
def client(tmp_data, test_db, verifier, fresh_auth_service):
    original = (
        settings.data_path,
        settings.auto_verify,
        settings.verification_delay_seconds,
        settings.digilocker_connect_delay_seconds,
    )
    settings.data_path = tmp_data
    settings.auto_verify = True
    settings.verification_delay_seconds = 0
    settings.digilocker_connect_delay_seconds = 0
    c = TestClient(app)
    yield c
    (
        settings.data_path,
        settings.auto_verify,
        settings.verification_delay_seconds,
        settings.digilocker_connect_delay_seconds,
    ) = original


@pytest.fixture
def manual_review(client):
    """Leave uploads pending instead of running the simulated verifier."""
    settings.auto_verify = False
    yield
    settings.auto_verify = True


def login(client, email, role, password="secret-pass"):
    r = client.post("/api/v1/auth/login", json={"email": email, "password": password, "role": role})
    assert r.status_code == 200, r.text
    return r.json()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def hr(client):
    return login(client, "sarah.wilson@techcorp.com", "hr")


@pytest.fixture
def candidate(client):
    return login(client, "emma@email.com", "user")


def upload(client, token, doc_type="resume", content=b"%PDF-1.4 resume", filename="resume.pdf",
           mime="application/pdf", **data):
    form = {"doc_type": doc_type, **data} if doc_type is not None else data
    return client.post(
        "/api/v1/documents",
        files={"file": (filename, content, mime)},
        data=form,
        headers=auth(token),
    )
