import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from verifypro.config import settings

SCHEMA_VERSION = 1


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_session_factory():
    """Session factory for work that outlives the request (verification runs)."""
    return SessionLocal


SCHEMA_SQL = """\
-- ============================================================
-- APP CONFIGURATION
-- ============================================================
CREATE TABLE IF NOT EXISTS app_config (
    key        TEXT PRIMARY KEY,
    value      TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- USERS
-- ============================================================
CREATE TABLE IF NOT EXISTS users (
    id            TEXT PRIMARY KEY,
    email         TEXT NOT NULL UNIQUE,
    name          TEXT NOT NULL,
    role          TEXT NOT NULL CHECK(role IN ('hr','user')),
    password_hash TEXT NOT NULL,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- DOCUMENT REQUESTS
-- ============================================================
CREATE TABLE IF NOT EXISTS document_requests (
    id                    TEXT PRIMARY KEY,
    requester_id          TEXT NOT NULL REFERENCES users(id),
    candidate_id          TEXT NOT NULL REFERENCES users(id),
    doc_type              TEXT NOT NULL,
    notes                 TEXT,
    request_date          TEXT NOT NULL,
    due_date              TEXT,
    status                TEXT NOT NULL DEFAULT 'open'
                          CHECK(status IN ('open','fulfilled')),
    fulfilled_document_id TEXT,
    fulfilled_at          TEXT
);

CREATE INDEX IF NOT EXISTS idx_requests_candidate ON document_requests(candidate_id);
CREATE INDEX IF NOT EXISTS idx_requests_requester ON document_requests(requester_id);
CREATE INDEX IF NOT EXISTS idx_requests_status ON document_requests(status);

-- ============================================================
-- DOCUMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS documents (
    id               TEXT PRIMARY KEY,
    document_id      TEXT NOT NULL UNIQUE,
    candidate_id     TEXT NOT NULL REFERENCES users(id),
    uploaded_by      TEXT NOT NULL REFERENCES users(id),
    file_name        TEXT NOT NULL,
    doc_type         TEXT NOT NULL,
    mime_type        TEXT,
    file_size_bytes  INTEGER,
    file_hash        TEXT,
    stored_path      TEXT UNIQUE,
    upload_date      TEXT NOT NULL,
    source           TEXT NOT NULL DEFAULT 'manual'
                     CHECK(source IN ('manual','digilocker')),
    issuer           TEXT,
    issue_date       TEXT,
    status           TEXT NOT NULL DEFAULT 'pending'
                     CHECK(status IN ('pending','verified','rejected')),
    confidence_score INTEGER NOT NULL DEFAULT 0,
    decided_by       TEXT CHECK(decided_by IN ('ai','reviewer','trusted_source')),
    notes            TEXT,
    reviewer_notes   TEXT,
    verification_details TEXT,
    request_id       TEXT REFERENCES document_requests(id),
    created_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    updated_at       TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_documents_candidate ON documents(candidate_id);
CREATE INDEX IF NOT EXISTS idx_documents_status ON documents(status);
CREATE INDEX IF NOT EXISTS idx_documents_hash ON documents(file_hash);

-- ============================================================
-- TRUSTED SOURCE LINKS (DigiLocker)
-- ============================================================
CREATE TABLE IF NOT EXISTS trusted_source_links (
    user_id      TEXT PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
    abc_id       TEXT NOT NULL,
    connected_at TEXT NOT NULL
);
"""


# ALTER TABLE statements for columns added after a database was first created
MIGRATIONS: list[str] = []


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    # Run migrations idempotently (ALTER TABLE fails if column exists)
    for migration in MIGRATIONS:
        try:
            conn.execute(migration)
            conn.commit()
        except sqlite3.OperationalError:
            pass  # column already exists
    conn.execute(
        "INSERT INTO app_config (key, value) VALUES ('schema_version', ?) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
        (str(SCHEMA_VERSION),),
    )
    conn.commit()
    conn.close()
