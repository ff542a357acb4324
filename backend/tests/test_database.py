import sqlite3

from verifypro.database import MIGRATIONS, SCHEMA_VERSION, init_db


class TestInitDb:
    def test_schema_has_all_columns_without_migrations(self, tmp_path):
        db_path = tmp_path / "db.sqlite"
        init_db(db_path)
        conn = sqlite3.connect(str(db_path))
        documents = {row[1] for row in conn.execute("PRAGMA table_info(documents)")}
        requests = {row[1] for row in conn.execute("PRAGMA table_info(document_requests)")}
        conn.close()
        assert {"decided_by", "verification_details"} <= documents
        assert "fulfilled_at" in requests
        assert MIGRATIONS == []

    def test_init_is_idempotent(self, tmp_path):
        db_path = tmp_path / "nested" / "db.sqlite"
        init_db(db_path)
        init_db(db_path)
        conn = sqlite3.connect(str(db_path))
        version = conn.execute("SELECT value FROM app_config WHERE key = 'schema_version'").fetchone()[0]
        conn.close()
        assert version == str(SCHEMA_VERSION)
