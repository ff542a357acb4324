from conftest import auth, login, upload

LEGACY_SNAPSHOT = {
    "user": {"id": "1", "email": "emma@email.com", "name": "emma", "role": "user"},
    "digilocker_connected": "true",
    "digilocker_abc_id": "ABC-998877",
    "user_uploads": [
        {
            "id": 1700000000000,
            "fileName": "resume.pdf",
            "documentType": "resume",
            "uploadDate": "2024-01-15",
            "status": "verified",
            "confidenceScore": 91,
        },
    ],
    "user_documents": [
        {
            "id": "dl-1",
            "fileName": "Aadhaar Card",
            "fileType": "Identity",
            "uploadDate": "2024-01-16",
            "status": "verified",
            "confidenceScore": 98,
            "source": "digilocker",
            "extractedInfo": {"issuer": "UIDAI", "issueDate": "2018-03-15"},
        },
    ],
}


class TestExport:
    def test_export_shape(self, client, candidate):
        upload(client, candidate["token"])
        r = client.get("/api/v1/state/export", headers=auth(candidate["token"]))
        assert r.status_code == 200
        data = r.json()
        assert data["schema_version"] == 1
        assert data["user"]["email"] == "emma@email.com"
        assert data["digilocker_connected"] is False
        assert len(data["user_documents"]) == 1
        assert data["user_documents"][0]["confidence_score"] == 88

    def test_pending_export_has_no_score(self, client, candidate, manual_review):
        upload(client, candidate["token"])
        data = client.get("/api/v1/state/export", headers=auth(candidate["token"])).json()
        assert data["user_documents"][0]["confidence_score"] is None

    def test_export_requires_session(self, client):
        r = client.get("/api/v1/state/export")
        assert r.status_code == 401


class TestImport:
    def test_legacy_snapshot_is_migrated(self, client, candidate):
        r = client.post("/api/v1/state/import", json=LEGACY_SNAPSHOT, headers=auth(candidate["token"]))
        assert r.status_code == 200, r.text
        assert r.json() == {
            "schema_version": 1,
            "migrated_from": 0,
            "imported": 2,
            "skipped": 0,
            "digilocker_connected": True,
        }

        docs = client.get("/api/v1/documents", headers=auth(candidate["token"])).json()
        by_name = {d["file_name"]: d for d in docs}
        assert by_name["Aadhaar Card"]["doc_type"] == "identity-proof"
        assert by_name["Aadhaar Card"]["issuer"] == "UIDAI"
        assert by_name["Aadhaar Card"]["decided_by"] == "trusted_source"
        assert by_name["resume.pdf"]["confidence_score"] == 91

        status = client.get("/api/v1/digilocker/status", headers=auth(candidate["token"])).json()
        assert status == {"connected": True, "abc_id": "ABC-998877", "connected_at": status["connected_at"]}

    def test_reimport_skips_duplicates(self, client, candidate):
        client.post("/api/v1/state/import", json=LEGACY_SNAPSHOT, headers=auth(candidate["token"]))
        r = client.post("/api/v1/state/import", json=LEGACY_SNAPSHOT, headers=auth(candidate["token"]))
        assert r.json()["imported"] == 0
        assert r.json()["skipped"] == 2

    def test_export_then_import_into_another_account(self, client, candidate):
        upload(client, candidate["token"])
        snapshot = client.get("/api/v1/state/export", headers=auth(candidate["token"])).json()

        other = login(client, "raj@email.com", "user")
        r = client.post("/api/v1/state/import", json=snapshot, headers=auth(other["token"]))
        assert r.json()["migrated_from"] == 1
        assert r.json()["imported"] == 1

    def test_future_schema_version_rejected(self, client, candidate):
        r = client.post("/api/v1/state/import", json={"schema_version": 2}, headers=auth(candidate["token"]))
        assert r.status_code == 400
        assert r.json()["field"] == "schema_version"

    def test_malformed_snapshot(self, client, candidate):
        r = client.post("/api/v1/state/import", json={"schema_version": 1, "user_documents": [{"status": "verified"}]},
                        headers=auth(candidate["token"]))
        assert r.status_code == 400
        assert r.json()["code"] == "validation_error"

    def test_unknown_status_rejected(self, client, candidate):
        snapshot = {"schema_version": 1, "user_documents": [
            {"file_name": "a.pdf", "upload_date": "2024-01-01", "status": "archived"},
        ]}
        r = client.post("/api/v1/state/import", json=snapshot, headers=auth(candidate["token"]))
        assert r.status_code == 400

    def test_hr_cannot_import(self, client, hr):
        r = client.post("/api/v1/state/import", json=LEGACY_SNAPSHOT, headers=auth(hr["token"]))
        assert r.status_code == 403


class TestLegacyEdgeCases:
    RECORD = {"id": 1, "fileName": "offer.pdf", "documentType": "experience-letter", "uploadDate": "2024-02-01",
              "status": "verified", "confidenceScore": 90}

    def test_record_in_both_legacy_arrays_imported_once(self, client, candidate):
        snapshot = {"user_uploads": [self.RECORD], "user_documents": [dict(self.RECORD)]}
        r = client.post("/api/v1/state/import", json=snapshot, headers=auth(candidate["token"]))
        assert r.status_code == 200, r.text
        assert r.json()["imported"] == 1
        assert r.json()["skipped"] == 1
        assert len(client.get("/api/v1/documents", headers=auth(candidate["token"])).json()) == 1

    def test_non_object_record_rejected(self, client, candidate):
        r = client.post("/api/v1/state/import", json={"user_uploads": ["oops"]}, headers=auth(candidate["token"]))
        assert r.status_code == 400
        assert r.json()["field"] == "user_documents"

    def test_non_list_array_rejected(self, client, candidate):
        r = client.post("/api/v1/state/import", json={"user_documents": {"fileName": "a.pdf"}},
                        headers=auth(candidate["token"]))
        assert r.status_code == 400
        assert r.json()["field"] == "user_documents"

    def test_malformed_extracted_info_rejected(self, client, candidate):
        record = {**self.RECORD, "extractedInfo": "UIDAI"}
        r = client.post("/api/v1/state/import", json={"user_uploads": [record]}, headers=auth(candidate["token"]))
        assert r.status_code == 400

    def test_rejected_import_leaves_no_documents(self, client, candidate):
        snapshot = {"user_uploads": [self.RECORD, {**self.RECORD, "id": 2, "fileName": "b.pdf", "status": "lost"}]}
        r = client.post("/api/v1/state/import", json=snapshot, headers=auth(candidate["token"]))
        assert r.status_code == 400
        assert client.get("/api/v1/documents", headers=auth(candidate["token"])).json() == []

    def test_extracted_info_is_kept(self, client, candidate):
        client.post("/api/v1/state/import", json=LEGACY_SNAPSHOT, headers=auth(candidate["token"]))
        docs = client.get("/api/v1/documents", headers=auth(candidate["token"])).json()
        aadhaar = next(d for d in docs if d["file_name"] == "Aadhaar Card")
        assert aadhaar["verification_details"] == {
            "extracted_info": {"issuer": "UIDAI", "issueDate": "2018-03-15"},
        }

        snapshot = client.get("/api/v1/state/export", headers=auth(candidate["token"])).json()
        exported = next(d for d in snapshot["user_documents"] if d["file_name"] == "Aadhaar Card")
        assert exported["verification_details"]["extracted_info"]["issuer"] == "UIDAI"
