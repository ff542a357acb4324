from datetime import date, timedelta

from conftest import auth, login, upload


def _create(client, hr, candidate, **overrides):
    body = {
        "candidate_id": candidate["user"]["id"],
        "doc_type": "experience-certificate",
        "notes": "Please provide your previous employment certificate",
        **overrides,
    }
    return client.post("/api/v1/requests", json=body, headers=auth(hr["token"]))


class TestCreateRequest:
    def test_create_request(self, client, hr, candidate):
        r = _create(client, hr, candidate)
        assert r.status_code == 201
        data = r.json()
        assert data["status"] == "open"
        assert data["requester_id"] == hr["user"]["id"]
        assert data["doc_type_label"] == "Experience Certificate"
        expected_due = date.fromisoformat(data["request_date"]) + timedelta(days=7)
        assert data["due_date"] == expected_due.isoformat()
        assert data["urgent"] is False

    def test_create_by_candidate_email(self, client, hr, candidate):
        r = _create(client, hr, candidate, candidate_id=None, candidate_email="EMMA@email.com")
        assert r.status_code == 201
        assert r.json()["candidate_id"] == candidate["user"]["id"]

    def test_near_due_date_is_urgent(self, client, hr, candidate):
        due = (date.today() + timedelta(days=2)).isoformat()
        r = _create(client, hr, candidate, due_date=due)
        assert r.json()["urgent"] is True

    def test_due_date_in_past_rejected(self, client, hr, candidate):
        r = _create(client, hr, candidate, due_date="2000-01-01")
        assert r.status_code == 400
        assert r.json()["field"] == "due_date"

    def test_malformed_due_date_rejected(self, client, hr, candidate):
        r = _create(client, hr, candidate, due_date="next friday")
        assert r.status_code == 400

    def test_doc_type_required(self, client, hr, candidate):
        r = _create(client, hr, candidate, doc_type=None)
        assert r.status_code == 400
        assert r.json()["field"] == "doc_type"

    def test_other_is_not_requestable(self, client, hr, candidate):
        r = _create(client, hr, candidate, doc_type="other")
        assert r.status_code == 400

    def test_unknown_candidate(self, client, hr, candidate):
        r = _create(client, hr, candidate, candidate_id="missing")
        assert r.status_code == 404

    def test_cannot_request_from_hr_account(self, client, hr, candidate):
        r = _create(client, hr, candidate, candidate_id=hr["user"]["id"])
        assert r.status_code == 400

    def test_candidate_cannot_create_requests(self, client, candidate):
        r = _create(client, candidate, candidate)
        assert r.status_code == 403


class TestListRequests:
    def test_candidate_sees_requests_addressed_to_them(self, client, hr, candidate):
        other = login(client, "mike@email.com", "user")
        _create(client, hr, candidate)
        _create(client, hr, other)

        r = client.get("/api/v1/requests", headers=auth(candidate["token"]))
        assert len(r.json()) == 1
        r = client.get("/api/v1/requests", headers=auth(hr["token"]))
        assert len(r.json()) == 2

    def test_filter_by_status(self, client, hr, candidate):
        _create(client, hr, candidate)
        h = auth(candidate["token"])
        assert len(client.get("/api/v1/requests?status=open", headers=h).json()) == 1
        assert client.get("/api/v1/requests?status=fulfilled", headers=h).json() == []
        assert client.get("/api/v1/requests?status=closed", headers=h).status_code == 400

    def test_other_candidate_cannot_read_request(self, client, hr, candidate):
        req_id = _create(client, hr, candidate).json()["id"]
        other = login(client, "mike@email.com", "user")
        r = client.get(f"/api/v1/requests/{req_id}", headers=auth(other["token"]))
        assert r.status_code == 403


class TestFulfilment:
    def test_matching_upload_fulfils_request(self, client, hr, candidate):
        req_id = _create(client, hr, candidate).json()["id"]
        doc = upload(client, candidate["token"], doc_type="experience-certificate").json()
        assert doc["request_id"] == req_id

        r = client.get(f"/api/v1/requests/{req_id}", headers=auth(hr["token"]))
        assert r.json()["status"] == "fulfilled"
        assert r.json()["fulfilled_document_id"] == doc["id"]
        assert r.json()["urgent"] is False

    def test_other_type_leaves_request_open(self, client, hr, candidate):
        req_id = _create(client, hr, candidate).json()["id"]
        doc = upload(client, candidate["token"], doc_type="resume").json()
        assert doc["request_id"] is None
        r = client.get(f"/api/v1/requests/{req_id}", headers=auth(hr["token"]))
        assert r.json()["status"] == "open"

    def test_explicit_request_with_wrong_type(self, client, hr, candidate, db_session):
        req_id = _create(client, hr, candidate).json()["id"]
        r = upload(client, candidate["token"], doc_type="resume", request_id=req_id)
        assert r.status_code == 400
        assert r.json()["field"] == "doc_type"

    def test_explicit_request_already_fulfilled(self, client, hr, candidate):
        req_id = _create(client, hr, candidate).json()["id"]
        upload(client, candidate["token"], doc_type="experience-certificate", content=b"first")
        r = upload(client, candidate["token"], doc_type="experience-certificate", content=b"second",
                   request_id=req_id)
        assert r.status_code == 409

    def test_explicit_request_for_another_candidate(self, client, hr, candidate):
        other = login(client, "mike@email.com", "user")
        req_id = _create(client, hr, other).json()["id"]
        r = upload(client, candidate["token"], doc_type="experience-certificate", request_id=req_id)
        assert r.status_code == 400
        assert r.json()["field"] == "request_id"

    def test_oldest_open_request_is_fulfilled_first(self, client, hr, candidate):
        first = _create(client, hr, candidate).json()["id"]
        second = _create(client, hr, candidate).json()["id"]
        upload(client, candidate["token"], doc_type="experience-certificate")

        h = auth(hr["token"])
        statuses = {
            first: client.get(f"/api/v1/requests/{first}", headers=h).json()["status"],
            second: client.get(f"/api/v1/requests/{second}", headers=h).json()["status"],
        }
        assert sorted(statuses.values()) == ["fulfilled", "open"]
