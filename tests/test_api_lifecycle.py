"""API-level tests for the record lifecycle endpoints."""

import re

import pytest
from fastapi.testclient import TestClient

from conftest import SUPERADMIN_HEADERS, USER_HEADERS
from record_lifecycle.api import app

BASE = "/v1/example"
ITEMS = "/v1/example-item"


def create_example(client, name="Widget", headers=USER_HEADERS) -> dict:
    response = client.post(f"{BASE}/create", json={"name": name}, headers=headers)
    assert response.status_code == 200, response.json()
    return response.json()["data"]


def update(client, payload, headers=USER_HEADERS):
    return client.put(f"{BASE}/update", json=payload, headers=headers)


def delete(client, payload, headers=SUPERADMIN_HEADERS):
    return client.request("DELETE", f"{BASE}/delete", json=payload, headers=headers)


class TestCreate:
    def test_new_record_is_draft_with_version_one(self, client):
        response = client.post(f"{BASE}/create", json={"name": "  Widget "}, headers=USER_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Data has been saved successfully."
        data = body["data"]
        assert data["name"] == "Widget"
        assert data["status"] == 2
        assert data["lock_version"] == 1
        assert "sync" not in data
        assert data["detail_info"]["change_log"]["created_by"] == "alice"

    def test_every_unknown_key_is_reported(self, client):
        response = client.post(
            f"{BASE}/create",
            json={"name": "x", "bogus": 1, "lock_version": 3},
            headers=USER_HEADERS,
        )

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert [e["field"] for e in body["errors"]] == ["bogus", "lock_version"]

    def test_business_validation(self, client):
        response = client.post(f"{BASE}/create", json={"name": "   "}, headers=USER_HEADERS)

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Failed to save data."
        assert body["errors"] == [{"field": "name", "message": "Name cannot be blank."}]

    def test_non_object_body(self, client):
        response = client.post(f"{BASE}/create", json=["name"], headers=USER_HEADERS)

        assert response.status_code == 400
        assert response.json()["message"] == "Bad Request."

    def test_requested_status_is_replaced_by_draft(self, client):
        response = client.post(f"{BASE}/create", json={"name": "Widget", "status": 1}, headers=USER_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"]["status"] == 2

    def test_null_string_name_is_blank(self, client):
        response = client.post(f"{BASE}/create", json={"name": "null"}, headers=USER_HEADERS)

        assert response.status_code == 422
        assert response.json()["errors"] == [{"field": "name", "message": "Name cannot be blank."}]


class TestUpdate:
    def test_update_bumps_lock_version(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "name": "Gadget", "lock_version": 1})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Gadget"
        assert data["lock_version"] == 2
        assert data["detail_info"]["change_log"]["updated_by"] == "alice"

    def test_stale_lock_version_conflicts(self, client):
        record = create_example(client)
        assert update(client, {"id": record["id"], "name": "A", "lock_version": 1}).status_code == 200

        response = update(client, {"id": record["id"], "name": "B", "lock_version": 1})

        assert response.status_code == 409
        assert response.json()["message"].startswith("The data being updated is outdated")

    def test_lock_version_required(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "name": "B"})

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "lock_version"

    def test_no_op_update(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "name": "Widget", "lock_version": 1})

        assert response.status_code == 400
        assert response.json()["message"] == "Failed, no record updated."

    def test_missing_record(self, client):
        response = update(client, {"id": 404, "name": "x", "lock_version": 1})

        assert response.status_code == 404

    def test_id_only_is_a_bad_request(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"]})

        assert response.status_code == 400

    @pytest.mark.parametrize("record_id", ["--1", "²", 10**30])
    def test_malformed_or_oversized_id(self, client, record_id):
        response = update(client, {"id": record_id, "name": "x", "lock_version": 1})

        assert response.status_code == 400
        assert response.json()["errors"][0] == {"field": "id", "message": "id must be an integer."}

    def test_name_cannot_be_cleared(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "name": None, "lock_version": 1})

        assert response.status_code == 422
        assert response.json()["errors"] == [{"field": "name", "message": "Name cannot be blank."}]

    def test_completed_requires_superadmin(self, client):
        record = create_example(client)
        assert update(client, {"id": record["id"], "status": 1, "lock_version": 1}).status_code == 200

        response = update(client, {"id": record["id"], "status": 3, "lock_version": 2})
        assert response.status_code == 403

        response = update(
            client, {"id": record["id"], "status": 3, "lock_version": 2}, headers=SUPERADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == 3

    def test_completed_record_cannot_be_reactivated(self, client):
        record = create_example(client)
        update(client, {"id": record["id"], "status": 1, "lock_version": 1})
        update(client, {"id": record["id"], "status": 3, "lock_version": 2}, headers=SUPERADMIN_HEADERS)

        response = update(
            client, {"id": record["id"], "status": 1, "lock_version": 3}, headers=SUPERADMIN_HEADERS
        )

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Failed to update data."
        assert body["errors"][0]["field"] == "status"

    def test_transition_outside_table(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "status": 6, "lock_version": 1})

        assert response.status_code == 422
        assert response.json()["errors"] == [
            {"field": "status", "message": "Cannot change status from Draft to Approved."}
        ]

    def test_invalid_status_value(self, client):
        record = create_example(client)

        response = update(client, {"id": record["id"], "status": "soon", "lock_version": 1})

        assert response.status_code == 422
        assert response.json()["errors"][0]["message"] == "Status is invalid."

    def test_referenced_record_keeps_protected_fields(self, client):
        record = create_example(client)
        item = client.post(
            f"{ITEMS}/create", json={"example_id": record["id"], "name": "part"}, headers=USER_HEADERS
        )
        assert item.status_code == 200

        response = update(client, {"id": record["id"], "name": "Renamed", "lock_version": 1})

        assert response.status_code == 422
        assert "referenced in other data" in response.json()["errors"][0]["message"]


class TestDelete:
    def test_delete_requires_superadmin(self, client):
        record = create_example(client)

        response = delete(client, {"id": record["id"], "lock_version": 1}, headers=USER_HEADERS)

        assert response.status_code == 403

    def test_delete_then_delete_again(self, client):
        record = create_example(client)

        response = delete(client, {"id": record["id"], "lock_version": 1})
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == 4
        assert data["lock_version"] == 2
        assert data["detail_info"]["change_log"]["deleted_by"] == "root"

        response = delete(client, {"id": record["id"], "lock_version": 2})
        assert response.status_code == 400
        assert response.json()["message"] == "Failed, Record already deleted."

    def test_superadmin_can_undelete(self, client):
        record = create_example(client)
        delete(client, {"id": record["id"], "lock_version": 1})

        response = update(client, {"id": record["id"], "status": 0, "lock_version": 2})
        assert response.status_code == 422

        response = update(
            client, {"id": record["id"], "status": 2, "lock_version": 2}, headers=SUPERADMIN_HEADERS
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == 2


class TestRead:
    def test_find_one_hides_lock_version(self, client):
        record = create_example(client)

        response = client.post(f"{BASE}/view", json={"id": record["id"]}, headers=USER_HEADERS)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["id"] == record["id"]
        assert "lock_version" not in data
        assert "sync" not in data

    def test_find_one_with_filter(self, client):
        record = create_example(client)

        response = client.post(f"{BASE}/view", json={"id": record["id"], "status": 1}, headers=USER_HEADERS)

        assert response.status_code == 404

    def test_find_one_with_oversized_filter(self, client):
        record = create_example(client)

        response = client.post(
            f"{BASE}/view", json={"id": record["id"], "status": 10**30}, headers=USER_HEADERS
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "status"

    def test_find_one_renders_local_time(self, client):
        record = create_example(client)

        response = client.post(f"{BASE}/view", json={"id": record["id"]}, headers=USER_HEADERS)

        created_at = response.json()["data"]["detail_info"]["change_log"]["created_at"]
        assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", created_at)

    def test_list(self, client):
        for name in ("alpha", "beta", "gamma"):
            create_example(client, name)

        response = client.post(
            f"{BASE}/data", json={"page": 1, "page_size": 2, "sort_by": "name", "sort_dir": "asc"},
            headers=USER_HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["pagination"] == {"page": 1, "totalCount": 3, "total": 2, "display": 2}
        assert [row["name"] for row in body["data"]] == ["alpha", "beta"]
        assert all("lock_version" not in row for row in body["data"])

    def test_list_without_body(self, client):
        create_example(client)

        response = client.post(f"{BASE}/data", headers=USER_HEADERS)

        assert response.status_code == 200
        assert response.json()["pagination"]["totalCount"] == 1

    def test_list_rejects_unknown_sort(self, client):
        response = client.post(f"{BASE}/data", json={"sort_by": "sync"}, headers=USER_HEADERS)

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "sort_by"

    def test_list_items_by_parent(self, client):
        record = create_example(client)
        for name in ("a", "b"):
            client.post(f"{ITEMS}/create", json={"example_id": record["id"], "name": name}, headers=USER_HEADERS)
        client.post(f"{ITEMS}/create", json={"example_id": 999, "name": "c"}, headers=USER_HEADERS)

        response = client.post(f"{ITEMS}/data", json={"example_id": record["id"]}, headers=USER_HEADERS)

        assert response.json()["pagination"]["totalCount"] == 2


class TestServerError:
    def test_unexpected_error_renders_envelope(self, monkeypatch):
        from record_lifecycle.lifecycle.controller import LifecycleController

        def explode(self, store, params, actor):
            raise RuntimeError("boom")

        monkeypatch.setattr(LifecycleController, "find_one", explode)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.post(f"{BASE}/view", json={"id": 1}, headers=USER_HEADERS)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "An unknown error occurred."


class TestActor:
    def test_required_actor(self, client, monkeypatch):
        from record_lifecycle.config import settings

        monkeypatch.setattr(settings, "require_actor", True)

        response = client.post(f"{BASE}/create", json={"name": "x"})

        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized access."

    def test_anonymous_actor_is_system(self, client):
        response = client.post(f"{BASE}/create", json={"name": "x"})

        assert response.status_code == 200
        assert response.json()["data"]["detail_info"]["change_log"]["created_by"] == "system"


class TestItemSpecification:
    def create_item(self, client, specification):
        record = create_example(client)
        return client.post(
            f"{ITEMS}/create",
            json={"example_id": record["id"], "name": "part", "specification": specification},
            headers=USER_HEADERS,
        )

    def test_exact_keys(self, client):
        response = self.create_item(client, {"unit": "kg", "size": 3})

        assert response.status_code == 200
        assert response.json()["data"]["specification"] == {"unit": "kg", "size": 3}

    def test_missing_key(self, client):
        response = self.create_item(client, {"unit": "kg"})

        assert response.status_code == 422
        assert response.json()["errors"] == [
            {"field": "specification", "message": "Missing required field: size."}
        ]

    def test_extra_key(self, client):
        response = self.create_item(client, {"unit": "kg", "size": 3, "color": "red"})

        assert response.status_code == 422
        assert response.json()["errors"][0]["message"].startswith(
            "Extra field found in Specification: color."
        )

    def test_null_member(self, client):
        response = self.create_item(client, {"unit": "kg", "size": None})

        assert response.status_code == 422
        assert response.json()["errors"] == [
            {
                "field": "specification",
                "message": "Specification field: size is cannot be null or empty.",
            }
        ]


class TestMirrorEndpoints:
    def test_search_without_document_store(self, client):
        create_example(client)

        response = client.post(f"{BASE}/search", json={"name": "wid"}, headers=USER_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"]["totalCount"] == 0

    def test_resync_is_superadmin_only(self, client):
        response = client.post(f"{BASE}/resync", headers=USER_HEADERS)

        assert response.status_code == 403

    def test_resync(self, client):
        response = client.post(f"{BASE}/resync", headers=SUPERADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["data"] == {"synced": 0, "failed": 0}


def test_index_envelope(client):
    response = client.get("/")

    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 200
    assert body["success"] is True
    assert body["data"][0]["language"] == "en"
    assert body["data"][0]["version"] == "V1"


@pytest.mark.parametrize("path", ["/", "/healthz", "/version"])
def test_service_endpoints(client, path):
    response = client.get(path)

    assert response.status_code == 200
