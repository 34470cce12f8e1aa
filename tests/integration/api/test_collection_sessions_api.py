"""Integration tests for the collection sessions API."""

import pytest
from starlette.requests import Request

from collectra.domain.errors import (
    ConflictError,
    FieldError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from collectra.infrastructure.api.app import app, error_body, status_code_for

BASE = "/api/v1/collection-sessions"

CREATE_BODY = {
    "supplier_id": "sup-1",
    "supplier_name": "Green Paper Mill",
    "site_location": "Warehouse 4, North Gate",
    "coordinator_id": "user-1",
    "coordinator_name": "Dana Coordinator",
    "estimated_start_date": "2024-03-01T08:00:00Z",
    "estimated_end_date": "2024-03-01T16:00:00Z",
    "estimated_amount": 500,
}


async def create_session(client, headers) -> dict:
    response = await client.post(BASE, json=CREATE_BODY, headers=headers)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_session(client, actor_headers):
    response = await client.post(BASE, json=CREATE_BODY, headers=actor_headers)

    assert response.status_code == 201
    data = response.json()
    assert data["session_number"] == "CS-000001"
    assert data["status"] == "planned"
    assert data["version"] == 1
    assert data["created_by"] == "user-1"
    assert data["collection_data"]["estimated_amount"] == 500
    assert data["collection_data"]["paper_types"] == {"carton": 0, "mixed": 0, "sw": 0, "sc": 0, "np": 0}
    assert data["performance"] is None
    assert response.headers["etag"] == '"1"'


@pytest.mark.asyncio
async def test_create_requires_actor(client):
    response = await client.post(BASE, json=CREATE_BODY)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_validation_errors(client, actor_headers):
    response = await client.post(BASE, json={"supplier_id": "sup-1"}, headers=actor_headers)

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "VALIDATION_FAILED"
    fields = {e["field"] for e in data["errors"]}
    assert {"coordinator_id", "site_location", "estimated_amount"} <= fields


@pytest.mark.asyncio
async def test_full_lifecycle(client, actor_headers):
    created = await create_session(client, actor_headers)
    session_url = f"{BASE}/{created['id']}"

    response = await client.post(f"{session_url}/transitions", json={"status": "in-progress"}, headers=actor_headers)
    assert response.status_code == 200
    assert response.json()["actual_start_date"] is not None

    response = await client.patch(
        f"{session_url}/collection-data",
        json={"paper_types": {"carton": 400, "mixed": 50}},
        headers=actor_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["collection_data"]["actual_amount"] == 450
    assert data["warnings"] == []

    response = await client.post(
        f"{session_url}/transitions",
        json={"status": "completed"},
        headers={**actor_headers, "If-Match": '"3"'},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["version"] == 4
    assert data["performance"] == {"efficiency": 90, "quality": 90, "punctuality": 100}
    assert data["total_time_spent"] == 0

    response = await client.post(f"{session_url}/transitions", json={"status": "planned"}, headers=actor_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "INVALID_TRANSITION"


@pytest.mark.asyncio
async def test_stale_if_match_is_precondition_failed(client, actor_headers):
    created = await create_session(client, actor_headers)
    session_url = f"{BASE}/{created['id']}"
    await client.post(f"{session_url}/transitions", json={"status": "in-progress"}, headers=actor_headers)

    response = await client.post(
        f"{session_url}/transitions",
        json={"status": "completed"},
        headers={**actor_headers, "If-Match": '"1"'},
    )

    assert response.status_code == 412
    data = response.json()
    assert data["error"] == "CONFLICT"
    assert data["current_version"] == 2


@pytest.mark.asyncio
async def test_malformed_if_match(client, actor_headers):
    created = await create_session(client, actor_headers)

    response = await client.post(
        f"{BASE}/{created['id']}/transitions",
        json={"status": "in-progress"},
        headers={**actor_headers, "If-Match": "abc"},
    )

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_status_is_validation_error(client, actor_headers):
    created = await create_session(client, actor_headers)

    response = await client.post(
        f"{BASE}/{created['id']}/transitions", json={"status": "paused"}, headers=actor_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_amount_mismatch_is_reported_as_warning(client, actor_headers):
    created = await create_session(client, actor_headers)

    response = await client.patch(
        f"{BASE}/{created['id']}/collection-data",
        json={"paper_types": {"carton": 300}, "actual_amount": 320},
        headers=actor_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["collection_data"]["actual_amount"] == 320
    assert data["collection_data"]["amount_discrepancy"] == 20
    assert len(data["warnings"]) == 1


@pytest.mark.asyncio
async def test_single_field_updates(client, actor_headers):
    created = await create_session(client, actor_headers)
    session_url = f"{BASE}/{created['id']}"

    response = await client.put(f"{session_url}/paper-types/sw", json={"quantity": 12.5}, headers=actor_headers)
    assert response.status_code == 200
    assert response.json()["collection_data"]["paper_types"]["sw"] == 12.5

    response = await client.put(f"{session_url}/actual-amount", json={"quantity": 40}, headers=actor_headers)
    assert response.status_code == 200
    assert response.json()["collection_data"]["actual_amount"] == 40

    response = await client.put(f"{session_url}/paper-types/glass", json={"quantity": 1}, headers=actor_headers)
    assert response.status_code == 422

    response = await client.put(f"{session_url}/actual-amount", json={"quantity": -1}, headers=actor_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_data_update_on_cancelled_session(client, actor_headers):
    created = await create_session(client, actor_headers)
    session_url = f"{BASE}/{created['id']}"
    await client.post(f"{session_url}/transitions", json={"status": "cancelled"}, headers=actor_headers)

    response = await client.put(f"{session_url}/actual-amount", json={"quantity": 10}, headers=actor_headers)

    assert response.status_code == 409
    assert response.json()["error"] == "INVALID_STATE"


@pytest.mark.asyncio
async def test_problems_comments_and_report(client, actor_headers):
    created = await create_session(client, actor_headers)
    session_url = f"{BASE}/{created['id']}"

    response = await client.post(
        f"{session_url}/problems",
        json={"description": "Access road flooded", "priority": "critical"},
        headers=actor_headers,
    )
    assert response.status_code == 201
    problem = response.json()["problems"][0]
    assert problem["status"] == "open"
    assert problem["reported_by"] == "Dana Coordinator"

    resolve_url = f"{session_url}/problems/{problem['id']}/resolve"
    response = await client.post(
        resolve_url,
        json={"resolution": "site rescheduled"},
        headers={"X-Actor-Id": "user-2", "X-Actor-Name": "Lee Marketer"},
    )
    assert response.status_code == 200
    resolved = response.json()["problems"][0]
    assert resolved["status"] == "resolved"
    assert resolved["resolved_by"] == "Lee Marketer"
    assert resolved["resolution"] == "site rescheduled"
    assert resolved["resolved_date"] is not None

    response = await client.post(resolve_url, json={"resolution": "again"}, headers=actor_headers)
    assert response.status_code == 409
    assert response.json()["error"] == "INVALID_STATE"

    response = await client.post(f"{session_url}/comments", json={"comment": "Crew on standby"}, headers=actor_headers)
    assert response.status_code == 201
    comment = response.json()["comments"][0]
    assert comment["type"] == "general"
    assert comment["author_id"] == "user-1"

    response = await client.get(f"{session_url}/report")
    assert response.status_code == 200
    report = response.json()
    assert report["total_problems"] == 1
    assert report["resolved_problems"] == 1
    assert report["open_problems"] == 0
    assert report["total_comments"] == 1


@pytest.mark.asyncio
async def test_blank_problem_description(client, actor_headers):
    created = await create_session(client, actor_headers)

    response = await client.post(
        f"{BASE}/{created['id']}/problems", json={"description": "  "}, headers=actor_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_summary_and_delete(client, actor_headers):
    first = await create_session(client, actor_headers)
    await create_session(client, actor_headers)

    response = await client.get(BASE)
    assert response.status_code == 200
    assert response.json()["total"] == 2

    response = await client.get(f"{BASE}/summary")
    assert response.status_code == 200
    summary = response.json()
    assert summary["total_sessions"] == 2
    assert summary["by_status"]["planned"] == 2

    response = await client.delete(f"{BASE}/{first['id']}", headers=actor_headers)
    assert response.status_code == 204

    response = await client.get(f"{BASE}/{first['id']}")
    assert response.status_code == 404
    assert response.json()["error"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_requires_actor(client, actor_headers):
    created = await create_session(client, actor_headers)

    response = await client.delete(f"{BASE}/{created['id']}")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/live", headers={"X-Correlation-ID": "cid_test"})
    assert response.json()["status"] == "alive"
    assert response.headers["X-Correlation-ID"] == "cid_test"


def make_request(headers: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({"type": "http", "method": "POST", "path": "/", "headers": raw})


@pytest.mark.parametrize(
    "error,headers,expected",
    [
        (ConflictError("ses-1", 1, 2), {}, 409),
        (ConflictError("ses-1", 1, 2), {"If-Match": '"1"'}, 412),
        (InvalidStateError("closed"), {}, 409),
        (NotFoundError("Collection session", "ses-1"), {}, 404),
    ],
)
def test_status_code_for(error, headers, expected):
    assert status_code_for(error, make_request(headers)) == expected


def test_error_body_shapes():
    assert error_body(ConflictError("ses-1", 1, 2)) == {
        "error": "CONFLICT",
        "message": "Session was modified concurrently; reload and apply the change again",
        "current_version": 2,
    }
    assert error_body(NotFoundError("Collection session", "ses-1")) == {
        "error": "NOT_FOUND",
        "message": "Collection session not found",
    }
    body = error_body(ValidationError([FieldError(field="comment", message="Comment text is required", code="required")]))
    assert body["errors"] == [{"field": "comment", "message": "Comment text is required", "code": "required"}]


def test_error_responses_documented_in_openapi():
    paths = app.openapi()["paths"]
    error_ref = "#/components/schemas/ErrorResponse"

    get_responses = paths[f"{BASE}/{{session_id}}"]["get"]["responses"]
    assert get_responses["404"]["content"]["application/json"]["schema"]["$ref"] == error_ref

    transition_responses = paths[f"{BASE}/{{session_id}}/transitions"]["post"]["responses"]
    assert {"404", "409", "412"} <= set(transition_responses)
    assert transition_responses["412"]["content"]["application/json"]["schema"]["$ref"] == error_ref
