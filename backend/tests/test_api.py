"""API tests against the in-memory store, driven through httpx."""

import pytest

from conftest import FAILED, PASSED

SHIPMENT_PAYLOAD = {
    "reference_number": "TM-API-001",
    "exporter": {"name": "Acme Exports", "address": "1 Dock Rd", "country": "China"},
    "importer": {"name": "Globex Imports", "address": "9 Bay St", "country": "United States"},
    "goods": {
        "description": "Laptop computers",
        "quantity": 200,
        "value": 100000,
        "weight": 800,
    },
    "documents": [
        {"file_name": "commercial_invoice.pdf"},
        {"file_name": "scan_0042.pdf", "type": "bill_of_lading"},
    ],
}


async def _create(client) -> dict:
    resp = await client.post("/api/v1/shipments", json=SHIPMENT_PAYLOAD)
    assert resp.status_code == 201
    return resp.json()


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_create_shipment(client):
    body = await _create(client)

    assert body["id"].startswith("shp-")
    assert body["status"] == "draft"
    assert body["reference_number"] == "TM-API-001"
    assert [d["type"] for d in body["documents"]] == ["commercial_invoice", "bill_of_lading"]
    assert all(d["validation_status"] == "pending" for d in body["documents"])


@pytest.mark.asyncio
async def test_create_rejects_invalid_payload(client):
    resp = await client.post("/api/v1/shipments", json={"goods": {"value": -1}})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_list_and_filter(client):
    first = await _create(client)
    second = await _create(client)
    await client.post(f"/api/v1/shipments/{first['id']}/process")

    resp = await client.get("/api/v1/shipments")
    assert [s["id"] for s in resp.json()["data"]] == [second["id"], first["id"]]

    resp = await client.get("/api/v1/shipments", params={"status": "cleared"})
    assert [s["id"] for s in resp.json()["data"]] == [first["id"]]


@pytest.mark.asyncio
async def test_get_unknown_shipment(client):
    resp = await client.get("/api/v1/shipments/shp-missing")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_process_shipment(client, store):
    created = await _create(client)

    resp = await client.post(f"/api/v1/shipments/{created['id']}/process")
    assert resp.status_code == 200
    body = resp.json()

    assert body["shipment"]["status"] == "cleared"
    assert body["shipment"]["hs_code"]["code"] == "8471.30"
    assert all(d["validation_status"] == "valid" for d in body["shipment"]["documents"])
    assert body["run"]["status"] == "cleared"
    assert body["run"]["stages_completed"] == 7

    stored = store.get_shipment(created["id"])
    assert stored.status == "cleared"
    assert stored.risk_score is not None


@pytest.mark.asyncio
async def test_process_rejected_by_compliance(client, api_functions):
    api_functions.finding_statuses = [PASSED, FAILED, PASSED, PASSED]
    created = await _create(client)

    resp = await client.post(f"/api/v1/shipments/{created['id']}/process")
    assert resp.json()["shipment"]["status"] == "rejected"


@pytest.mark.asyncio
async def test_reprocessing_terminal_shipment_conflicts(client):
    created = await _create(client)
    await client.post(f"/api/v1/shipments/{created['id']}/process")

    resp = await client.post(f"/api/v1/shipments/{created['id']}/process")
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_stage_failure_returns_bad_gateway(client, api_functions, store):
    api_functions.fail_on = {"classify"}
    created = await _create(client)

    resp = await client.post(f"/api/v1/shipments/{created['id']}/process")
    assert resp.status_code == 502
    detail = resp.json()["detail"]
    assert detail["stage"] == "hs_code"
    assert detail["run"]["status"] == "aborted"

    stored = store.get_shipment(created["id"])
    assert stored.status == "draft"
    assert stored.agent_results["validation"] == {"valid": 2, "total": 2}
    assert stored.hs_code is None


@pytest.mark.asyncio
async def test_shipment_events(client):
    created = await _create(client)
    await client.post(f"/api/v1/shipments/{created['id']}/process")

    resp = await client.get(f"/api/v1/shipments/{created['id']}/events")
    events = resp.json()["data"]

    assert events[0]["action"] == "Processing Started"
    assert events[-1]["action"] == "Processing Completed"
    assert events[-1]["severity"] == "success"
    assert resp.json()["total"] == len(events)


@pytest.mark.asyncio
async def test_events_unknown_shipment(client):
    resp = await client.get("/api/v1/shipments/shp-missing/events")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_dashboard_feed_and_clear(client):
    created = await _create(client)
    await client.post(f"/api/v1/shipments/{created['id']}/process")

    resp = await client.get("/api/v1/events")
    feed = resp.json()["data"]
    assert feed[0]["action"] == "Processing Completed"
    assert feed[-1]["action"] == "Processing Started"

    resp = await client.delete("/api/v1/events")
    assert resp.status_code == 204
    resp = await client.get("/api/v1/events")
    assert resp.json()["total"] == 0


@pytest.mark.asyncio
async def test_agents_snapshot(client):
    created = await _create(client)
    await client.post(f"/api/v1/shipments/{created['id']}/process")

    resp = await client.get("/api/v1/agents")
    agents = {a["type"]: a for a in resp.json()["data"]}

    assert agents["route"]["name"] == "Quantum Optimizer"
    assert agents["route"]["status"] == "completed"
    assert agents["learning"]["status"] == "idle"


@pytest.mark.asyncio
async def test_dashboard_stats(client):
    created = await _create(client)
    await _create(client)
    await client.post(f"/api/v1/shipments/{created['id']}/process")

    resp = await client.get("/api/v1/stats")
    stats = resp.json()

    assert stats["total_shipments"] == 2
    assert stats["cleared_shipments"] == 1
    assert stats["active_shipments"] == 0
    assert stats["compliance_rate"] == 100.0
    assert stats["total_duties_paid"] == 25000.0
    assert stats["risk_distribution"]["low"] == 1


@pytest.mark.asyncio
async def test_agent_metrics_accumulate_across_runs(client):
    for _ in range(2):
        created = await _create(client)
        resp = await client.post(f"/api/v1/shipments/{created['id']}/process")
        assert resp.status_code == 200

    resp = await client.get("/api/v1/agents")
    agents = {a["type"]: a for a in resp.json()["data"]}

    assert agents["duty"]["metrics"]["total_processed"] == 2
    assert agents["duty"]["metrics"]["success_rate"] == 100.0
    assert agents["learning"]["metrics"]["total_processed"] == 0


@pytest.mark.asyncio
async def test_failed_run_counts_against_success_rate(client, api_functions):
    first = await _create(client)
    await client.post(f"/api/v1/shipments/{first['id']}/process")

    api_functions.fail_on = {"classify"}
    second = await _create(client)
    resp = await client.post(f"/api/v1/shipments/{second['id']}/process")
    assert resp.status_code == 502

    resp = await client.get("/api/v1/agents")
    agents = {a["type"]: a for a in resp.json()["data"]}

    assert agents["hs_code"]["status"] == "error"
    assert agents["hs_code"]["metrics"]["total_processed"] == 2
    assert agents["hs_code"]["metrics"]["success_rate"] == 50.0
    assert agents["duty"]["metrics"]["total_processed"] == 1
