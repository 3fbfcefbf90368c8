from trademind.core.constants import EventSeverity, StageType
from trademind.pipeline.events import EventLogger, EventStore, ProcessingEvent


def _event(shipment_id: str, n: int) -> ProcessingEvent:
    return ProcessingEvent(
        shipment_id=shipment_id,
        stage=StageType.DUTY,
        agent_name="Duty Calculator Agent",
        action=f"Action {n}",
        detail=f"detail {n}",
    )


def test_emit_builds_and_publishes_event():
    logger = EventLogger()
    received = []
    logger.channel.subscribe(received.append)

    event = logger.emit(
        "shp-1",
        StageType.HS_CODE,
        "HS Code Agent",
        "Classification Complete",
        "Classified as 8471.30",
        EventSeverity.SUCCESS,
        {"hs_code": "8471.30"},
    )

    assert received == [event]
    assert event.shipment_id == "shp-1"
    assert event.severity == EventSeverity.SUCCESS
    assert event.data == {"hs_code": "8471.30"}
    assert event.timestamp.tzinfo is not None


def test_emit_defaults_to_info_and_unique_ids():
    logger = EventLogger()
    first = logger.emit("shp-1", StageType.RISK, "Risk Scoring Agent", "A", "a")
    second = logger.emit("shp-1", StageType.RISK, "Risk Scoring Agent", "B", "b")

    assert first.severity == EventSeverity.INFO
    assert first.data is None
    assert first.id != second.id


def test_to_dict_is_json_ready():
    payload = _event("shp-1", 1).to_dict()
    assert payload["stage"] == "duty"
    assert payload["severity"] == "info"
    assert isinstance(payload["timestamp"], str)


def test_store_keeps_most_recent_hundred():
    store = EventStore()
    events = [_event("shp-1", n) for n in range(105)]
    for event in events:
        store.append(event)

    assert len(store) == 100
    assert list(store) == events[5:]
    assert store.recent()[0] is events[-1]
    assert store.recent()[-1] is events[5]


def test_store_custom_limit():
    store = EventStore(limit=3)
    for n in range(5):
        store.append(_event("shp-1", n))
    assert [e.action for e in store] == ["Action 2", "Action 3", "Action 4"]


def test_for_shipment_filters_in_order():
    store = EventStore()
    store.append(_event("shp-a", 1))
    store.append(_event("shp-b", 2))
    store.append(_event("shp-a", 3))

    assert [e.action for e in store.for_shipment("shp-a")] == ["Action 1", "Action 3"]
    assert store.for_shipment("shp-missing") == []


def test_clear():
    store = EventStore()
    store.append(_event("shp-1", 1))
    store.clear()
    assert len(store) == 0
    assert store.recent() == []
