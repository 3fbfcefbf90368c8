import pytest

from trademind.core.constants import AgentStatus, StageType
from trademind.pipeline.agents import (
    DEFAULT_AGENT_NAMES,
    AgentDescriptor,
    AgentStateTracker,
    default_agents,
)
from trademind.pipeline.channels import Channel


@pytest.fixture
def tracker():
    return AgentStateTracker()


def test_default_roster_covers_every_kind():
    agents = default_agents()
    assert [a.type for a in agents] == list(StageType)
    assert all(a.status == AgentStatus.IDLE and a.progress == 0 for a in agents)
    assert len({a.id for a in agents}) == len(agents)
    assert DEFAULT_AGENT_NAMES[StageType.ROUTE] == "Quantum Optimizer"


def test_set_agent_state_merges_updates(tracker):
    tracker.set_agent_state(
        StageType.DUTY,
        status=AgentStatus.PROCESSING,
        progress=0,
        current_task="Calculating duties and taxes",
    )
    tracker.set_agent_state(StageType.DUTY, progress=50)

    agent = tracker.get(StageType.DUTY)
    assert agent.status == AgentStatus.PROCESSING
    assert agent.progress == 50
    assert agent.current_task == "Calculating duties and taxes"
    assert agent.name == "Duty Calculator Agent"


def test_update_is_idempotent(tracker):
    tracker.set_agent_state(StageType.RISK, progress=40)
    first = tracker.get(StageType.RISK)
    tracker.set_agent_state(StageType.RISK, progress=40)
    assert tracker.get(StageType.RISK) == first


def test_other_agents_untouched(tracker):
    before = {a.type: a for a in tracker.agents}
    tracker.set_agent_state(StageType.HS_CODE, status=AgentStatus.COMPLETED, progress=100)
    for agent in tracker.agents:
        if agent.type != StageType.HS_CODE:
            assert agent == before[agent.type]


def test_every_update_notifies_with_full_list(tracker):
    received = []
    tracker.channel.subscribe(received.append)

    tracker.set_agent_state(StageType.VALIDATION, progress=10)
    tracker.set_agent_state(StageType.VALIDATION, progress=20)

    assert len(received) == 2
    assert all(len(snapshot) == len(StageType) for snapshot in received)
    progress = [
        next(a.progress for a in snapshot if a.type == StageType.VALIDATION)
        for snapshot in received
    ]
    assert progress == [10, 20]


def test_unknown_type_notifies_without_change():
    tracker = AgentStateTracker(
        agents=[AgentDescriptor(name="Validation Agent", type=StageType.VALIDATION)]
    )
    received = []
    tracker.channel.subscribe(received.append)

    tracker.set_agent_state(StageType.ROUTE, progress=99)

    assert tracker.get(StageType.ROUTE) is None
    assert len(received) == 1
    assert received[0] == tracker.agents


def test_record_run_updates_metrics(tracker):
    tracker.record_run(StageType.COMPLIANCE, 2.0, succeeded=True)
    tracker.record_run(StageType.COMPLIANCE, 4.0, succeeded=False)

    metrics = tracker.get(StageType.COMPLIANCE).metrics
    assert metrics.total_processed == 2
    assert metrics.success_rate == 50.0
    assert metrics.avg_processing_time == pytest.approx(3.0)


def test_reset_returns_agents_to_idle(tracker):
    tracker.set_agent_state(
        StageType.ROUTE,
        status=AgentStatus.ERROR,
        progress=50,
        current_task="Optimizing route with quantum algorithms",
    )
    tracker.record_run(StageType.ROUTE, 1.0, succeeded=False)
    tracker.reset()

    agent = tracker.get(StageType.ROUTE)
    assert agent.status == AgentStatus.IDLE
    assert agent.progress == 0
    assert agent.current_task is None
    assert agent.metrics.total_processed == 1


def test_snapshots_are_not_mutated_later(tracker):
    received = []
    tracker.channel.subscribe(received.append)
    tracker.set_agent_state(StageType.DUTY, progress=10)
    tracker.set_agent_state(StageType.DUTY, progress=90)

    first = next(a for a in received[0] if a.type == StageType.DUTY)
    assert first.progress == 10


class TestChannel:

    def test_listeners_run_in_subscription_order(self):
        channel = Channel("test")
        calls = []
        channel.subscribe(lambda p: calls.append(("a", p)))
        channel.subscribe(lambda p: calls.append(("b", p)))

        channel.publish(1)
        channel.publish(2)

        assert calls == [("a", 1), ("b", 1), ("a", 2), ("b", 2)]

    def test_unsubscribe(self):
        channel = Channel("test")
        calls = []
        unsubscribe = channel.subscribe(calls.append)

        channel.publish("first")
        unsubscribe()
        unsubscribe()
        channel.publish("second")

        assert calls == ["first"]
        assert len(channel) == 0

    def test_none_listener_is_ignored(self):
        channel = Channel("test")
        channel.subscribe(None)()
        channel.publish("payload")
        assert len(channel) == 0

    def test_listener_exception_propagates(self):
        channel = Channel("test")

        def explode(payload):
            raise RuntimeError("listener failed")

        channel.subscribe(explode)
        with pytest.raises(RuntimeError, match="listener failed"):
            channel.publish("payload")
