import pytest

from budget_manager import telemetry
from budget_manager.telemetry import MetricsStore, Telemetry, counter, last_value, summary


def test_execute_dispatches_to_attached_handlers(events):
    telemetry.execute("budget_manager.repo.query", {"total_time": 1.5}, {"statement": "SELECT"})
    assert events == [("budget_manager.repo.query", {"total_time": 1.5}, {"statement": "SELECT"})]


def test_attach_rejects_duplicate_ids():
    telemetry.attach("dup", lambda *_: None)
    with pytest.raises(ValueError):
        telemetry.attach("dup", lambda *_: None)
    assert telemetry.detach("dup") is True
    assert telemetry.detach("dup") is False


def test_failing_handler_is_detached(events):
    def broken(event, measurements, metadata):
        raise RuntimeError("broken handler")

    telemetry.attach("broken", broken)
    telemetry.execute("some.event", {"value": 1})
    telemetry.execute("some.event", {"value": 2})

    assert "broken" not in telemetry._handlers
    assert [m["value"] for _, m, _ in events] == [1, 2]


def test_metric_names_split_event_and_measurement():
    metric = summary("budget_manager.endpoint.stop.duration", tags=("route",), unit="ms")
    assert metric.event == "budget_manager.endpoint.stop"
    assert metric.measurement == "duration"
    assert metric.name == "budget_manager.endpoint.stop.duration"


def test_store_aggregates_summary_counter_and_last_value():
    store = MetricsStore(definitions=[
        summary("web.request.duration", tags=("route",)),
        counter("web.request.duration", tags=("status",)),
        last_value("vm.memory.total"),
    ])

    store.handle("web.request", {"duration": 10.0}, {"route": "/api/health", "status": 200})
    store.handle("web.request", {"duration": 30.0}, {"route": "/api/health", "status": 503})
    store.handle("vm.memory", {"total": 100}, {})
    store.handle("vm.memory", {"total": 250}, {})
    store.handle("unrelated.event", {"duration": 99.0}, {})

    snapshot = store.snapshot()
    health = snapshot["summary:web.request.duration[route=/api/health]"]
    assert health["count"] == 2
    assert health["min"] == 10.0
    assert health["max"] == 30.0
    assert health["mean"] == 20.0
    assert snapshot["counter:web.request.duration[status=200]"] == 1
    assert snapshot["counter:web.request.duration[status=503]"] == 1
    assert snapshot["last_value:vm.memory.total"] == 250

    store.reset()
    assert store.snapshot() == {}


def test_default_metrics_cover_endpoint_repo_http_and_vm():
    names = {m.name for m in telemetry.metrics()}
    assert "budget_manager.endpoint.stop.duration" in names
    assert "budget_manager.repo.query.total_time" in names
    assert "budget_manager.http.request.duration" in names
    assert {"vm.memory.total", "vm.cpu.percent", "vm.tasks.count"} <= names


@pytest.mark.asyncio
async def test_telemetry_child_collects_while_started():
    calls = []
    child = Telemetry(period=60, measurements=[lambda: calls.append("polled")])

    await child.start()
    telemetry.execute("budget_manager.repo.query", {"total_time": 4.0})
    child.poll()
    await child.stop()
    telemetry.execute("budget_manager.repo.query", {"total_time": 8.0})

    assert calls == ["polled"]
    assert child.snapshot()["summary:budget_manager.repo.query.total_time"]["count"] == 1


@pytest.mark.asyncio
async def test_failing_measurement_does_not_stop_polling():
    calls = []

    def broken():
        raise RuntimeError("no data")

    child = Telemetry(period=60, measurements=[broken, lambda: calls.append("ok")])
    child.poll()
    assert calls == ["ok"]


@pytest.mark.asyncio
async def test_measure_vm_reports_process_metrics(events):
    telemetry.measure_vm()
    emitted = {event for event, _, _ in events}
    assert {"vm.memory", "vm.cpu", "vm.tasks"} <= emitted
