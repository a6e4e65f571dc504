"""
Tests for the Supervisor

Covers start order, shutdown order, restart strategies, restart types,
restart intensity and start-failure rollback.
"""

import asyncio

import pytest

from budget_manager.supervisor import Child, Restart, Strategy, Supervisor, SupervisorError


class Worker(Child):
    """Child that runs until told to crash or exit"""

    def __init__(self, name: str, log: list, restart: Restart = Restart.PERMANENT, fail_start: bool = False):
        self.name = name
        self.log = log
        self.restart = restart
        self.fail_start = fail_start
        self._outcome = None

    async def start(self):
        if self.fail_start:
            raise RuntimeError(f"{self.name} cannot start")
        self._outcome = asyncio.get_running_loop().create_future()
        self.log.append(("start", self.name))

    async def stop(self):
        self.log.append(("stop", self.name))

    async def run(self):
        if await self._outcome == "crash":
            raise RuntimeError(f"{self.name} crashed")

    def crash(self):
        self._outcome.set_result("crash")

    def exit(self):
        self._outcome.set_result("exit")


class AlwaysCrashes(Child):
    def __init__(self, name: str):
        self.name = name

    async def run(self):
        raise RuntimeError("boom")


def restarts(supervisor: Supervisor) -> dict:
    return {name: count for name, _status, count in supervisor.which_children()}


@pytest.fixture
def log():
    return []


@pytest.fixture
def workers(log):
    return [Worker("a", log), Worker("b", log), Worker("c", log)]


@pytest.mark.asyncio
async def test_starts_in_order_and_stops_in_reverse(log, workers):
    supervisor = await Supervisor(workers).start()
    assert log == [("start", "a"), ("start", "b"), ("start", "c")]
    assert supervisor.status() == {"a": "running", "b": "running", "c": "running"}

    log.clear()
    await supervisor.stop()
    assert log == [("stop", "c"), ("stop", "b"), ("stop", "a")]
    assert set(supervisor.status().values()) == {"stopped"}


@pytest.mark.asyncio
async def test_one_for_one_restarts_only_the_crashed_child(log, workers, wait_until):
    supervisor = await Supervisor(workers, strategy=Strategy.ONE_FOR_ONE).start()
    log.clear()

    workers[1].crash()
    await wait_until(lambda: restarts(supervisor)["b"] == 1)

    assert log == [("stop", "b"), ("start", "b")]
    assert restarts(supervisor) == {"a": 0, "b": 1, "c": 0}
    assert supervisor.status()["b"] == "running"
    await supervisor.stop()


@pytest.mark.asyncio
async def test_one_for_all_restarts_every_child(log, workers, wait_until):
    supervisor = await Supervisor(workers, strategy=Strategy.ONE_FOR_ALL).start()
    log.clear()

    workers[1].crash()
    await wait_until(lambda: restarts(supervisor)["c"] == 1)

    assert log == [
        ("stop", "c"), ("stop", "b"), ("stop", "a"),
        ("start", "a"), ("start", "b"), ("start", "c"),
    ]
    assert restarts(supervisor) == {"a": 1, "b": 1, "c": 1}
    await supervisor.stop()


@pytest.mark.asyncio
async def test_rest_for_one_restarts_the_child_and_later_siblings(log, workers, wait_until):
    supervisor = await Supervisor(workers, strategy=Strategy.REST_FOR_ONE).start()
    log.clear()

    workers[1].crash()
    await wait_until(lambda: restarts(supervisor)["c"] == 1)

    assert log == [("stop", "c"), ("stop", "b"), ("start", "b"), ("start", "c")]
    assert restarts(supervisor) == {"a": 0, "b": 1, "c": 1}
    await supervisor.stop()


@pytest.mark.asyncio
async def test_transient_child_is_not_restarted_after_normal_exit(log, wait_until):
    worker = Worker("t", log, restart=Restart.TRANSIENT)
    supervisor = await Supervisor([worker]).start()

    worker.exit()
    await wait_until(lambda: supervisor.status()["t"] == "stopped")

    assert restarts(supervisor) == {"t": 0}
    assert log == [("start", "t"), ("stop", "t")]
    await supervisor.stop()


@pytest.mark.asyncio
async def test_transient_child_is_restarted_after_crash(log, wait_until):
    worker = Worker("t", log, restart=Restart.TRANSIENT)
    supervisor = await Supervisor([worker]).start()

    worker.crash()
    await wait_until(lambda: restarts(supervisor)["t"] == 1)

    assert supervisor.status()["t"] == "running"
    await supervisor.stop()


@pytest.mark.asyncio
async def test_temporary_child_is_never_restarted(log, wait_until):
    worker = Worker("tmp", log, restart=Restart.TEMPORARY)
    supervisor = await Supervisor([worker]).start()

    worker.crash()
    await wait_until(lambda: supervisor.status()["tmp"] == "stopped")

    assert restarts(supervisor) == {"tmp": 0}
    await supervisor.stop()


@pytest.mark.asyncio
async def test_gives_up_after_max_restart_intensity(log):
    steady = Worker("steady", log)
    supervisor = await Supervisor(
        [steady, AlwaysCrashes("flaky")],
        max_restarts=2,
        max_seconds=5.0,
    ).start()

    with pytest.raises(SupervisorError):
        await asyncio.wait_for(supervisor.join(), timeout=2.0)

    assert restarts(supervisor)["flaky"] == 2
    assert set(supervisor.status().values()) == {"stopped"}
    assert log[-1] == ("stop", "steady")


@pytest.mark.asyncio
async def test_start_failure_stops_started_children(log):
    children = [Worker("a", log), Worker("b", log, fail_start=True), Worker("c", log)]

    with pytest.raises(RuntimeError, match="b cannot start"):
        await Supervisor(children).start()

    assert log == [("start", "a"), ("stop", "a")]


def test_duplicate_child_names_are_rejected(log):
    with pytest.raises(ValueError):
        Supervisor([Worker("a", log), Worker("a", log)])


@pytest.mark.asyncio
async def test_restart_child_by_name(log, workers):
    supervisor = await Supervisor(workers).start()
    log.clear()

    await supervisor.restart_child("c")

    assert log == [("stop", "c"), ("start", "c")]
    assert restarts(supervisor)["c"] == 1
    assert supervisor.get_child("c") is workers[2]
    with pytest.raises(KeyError):
        supervisor.get_child("missing")
    await supervisor.stop()


class FailsToRestart(Worker):
    """Worker whose start() raises on the first ``failures`` restarts"""

    def __init__(self, name: str, log: list, failures: int):
        super().__init__(name, log)
        self.starts = 0
        self.failures = failures

    async def start(self):
        self.starts += 1
        if 1 < self.starts <= 1 + self.failures:
            raise RuntimeError(f"{self.name} cannot restart")
        await super().start()


@pytest.mark.asyncio
async def test_failed_restart_is_retried_and_siblings_stay_supervised(log, wait_until):
    flaky = FailsToRestart("flaky", log, failures=1)
    steady = Worker("steady", log)
    supervisor = await Supervisor([flaky, steady]).start()

    flaky.crash()
    await wait_until(lambda: restarts(supervisor)["flaky"] == 1)
    assert flaky.starts == 3
    assert supervisor.status()["flaky"] == "running"

    steady.crash()
    await wait_until(lambda: restarts(supervisor)["steady"] == 1)

    assert supervisor.status() == {"flaky": "running", "steady": "running"}
    assert supervisor.error is None
    await supervisor.stop()


@pytest.mark.asyncio
async def test_restart_that_keeps_failing_exhausts_intensity(log):
    flaky = FailsToRestart("flaky", log, failures=100)
    steady = Worker("steady", log)
    supervisor = await Supervisor([flaky, steady], max_restarts=3, max_seconds=5.0).start()

    flaky.crash()

    with pytest.raises(SupervisorError):
        await asyncio.wait_for(supervisor.join(), timeout=2.0)

    assert flaky.starts == 4
    assert set(supervisor.status().values()) == {"stopped"}
    assert log[-1] == ("stop", "steady")
