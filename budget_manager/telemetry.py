"""
Telemetry
- execute()/attach()/detach(): event dispatch used across the app
- metric definitions (summary, counter, last_value) and an in-memory aggregator
- Telemetry child: polls process measurements periodically
"""
import asyncio
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import psutil

from .supervisor import Child
from .utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[str, Dict[str, float], Dict[str, Any]], None]

_handlers: Dict[str, Handler] = {}


def attach(handler_id: str, handler: Handler) -> None:
    if handler_id in _handlers:
        raise ValueError(f"Telemetry handler already attached: {handler_id}")
    _handlers[handler_id] = handler


def detach(handler_id: str) -> bool:
    return _handlers.pop(handler_id, None) is not None


def execute(event: str, measurements: Dict[str, float], metadata: Optional[Dict[str, Any]] = None) -> None:
    """Dispatch an event to every attached handler; handler errors are logged and the handler detached"""
    metadata = metadata or {}
    for handler_id, handler in list(_handlers.items()):
        try:
            handler(event, measurements, metadata)
        except Exception as e:
            logger.error(f"Telemetry handler {handler_id} failed on {event}, detaching: {e}")
            _handlers.pop(handler_id, None)


# ============================================================================
# Metric definitions
# ============================================================================


@dataclass(frozen=True)
class Metric:
    kind: str  # summary | counter | last_value
    event: str
    measurement: str
    tags: Tuple[str, ...] = ()
    unit: str = ""

    @property
    def name(self) -> str:
        return f"{self.event}.{self.measurement}"


def summary(name: str, tags: Tuple[str, ...] = (), unit: str = "") -> Metric:
    event, measurement = name.rsplit(".", 1)
    return Metric("summary", event, measurement, tags, unit)


def counter(name: str, tags: Tuple[str, ...] = ()) -> Metric:
    event, measurement = name.rsplit(".", 1)
    return Metric("counter", event, measurement, tags)


def last_value(name: str, unit: str = "") -> Metric:
    event, measurement = name.rsplit(".", 1)
    return Metric("last_value", event, measurement, (), unit)


def metrics() -> List[Metric]:
    return [
        # Endpoint
        summary("budget_manager.endpoint.stop.duration", tags=("route",), unit="ms"),
        counter("budget_manager.endpoint.stop.duration", tags=("status",)),
        # Database
        summary("budget_manager.repo.query.total_time", unit="ms"),
        last_value("budget_manager.repo.pool.checked_out"),
        # Outbound HTTP
        summary("budget_manager.http.request.duration", tags=("status",), unit="ms"),
        # Process
        last_value("vm.memory.total", unit="byte"),
        last_value("vm.cpu.percent", unit="%"),
        last_value("vm.tasks.count"),
    ]


@dataclass
class _Summary:
    count: int = 0
    sum: float = 0.0
    min: Optional[float] = None
    max: Optional[float] = None

    def add(self, value: float) -> None:
        self.count += 1
        self.sum += value
        self.min = value if self.min is None else min(self.min, value)
        self.max = value if self.max is None else max(self.max, value)

    def as_dict(self) -> Dict[str, Any]:
        mean = self.sum / self.count if self.count else 0.0
        return {"count": self.count, "sum": round(self.sum, 3), "min": self.min, "max": self.max, "mean": round(mean, 3)}


@dataclass
class MetricsStore:
    """Aggregates events for a list of metric definitions"""

    definitions: List[Metric] = field(default_factory=metrics)
    values: Dict[str, Any] = field(default_factory=dict)

    def handle(self, event: str, measurements: Dict[str, float], metadata: Dict[str, Any]) -> None:
        for metric in self.definitions:
            if metric.event != event or metric.measurement not in measurements:
                continue
            value = measurements[metric.measurement]
            key = self._key(metric, metadata)

            if metric.kind == "summary":
                self.values.setdefault(key, _Summary()).add(float(value))
            elif metric.kind == "counter":
                self.values[key] = self.values.get(key, 0) + 1
            else:
                self.values[key] = value

    @staticmethod
    def _key(metric: Metric, metadata: Dict[str, Any]) -> str:
        key = f"{metric.kind}:{metric.name}"
        if metric.tags:
            tag_values = ",".join(f"{t}={metadata.get(t, '')}" for t in metric.tags)
            key = f"{key}[{tag_values}]"
        return key

    def snapshot(self) -> Dict[str, Any]:
        return {
            key: value.as_dict() if isinstance(value, _Summary) else value
            for key, value in sorted(self.values.items())
        }

    def reset(self) -> None:
        self.values.clear()


# ============================================================================
# Periodic measurements
# ============================================================================


def measure_vm() -> None:
    process = psutil.Process(os.getpid())
    execute("vm.memory", {"total": process.memory_info().rss})
    execute("vm.cpu", {"percent": process.cpu_percent(interval=None)})
    try:
        execute("vm.tasks", {"count": len(asyncio.all_tasks())})
    except RuntimeError:
        pass  # no running loop


def measure_pool() -> None:
    from .db import get_repo

    repo = get_repo()
    if repo.started:
        execute("budget_manager.repo.pool", {"checked_out": repo.pool_status()["checked_out"]})


PERIODIC_MEASUREMENTS: List[Callable[[], None]] = [measure_vm, measure_pool]


class Telemetry(Child):
    """Aggregates metrics while running and polls periodic measurements"""

    name = "Telemetry"
    handler_id = "budget_manager.telemetry.metrics"

    def __init__(self, period: float = 10.0, measurements: Optional[List[Callable[[], None]]] = None):
        self.period = period
        self.measurements = PERIODIC_MEASUREMENTS if measurements is None else measurements
        self.store = MetricsStore()

    async def start(self) -> None:
        detach(self.handler_id)
        attach(self.handler_id, self.store.handle)
        logger.info(f"Telemetry started (poll every {self.period}s, {len(self.store.definitions)} metrics)")

    async def stop(self) -> None:
        detach(self.handler_id)

    async def run(self) -> None:
        while True:
            self.poll()
            await asyncio.sleep(self.period)

    def poll(self) -> None:
        for measure in self.measurements:
            try:
                measure()
            except Exception as e:
                logger.warning(f"Measurement {measure.__name__} failed: {e}")

    def snapshot(self) -> Dict[str, Any]:
        return self.store.snapshot()


_telemetry: Optional[Telemetry] = None


def get_telemetry() -> Telemetry:
    global _telemetry
    if _telemetry is None:
        from .config import get_settings

        _telemetry = Telemetry(period=get_settings().telemetry_period)
    return _telemetry
