"""
Application supervision tree

Children (start order):
    Telemetry -> Repo -> PubSub -> HttpClient -> Endpoint

The tree is started from a Reflex lifespan task (see budget_manager.py),
so it lives exactly as long as the backend process.
"""
from contextlib import asynccontextmanager
from typing import Any, Dict, Iterable, List, Optional

from .config import Settings, get_settings, reload_settings
from .db import get_repo
from .http_client import get_http_client
from .pubsub import get_pubsub
from .supervisor import Child, Strategy, Supervisor
from .telemetry import get_telemetry
from .utils.logger import get_logger

logger = get_logger(__name__)


class Endpoint(Child):
    """
    Runtime configuration of the HTTP/WebSocket endpoint

    Serving is done by the Reflex backend; this child owns the
    public URL and listen address, and receives config changes.
    """

    name = "Endpoint"

    def __init__(self, settings: Optional[Settings] = None):
        settings = settings or get_settings()
        self.config: Dict[str, Any] = {
            "url": settings.endpoint_url,
            "host": settings.endpoint_host,
            "port": settings.endpoint_port,
        }

    async def start(self) -> None:
        logger.info(f"Running BudgetManager.Endpoint at {self.config['host']}:{self.config['port']} ({self.url()})")

    def url(self) -> str:
        return str(self.config.get("url", ""))

    def config_change(self, changed: Dict[str, Any], removed: Iterable[str]) -> None:
        for key in removed:
            self.config.pop(key, None)
        self.config.update(changed)
        logger.info(f"Endpoint config changed: {sorted(changed)} removed: {sorted(removed)}")


_endpoint: Optional[Endpoint] = None
_supervisor: Optional[Supervisor] = None


def get_endpoint() -> Endpoint:
    global _endpoint
    if _endpoint is None:
        _endpoint = Endpoint()
    return _endpoint


def get_supervisor() -> Optional[Supervisor]:
    return _supervisor


def children() -> List[Child]:
    return [
        get_telemetry(),
        get_repo(),
        get_pubsub(),
        # Pooled HTTP client for the mailer
        get_http_client(),
        # Start to serve requests, typically the last entry
        get_endpoint(),
    ]


async def start() -> Supervisor:
    global _supervisor
    supervisor = Supervisor(children(), strategy=Strategy.ONE_FOR_ONE, name="BudgetManager.Supervisor")
    await supervisor.start()
    _supervisor = supervisor
    return supervisor


async def stop() -> None:
    global _supervisor
    supervisor, _supervisor = _supervisor, None
    if supervisor is not None:
        await supervisor.stop()


@asynccontextmanager
async def lifespan():
    """Reflex lifespan task: start the tree on backend startup, stop it on shutdown"""
    await start()
    try:
        yield
    finally:
        await stop()


def config_change(changed: Dict[str, Any], new: Dict[str, Any], removed: Iterable[str]) -> None:
    """Propagate configuration changes to the endpoint"""
    removed = list(removed)
    reload_settings()
    get_endpoint().config_change(changed, removed)
