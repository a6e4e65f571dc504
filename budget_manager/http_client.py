"""
Outbound HTTP client
- requests.Session with a pooled HTTPAdapter and retries on gateway errors
- blocking calls run in a worker thread so event handlers stay responsive
"""
import asyncio
import time
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from . import telemetry
from .config import Settings, get_settings
from .supervisor import Child
from .utils.logger import get_logger

logger = get_logger(__name__)


class HttpClientNotStartedError(RuntimeError):
    pass


class HttpClient(Child):
    """Pooled HTTP client (used by the mailer)"""

    name = "HttpClient"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.session: Optional[requests.Session] = None

    async def start(self) -> None:
        retry = Retry(
            total=self.settings.http_retries,
            backoff_factor=0.3,
            status_forcelist=(502, 503, 504),
            allowed_methods=frozenset(["GET", "HEAD", "PUT", "DELETE", "OPTIONS"]),
        )
        adapter = HTTPAdapter(
            pool_connections=self.settings.http_pool_size,
            pool_maxsize=self.settings.http_pool_size,
            max_retries=retry,
        )
        session = requests.Session()
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers["User-Agent"] = "budget-manager/0.1"
        self.session = session
        logger.info(f"HTTP client started (pool={self.settings.http_pool_size})")

    async def stop(self) -> None:
        session, self.session = self.session, None
        if session is not None:
            session.close()

    async def request(self, method: str, url: str, **kwargs) -> requests.Response:
        if self.session is None:
            raise HttpClientNotStartedError("HTTP client is not started")

        kwargs.setdefault("timeout", self.settings.http_timeout)
        started = time.perf_counter()
        status = "error"
        try:
            response = await asyncio.to_thread(self.session.request, method.upper(), url, **kwargs)
            status = response.status_code
            return response
        finally:
            telemetry.execute(
                "budget_manager.http.request",
                {"duration": (time.perf_counter() - started) * 1000},
                {"method": method.upper(), "status": status},
            )

    async def get(self, url: str, **kwargs) -> requests.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> requests.Response:
        return await self.request("POST", url, **kwargs)


_http_client: Optional[HttpClient] = None


def get_http_client() -> HttpClient:
    global _http_client
    if _http_client is None:
        _http_client = HttpClient()
    return _http_client
