"""
Mailer
- local adapter: keeps messages in an in-memory mailbox (development)
- api adapter: POSTs JSON to a transactional mail API through HttpClient
"""
from dataclasses import asdict, dataclass
from typing import List, Optional

from .config import Settings, get_settings
from .http_client import HttpClient, get_http_client
from .utils.logger import get_logger

logger = get_logger(__name__)


class DeliveryError(RuntimeError):
    pass


@dataclass(frozen=True)
class Email:
    to: str
    subject: str
    text_body: str
    html_body: Optional[str] = None
    sender: Optional[str] = None


class LocalAdapter:
    def __init__(self):
        self.messages: List[Email] = []

    async def deliver(self, email: Email) -> dict:
        self.messages.append(email)
        return {"id": str(len(self.messages))}


class ApiAdapter:
    def __init__(self, url: str, api_key: str, client: HttpClient):
        self.url = url
        self.api_key = api_key
        self.client = client

    async def deliver(self, email: Email) -> dict:
        payload = {k: v for k, v in asdict(email).items() if v is not None}
        response = await self.client.post(
            self.url,
            json=payload,
            headers={"Authorization": f"Bearer {self.api_key}", "Accept": "application/json"},
        )
        if response.status_code not in (200, 201, 202):
            raise DeliveryError(f"Mail API returned {response.status_code}: {response.text[:200]}")
        try:
            return response.json()
        except ValueError:
            return {}


class Mailer:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[HttpClient] = None):
        self.settings = settings or get_settings()
        if self.settings.mailer_adapter == "api":
            if not self.settings.mailer_api_url:
                raise DeliveryError("MAILER_API_URL is required for the api adapter")
            self.adapter = ApiAdapter(
                self.settings.mailer_api_url,
                self.settings.mailer_api_key,
                client or get_http_client(),
            )
        else:
            self.adapter = LocalAdapter()

    async def deliver(self, email: Email) -> dict:
        if email.sender is None:
            email = Email(email.to, email.subject, email.text_body, email.html_body, self.settings.mailer_from)
        result = await self.adapter.deliver(email)
        logger.info(f"Delivered email to {email.to}: {email.subject}")
        return result

    def mailbox(self) -> List[Email]:
        """Messages held by the local adapter"""
        if isinstance(self.adapter, LocalAdapter):
            return list(self.adapter.messages)
        return []

    def clear(self) -> None:
        if isinstance(self.adapter, LocalAdapter):
            self.adapter.messages.clear()


_mailer: Optional[Mailer] = None


def get_mailer() -> Mailer:
    global _mailer
    if _mailer is None:
        _mailer = Mailer()
    return _mailer
