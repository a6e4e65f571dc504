"""
Base State Layer
- Shared UI state (sidebar, selected month)
- Live reload: page states subscribe to the month's pubsub topic and reload on any broadcast
"""
import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Optional

import reflex as rx
from reflex.utils import console, prerequisites

from ..config import get_settings
from ..pubsub import PubSub, SubscriptionClosed, get_pubsub
from ..services.budget_service import budget_topic
from ..utils.periods import current_month, month_key, month_label, parse_month, shift_month

LIVE_CHECK_SECONDS = 1.0
# A reconnecting tab keeps its token; give it this long before its loop ends
DISCONNECT_GRACE_SECONDS = 30.0


def this_month_key() -> str:
    return month_key(current_month(get_settings().timezone))


def client_connected(client_token: str) -> bool:
    """Whether a websocket for ``client_token`` is open on this backend"""
    namespace = prerequisites.get_app().app.event_namespace
    if namespace is None:
        return True
    return client_token in namespace.token_to_sid


class ConnectionWatch:
    """Tracks a browser tab; gone() turns True once it stays disconnected past the grace period"""

    def __init__(
        self,
        client_token: str,
        grace_seconds: float = DISCONNECT_GRACE_SECONDS,
        is_connected: Callable[[str], bool] = client_connected,
    ):
        self.client_token = client_token
        self.grace_seconds = grace_seconds
        self.is_connected = is_connected
        self._lost_at: Optional[float] = None

    def gone(self) -> bool:
        if self.is_connected(self.client_token):
            self._lost_at = None
            return False
        now = time.monotonic()
        if self._lost_at is None:
            self._lost_at = now
        return now - self._lost_at >= self.grace_seconds


async def follow_topic(
    pubsub: PubSub,
    poll: Callable[[], Awaitable[Optional[str]]],
    on_message: Callable[[], Awaitable[None]],
    check_seconds: float = LIVE_CHECK_SECONDS,
) -> None:
    """
    Await ``on_message()`` for every broadcast on the topic ``poll()`` returns

    ``poll()`` runs at least every ``check_seconds``; returning None ends the loop.
    When the topic changes the old subscription is closed and ``on_message()``
    runs once before subscribing to the new one. A subscription closed by the
    bus (PubSub restart) is re-opened on the next check.
    """
    topic = None
    subscription = None
    try:
        while True:
            wanted = await poll()
            if wanted is None:
                break

            if wanted != topic:
                if subscription is not None:
                    subscription.close()
                    await on_message()
                topic = wanted
                subscription = pubsub.subscribe(topic)

            try:
                message = await subscription.get(timeout=check_seconds)
            except asyncio.TimeoutError:
                continue
            except SubscriptionClosed:
                subscription = None
                topic = None
                await asyncio.sleep(check_seconds)
                continue

            console.debug(f"{topic}: {message!r}")
            await on_message()
    finally:
        if subscription is not None:
            subscription.close()



class BaseState(rx.State):
    """Base state with common utilities"""

    # Loading state
    loading: bool = False
    error_message: str = ""

    # Sidebar state - shared across all pages
    sidebar_collapsed: bool = False

    # Selected month ("YYYY-MM") - shared across all pages
    month: str = ""

    @rx.event
    def toggle_sidebar(self):
        """Toggle sidebar collapse state"""
        self.sidebar_collapsed = not self.sidebar_collapsed

    @rx.var
    def month_title(self) -> str:
        if not self.month:
            return ""
        return month_label(parse_month(self.month))

    def _selected_month(self):
        return parse_month(self.month or this_month_key())

    @rx.event
    def previous_month(self):
        self.month = month_key(shift_month(self._selected_month(), -1))

    @rx.event
    def next_month(self):
        self.month = month_key(shift_month(self._selected_month(), 1))

    @rx.event
    def this_month(self):
        self.month = this_month_key()

    # =========================================================================
    # LIVE RELOAD (called from page-state background events)
    # =========================================================================

    async def _fetch(self, month: str) -> Dict[str, Any]:
        """Load page data for a month - must be implemented by subclass (no state writes)"""
        raise NotImplementedError(f"{self.__class__.__name__} must implement _fetch()")

    def _apply(self, data: Dict[str, Any]) -> None:
        """Write fetched data into state - must be implemented by subclass"""
        raise NotImplementedError(f"{self.__class__.__name__} must implement _apply()")

    async def _reload(self):
        """Fetch outside the state lock, then apply under it (background events only)"""
        async with self:
            if not self.month:
                self.month = this_month_key()
            month = self.month
            self.loading = True

        try:
            data = await self._fetch(month)
        except Exception as e:
            console.error(f"{self.__class__.__name__} reload failed: {e}")
            async with self:
                self.loading = False
                self.error_message = str(e)
            return

        async with self:
            self._apply(data)
            self.loading = False
            self.error_message = ""

    async def _listen(self):
        """
        Reload whenever the selected month's topic receives a broadcast

        Runs until stop_listening() or a newer listen() bumps ``_listen_token``,
        or until the browser tab has been disconnected for DISCONNECT_GRACE_SECONDS
        (closed tabs never send stop_listening).
        """
        async with self:
            self._listen_token += 1
            token = self._listen_token
            client_token = self.router.session.client_token

        name = self.__class__.__name__
        watch = ConnectionWatch(client_token)

        async def poll() -> Optional[str]:
            async with self:
                listening = self._listen_token == token
                month = self.month or this_month_key()
            if not listening:
                return None
            if watch.gone():
                console.info(f"{name} client {client_token[:8]} disconnected")
                return None
            return budget_topic(parse_month(month))

        console.info(f"{name} live updates started")
        try:
            await follow_topic(get_pubsub(), poll, self._reload)
        finally:
            console.info(f"{name} live updates stopped")

    def __repr__(self):
        return f"<{self.__class__.__name__}(loading={self.loading}, error={bool(self.error_message)})>"
