"""
PubSub - in-process topic bus

States subscribe to a topic and reload when a service broadcasts on it:

    async with get_pubsub().subscribe("budget:2026-10") as subscription:
        async for event, payload in subscription:
            ...
"""
import asyncio
from collections import defaultdict
from typing import Any, Dict, Optional, Set

from .supervisor import Child
from .utils.logger import get_logger

logger = get_logger(__name__)

_CLOSED = object()


class SubscriptionClosed(Exception):
    """Raised by Subscription.get() once the subscription is closed"""


class Subscription:
    def __init__(self, bus: "PubSub", topic: str):
        self.bus = bus
        self.topic = topic
        self._queue: asyncio.Queue = asyncio.Queue()
        self.closed = False

    def _deliver(self, message: Any) -> None:
        if not self.closed:
            self._queue.put_nowait(message)

    def _close(self) -> None:
        if not self.closed:
            self.closed = True
            self._queue.put_nowait(_CLOSED)

    async def get(self, timeout: Optional[float] = None) -> Any:
        """Next message; raises asyncio.TimeoutError or SubscriptionClosed"""
        if self.closed and self._queue.empty():
            raise SubscriptionClosed(self.topic)
        if timeout is None:
            message = await self._queue.get()
        else:
            message = await asyncio.wait_for(self._queue.get(), timeout)
        if message is _CLOSED:
            raise SubscriptionClosed(self.topic)
        return message

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self.bus.unsubscribe(self)

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            return await self.get()
        except SubscriptionClosed:
            raise StopAsyncIteration from None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()
        return False


class PubSub(Child):
    """Topic registry; one unbounded queue per subscription"""

    def __init__(self, name: str = "BudgetManager.PubSub"):
        self.name = name
        self._topics: Dict[str, Set[Subscription]] = defaultdict(set)

    async def start(self) -> None:
        logger.info(f"{self.name} started")

    async def stop(self) -> None:
        count = 0
        for topic in list(self._topics):
            for subscription in list(self._topics[topic]):
                subscription._close()
                count += 1
        self._topics.clear()
        logger.info(f"{self.name} stopped ({count} subscriptions closed)")

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic)
        self._topics[topic].add(subscription)
        logger.debug(f"subscribe {topic} ({len(self._topics[topic])} subscribers)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._topics.get(subscription.topic)
        if subscribers is not None:
            subscribers.discard(subscription)
            if not subscribers:
                del self._topics[subscription.topic]
        subscription._close()

    def subscribers(self, topic: str) -> int:
        return len(self._topics.get(topic, ()))

    def broadcast(self, topic: str, message: Any) -> int:
        return self._dispatch(topic, message, exclude=None)

    def broadcast_from(self, sender: Subscription, topic: str, message: Any) -> int:
        return self._dispatch(topic, message, exclude=sender)

    def _dispatch(self, topic: str, message: Any, exclude: Optional[Subscription]) -> int:
        delivered = 0
        for subscription in list(self._topics.get(topic, ())):
            if subscription is exclude:
                continue
            subscription._deliver(message)
            delivered += 1
        logger.debug(f"broadcast {topic}: {delivered} deliveries")
        return delivered


_pubsub: Optional[PubSub] = None


def get_pubsub() -> PubSub:
    global _pubsub
    if _pubsub is None:
        from .config import get_settings

        _pubsub = PubSub(get_settings().pubsub_name)
    return _pubsub
