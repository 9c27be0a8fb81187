"""
In-process change broker for real-time subscriptions

Services publish a (user_id, collection) change after their transaction commits.
Each open event stream holds a subscription with its own asyncio queue; the
stream reloads its snapshot whenever a change arrives.

Services run in the threadpool, so events are handed to the subscriber's event
loop with call_soon_threadsafe.
"""

import asyncio
import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

TASKS = "tasks"
CLIENTS = "clients"
COLLECTIONS = (TASKS, CLIENTS)

# Pending change notifications per subscriber; one pending change is enough to
# trigger a fresh snapshot so a full queue drops further notifications
QUEUE_SIZE = 16


@dataclass(eq=False)
class Subscription:
    user_id: int
    collection: str
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=QUEUE_SIZE))


def _offer(queue: asyncio.Queue, event: dict) -> None:
    try:
        queue.put_nowait(event)
    except asyncio.QueueFull:
        pass


class ChangeBroker:
    def __init__(self):
        self._subscribers: dict[tuple[int, str], set[Subscription]] = defaultdict(set)
        self._lock = threading.Lock()

    def subscribe(self, user_id: int, collection: str) -> Subscription:
        """Register a subscriber; must be called from the subscriber's event loop"""
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection: {collection}")

        subscription = Subscription(user_id, collection, asyncio.get_running_loop())
        with self._lock:
            self._subscribers[(user_id, collection)].add(subscription)
        logger.debug(f"📡 Subscribed user {user_id} to {collection}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        key = (subscription.user_id, subscription.collection)
        with self._lock:
            subscribers = self._subscribers.get(key)
            if subscribers is None:
                return
            subscribers.discard(subscription)
            if not subscribers:
                del self._subscribers[key]
        logger.debug(f"📴 Unsubscribed user {subscription.user_id} from {subscription.collection}")

    def subscriber_count(self, user_id: int, collection: str) -> int:
        with self._lock:
            return len(self._subscribers.get((user_id, collection), ()))

    def publish(self, user_id: int, *collections: str) -> None:
        """Notify every subscriber of the given collections of this user"""
        for collection in collections:
            with self._lock:
                subscribers = list(self._subscribers.get((user_id, collection), ()))

            event = {"collection": collection, "user_id": user_id}
            for subscription in subscribers:
                try:
                    subscription.loop.call_soon_threadsafe(_offer, subscription.queue, event)
                except RuntimeError:
                    # Event loop already closed
                    self.unsubscribe(subscription)

            if subscribers:
                logger.debug(
                    f"📣 Published {collection} change for user {user_id} to {len(subscribers)} subscriber(s)"
                )


broker = ChangeBroker()


def publish_change(user_id: int, *collections: str) -> None:
    broker.publish(user_id, *collections)
