"""In-process pub/sub: one topic per chat room, one bounded queue per subscriber.

Publishing never blocks: a subscriber whose queue is full misses the event.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Dict, Optional, Set

from ..core.constants import SUBSCRIBER_QUEUE_SIZE

logger = logging.getLogger(__name__)


def room_topic(room_id: int) -> str:
    return f"chat_room_{int(room_id)}"


class Subscription:
    def __init__(self, broadcaster: "Broadcaster", topic: str, maxsize: int):
        self.topic = topic
        self._broadcaster = broadcaster
        self._queue: "queue.Queue[dict]" = queue.Queue(maxsize=maxsize)
        self.dropped = 0
        self.closed = False

    def offer(self, event: dict) -> bool:
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            self.dropped += 1
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[dict]:
        """Next event, or None when nothing arrived within timeout."""
        try:
            if timeout is not None and timeout <= 0:
                return self._queue.get_nowait()
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[dict]:
        out = []
        while True:
            event = self.get(timeout=0)
            if event is None:
                return out
            out.append(event)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._broadcaster.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class Broadcaster:
    def __init__(self, *, queue_size: int = SUBSCRIBER_QUEUE_SIZE):
        self._queue_size = int(queue_size)
        self._lock = threading.Lock()
        self._topics: Dict[str, Set[Subscription]] = {}

    def subscribe(self, topic: str) -> Subscription:
        sub = Subscription(self, topic, self._queue_size)
        with self._lock:
            self._topics.setdefault(topic, set()).add(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._topics.get(sub.topic)
            if subs is None:
                return
            subs.discard(sub)
            if not subs:
                del self._topics[sub.topic]

    def publish(self, topic: str, event: dict) -> int:
        """Deliver to every current subscriber of topic; returns how many accepted it."""
        with self._lock:
            subs = list(self._topics.get(topic, ()))
        delivered = 0
        for sub in subs:
            if sub.offer(event):
                delivered += 1
            else:
                logger.warning("Subscriber queue full on %s, event %s dropped", topic, event.get("type"))
        return delivered

    def subscriber_count(self, topic: str) -> int:
        with self._lock:
            return len(self._topics.get(topic, ()))

    def topic_count(self) -> int:
        with self._lock:
            return len(self._topics)
