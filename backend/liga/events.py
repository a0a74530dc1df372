import json
import queue
import threading
from datetime import datetime, timezone


class EventBus:
    """In-memory pub/sub for SSE.

    Each subscriber gets a bounded Queue, optionally bound to a user id.
    Delivery is best effort: a subscriber whose queue is full is dropped.
    """

    def __init__(self, maxsize=50):
        self._subscribers = []
        self._lock = threading.Lock()
        self._maxsize = maxsize

    def subscribe(self, user_id=None):
        """Create a new subscriber queue, optionally scoped to one user."""
        q = queue.Queue(maxsize=self._maxsize)
        with self._lock:
            self._subscribers.append((q, user_id))
        return q

    def unsubscribe(self, q):
        with self._lock:
            self._subscribers = [(s, uid) for s, uid in self._subscribers if s is not q]

    def publish(self, event_type, data, user_id=None):
        """Push an event to subscribers.

        With ``user_id`` set only that user's subscribers receive it,
        otherwise it is broadcast to everyone.
        """
        event = {
            "type": event_type,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        msg = json.dumps(event, default=str)
        delivered = 0
        with self._lock:
            dead = []
            for q, uid in self._subscribers:
                if user_id is not None and uid != user_id:
                    continue
                try:
                    q.put_nowait(msg)
                    delivered += 1
                except queue.Full:
                    dead.append(q)
            if dead:
                self._subscribers = [
                    (s, uid) for s, uid in self._subscribers if s not in dead
                ]
        return delivered

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._subscribers)

    def clear(self):
        """Remove all subscribers. Used in tests."""
        with self._lock:
            self._subscribers.clear()


event_bus = EventBus()
