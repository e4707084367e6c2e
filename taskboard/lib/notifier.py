"""
Change notification for taskboard.

ChangeNotifier fans a content-less "refresh" event out to any number of
subscribers. DocumentWatcher polls the tasks file and publishes when it
changes, whoever changed it. Neither ever sends document content; consumers
re-read through the store.
"""

import logging
import queue
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

REFRESH_EVENT = "refresh"
# One pending refresh is as good as many
DEFAULT_MAX_PENDING = 1


class Subscription:
    """A subscriber's bounded inbox."""

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING):
        self._queue: queue.Queue[str] = queue.Queue(maxsize=max_pending)

    def offer(self, event: str) -> bool:
        """Enqueue without blocking. Returns False if the inbox is full."""
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            return False

    def get(self, timeout: float | None = None) -> str | None:
        """Wait for the next event; None on timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[str]:
        """Return all pending events without waiting."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events


class ChangeNotifier:
    """Process-wide subscriber set.

    Starts empty; subscriptions live until unsubscribed or process exit.
    The set is guarded by a lock so transports may run on other threads.
    """

    def __init__(self, max_pending: int = DEFAULT_MAX_PENDING):
        self._max_pending = max_pending
        self._subscribers: set[Subscription] = set()
        self._lock = threading.Lock()

    def subscribe(self) -> Subscription:
        subscription = Subscription(self._max_pending)
        with self._lock:
            self._subscribers.add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            self._subscribers.discard(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event: str = REFRESH_EVENT) -> int:
        """Offer event to every subscriber. Never blocks.

        Subscribers whose inbox is full already have a refresh pending, so
        the event is dropped for them. Returns the number that accepted it.
        """
        with self._lock:
            subscribers = list(self._subscribers)

        delivered = 0
        for subscription in subscribers:
            if subscription.offer(event):
                delivered += 1
        logger.debug(f"Published {event} to {delivered}/{len(subscribers)} subscriber(s)")
        return delivered


class DocumentWatcher:
    """Polls a file's mtime/size and publishes refresh on change.

    Notify-only: the file content is never read here.
    """

    def __init__(self, path: Path, notifier: ChangeNotifier, interval: float = 1.0):
        self.path = Path(path)
        self.notifier = notifier
        self.interval = interval
        self._last = self._signature()
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def _signature(self) -> tuple[int, int] | None:
        try:
            st = self.path.stat()
        except OSError:
            return None
        return (st.st_mtime_ns, st.st_size)

    def check(self) -> bool:
        """Compare against the last seen state; publish if it changed."""
        current = self._signature()
        if current == self._last:
            return False
        self._last = current
        logger.info(f"{self.path.name} changed, notifying clients")
        self.notifier.publish()
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.check()

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="document-watcher", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.interval + 1)
            self._thread = None
