"""
TriggerRouter - named game events drained through a FIFO queue
"""
from collections import deque
from contextlib import contextmanager
from typing import Any, Callable, Deque, Dict, List, Tuple
import logging

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

# Upper bound on events handled in one drain; reaching it means a trigger loop
MAX_EVENTS_PER_DRAIN = 10000

# Recent event names kept for inspection
PROCESSED_HISTORY = 200


class TriggerLoopError(RuntimeError):
    """Raised when cascading triggers never settle"""
    pass


class TriggerRouter:
    """Publish/subscribe bus for game events.

    ``publish`` only enqueues. The first publish on an idle router drains the
    queue, so events raised by handlers are processed after the current one
    finishes, in order, until nothing is left. Control returns to the public
    operation only once every cascading trigger has resolved.
    """

    def __init__(self, max_processed: int = PROCESSED_HISTORY):
        self._handlers: Dict[str, List[Handler]] = {}
        self._queue: Deque[Tuple[str, Dict[str, Any]]] = deque()
        self._draining = False
        self.processed: Deque[str] = deque(maxlen=max_processed)

    def subscribe(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def handlers_for(self, event: str) -> List[Handler]:
        return list(self._handlers.get(event, []))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def publish(self, event: str, payload: Dict[str, Any] = None) -> None:
        self._queue.append((event, dict(payload or {})))
        if not self._draining:
            self.drain()

    @contextmanager
    def batch(self):
        """Hold every event published inside the block, then drain them all.

        Public operations wrap their own mutations in a batch so triggers only
        start once the operation's direct effects are complete.
        """
        if self._draining:
            yield self
            return
        self._draining = True
        try:
            yield self
        except BaseException:
            self._queue.clear()
            self._draining = False
            raise
        self._draining = False
        self.drain()

    def drain(self) -> None:
        """Handle queued events until none are left.

        A handler that raises aborts the drain and discards the rest of the
        queue, so a later publish never runs leftovers of a failed cascade.
        """
        self._draining = True
        handled = 0
        try:
            while self._queue:
                event, payload = self._queue.popleft()
                handled += 1
                if handled > MAX_EVENTS_PER_DRAIN:
                    raise TriggerLoopError(f"Trigger cascade exceeded {MAX_EVENTS_PER_DRAIN} events (last: {event})")
                self.processed.append(event)
                logger.debug(f"dispatch {event} {payload.get('player_id', '')}")
                for handler in self.handlers_for(event):
                    handler(payload)
        except BaseException:
            self._queue.clear()
            raise
        finally:
            self._draining = False
