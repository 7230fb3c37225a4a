"""
EventDispatcher - fans UI-facing events out to observers with sequencing
"""
from typing import List, Dict, Any, Callable, Optional
import logging
import uuid

logger = logging.getLogger(__name__)

EventCallback = Callable[[str, Dict[str, Any]], None]


class EventDispatcher:
    """Handles event emission with sequence numbers and event ids.

    Observers never influence rules resolution; they only see what happened.
    """

    def __init__(self, initial_seq: int = 0):
        self._event_seq = initial_seq
        self._subscribers: List[EventCallback] = []

    @property
    def seq(self) -> int:
        return self._event_seq

    def subscribe(self, callback: EventCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: EventCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def emit(self, event_type: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Emit one event to every subscriber and return the sequenced payload."""
        seq_value = self._event_seq + 1

        # copy dicts to avoid mutating caller-owned objects
        payload = dict(data or {})
        payload['seq'] = seq_value
        payload['event_id'] = str(uuid.uuid4())
        if 'type' not in payload:
            payload['type'] = event_type

        for callback in list(self._subscribers):
            callback(event_type, payload)

        # Only advance the sequence once every subscriber received the event
        self._event_seq = seq_value
        logger.debug("event #%s %s", seq_value, event_type)
        return payload
