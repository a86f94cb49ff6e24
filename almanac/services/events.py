"""In-process event channel.

Engines never reach for a global broadcast; the caller creates a channel and
hands it to whoever publishes or subscribes.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

PEST_DETECTED = "pest-detected"

Handler = Callable[[str, Optional[dict]], Any]


class EventChannel:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._lock = threading.Lock()

    def on_signal(self, event_name: str, handler: Handler) -> Callable[[], None]:
        """Subscribe ``handler``; returns a callable that unsubscribes it."""

        with self._lock:
            self._handlers[event_name].append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                if handler in self._handlers.get(event_name, []):
                    self._handlers[event_name].remove(handler)

        return _unsubscribe

    def signal(self, event_name: str, payload: Optional[dict] = None) -> int:
        """Deliver ``payload`` to every handler of ``event_name``.

        A handler that raises is logged and skipped; the rest still run.
        Returns the number of handlers invoked.
        """

        with self._lock:
            handlers = list(self._handlers.get(event_name, []))
        logger.info("event_signalled", extra={"event_name": event_name, "handlers": len(handlers)})
        for handler in handlers:
            try:
                handler(event_name, payload)
            except Exception:
                logger.exception("event_handler_failed", extra={"event_name": event_name})
        return len(handlers)


# Channel shared by the HTTP routes.
CHANNEL = EventChannel()
