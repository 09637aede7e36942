import logging
from collections import defaultdict
from threading import Lock

logger = logging.getLogger(__name__)

ORDER_PLACED = "order.placed"
STAFF_CALL_CREATED = "staff_call.created"
PAYMENT_REQUEST_CREATED = "payment_request.created"
NOTIFICATION_ADDED = "notification.added"


class EventBus:
    """
    Synchronous publish/subscribe hub shared by the ordering flow and the
    notification poller. Handlers run in the publisher's thread, in
    subscription order.
    """

    def __init__(self):
        self._handlers = defaultdict(list)
        self._lock = Lock()

    def subscribe(self, event, handler):
        with self._lock:
            self._handlers[event].append(handler)

        def unsubscribe():
            with self._lock:
                if handler in self._handlers[event]:
                    self._handlers[event].remove(handler)

        return unsubscribe

    def publish(self, event, **payload):
        with self._lock:
            handlers = list(self._handlers[event])

        for handler in handlers:
            try:
                handler(**payload)
            except Exception:
                # one broken subscriber must not stop the others
                logger.exception("Handler %r failed for event %s", handler, event)

        return len(handlers)
