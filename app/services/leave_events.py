import logging
from typing import Callable, List

from app.schemas.events import LeaveEvent

logger = logging.getLogger(__name__)

LeaveEventHandler = Callable[[LeaveEvent], None]


class LeaveEventDispatcher:
    """
    Typed event sink for leave lifecycle events.

    Created once at application startup and handed to every workflow engine.
    Handlers run synchronously after the engine has committed, so a failing
    handler cannot undo the state transition; its error is logged instead.
    """

    def __init__(self):
        self._handlers: List[LeaveEventHandler] = []

    def subscribe(self, handler: LeaveEventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: LeaveEventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: LeaveEvent) -> None:
        logger.info(
            f"Leave event {event.kind.value} for request {event.request.id}",
            extra={
                "event": event.kind.value,
                "leave_request_id": event.request.id,
                "employee_id": event.employee.id,
                "is_fully_approved": event.is_fully_approved,
            }
        )
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                # Don't fail the committed transition if a subscriber fails
                logger.warning(f"Leave event handler {handler!r} failed: {e}", exc_info=True)
