"""Screen base class and the user action boundary.

Every user-triggered handler runs through ``user_action``:
- a second trigger while the first is still pending is ignored
- errors are logged and turned into one alert; nothing propagates
"""

import functools
from typing import Any, Awaitable, Callable, Protocol

from todoapp.exceptions import TodoAppError, ValidationError
from todoapp.logging_config import get_logger

logger = get_logger(__name__)


class Notifier(Protocol):
    """Sink for user-facing alerts."""

    def alert(self, title: str, message: str) -> None:
        ...


class Screen:
    """Base class for screen controllers."""

    def __init__(self, notifier: Notifier):
        self.notifier = notifier
        self.last_error: TodoAppError | None = None
        self._in_flight: set[str] = set()

    def is_in_flight(self, action: str) -> bool:
        return action in self._in_flight


def user_action(
    name: str,
    failure_title: str = "Oops!",
    failure_message: str = "Something went wrong. Please try again later.",
) -> Callable:
    """Decorator for screen handlers triggered by the user.

    Args:
        name: Action name used for the in-flight flag and log events
        failure_title: Alert title shown on failure
        failure_message: Alert text shown on failure

    Usage:
        @user_action("add_todo", failure_message="We couldn't add your todo.")
        async def handle_add_todo(self):
            ...
    """
    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapper(self: Screen, *args, **kwargs):
            if name in self._in_flight:
                logger.info("action_ignored_in_flight", action=name)
                return None

            self._in_flight.add(name)
            self.last_error = None
            try:
                return await func(self, *args, **kwargs)
            except ValidationError as e:
                self.last_error = e
                logger.info(f"{name}_rejected", reason=e.message)
                self.notifier.alert("Error", e.message)
                return None
            except TodoAppError as e:
                self.last_error = e
                logger.warning(
                    f"{name}_failed",
                    error=e.message,
                    error_type=type(e).__name__,
                    error_code=e.error_code,
                )
                self.notifier.alert(failure_title, failure_message)
                return None
            finally:
                self._in_flight.discard(name)

        return wrapper
    return decorator
