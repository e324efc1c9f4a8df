"""
Change notifications emitted by the pagination engine.

Listeners are plain objects implementing ``EngineListener``. They are called
synchronously, in registration order, on the event loop that owns the engine.
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from ._logging import logger
from .models import Record


@runtime_checkable
class EngineListener(Protocol):
    """Receiver of engine signals (typically a presenter)."""

    def data_changed(self, items: Sequence[Record]) -> None: ...

    def empty_state_changed(self, is_empty: bool) -> None: ...

    def error(self, message: str) -> None: ...

    def retry_scheduled(self) -> None: ...

    def fetch_ended(self) -> None: ...


class BaseListener:
    """
    No-op implementation of every signal.
    Subclass it and override only the signals you care about.
    """

    def data_changed(self, items: Sequence[Record]) -> None:
        pass

    def empty_state_changed(self, is_empty: bool) -> None:
        pass

    def error(self, message: str) -> None:
        pass

    def retry_scheduled(self) -> None:
        pass

    def fetch_ended(self) -> None:
        pass


class Subscription:
    """
    Handle returned by SignalHub.subscribe().

    Calling unsubscribe() (or leaving the ``with`` block) detaches the
    listener. Unsubscribing twice is harmless.
    """

    def __init__(self, hub: "SignalHub", listener: EngineListener) -> None:
        self._hub = hub
        self.listener = listener
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._hub._remove(self.listener)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.unsubscribe()


class SignalHub:
    """
    Fans engine signals out to subscribed listeners.

    A listener that raises is logged and skipped, so one broken consumer
    cannot stop delivery to the others or corrupt the engine's state.
    """

    def __init__(self) -> None:
        self._listeners: list[EngineListener] = []

    def subscribe(self, listener: EngineListener) -> Subscription:
        if listener not in self._listeners:
            self._listeners.append(listener)
        return Subscription(self, listener)

    def _remove(self, listener: EngineListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def clear(self) -> None:
        self._listeners.clear()

    def __len__(self) -> int:
        return len(self._listeners)

    def emit(self, signal: str, *args: Any) -> None:
        """
        Calls ``signal`` on every listener with ``args``.

        Args:
            signal: Name of the listener method (e.g. "data_changed")
            *args: Positional arguments passed to the method
        """
        # Iterate over a copy: a listener may unsubscribe while handling a signal
        for listener in list(self._listeners):
            # Detached (or cleared on teardown) by an earlier listener in this emit
            if listener not in self._listeners:
                continue
            handler = getattr(listener, signal, None)
            if handler is None:
                continue
            try:
                handler(*args)
            except Exception:
                logger.exception(
                    "Listener failed while handling signal",
                    extra={"signal": signal, "listener": type(listener).__name__},
                )
