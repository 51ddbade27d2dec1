import asyncio
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class DelayedApply(Generic[T]):
    """Debounced call: each ``schedule`` cancels the pending one and re-arms.

    Must be used from inside a running event loop. Owners call ``cancel``
    on teardown so no callback fires after the owner is gone.
    """

    def __init__(self, callback: Callable[[T], Any], delay: float = 0.0):
        self.callback = callback
        self.delay = delay
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, value: T) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, value)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, value: T) -> None:
        self._handle = None
        self.callback(value)
