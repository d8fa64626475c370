import time
from typing import Callable


class OperationCancelled(Exception):
    pass


class CancellationToken:
    """Cooperative cancellation flag shared by one generation request.

    The generator polls it between batches. An optional timeout turns into a
    deadline on the injected monotonic clock, so a timeout and an explicit
    cancel() look the same to the code that polls.
    """

    def __init__(
        self,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._deadline = clock() + timeout if timeout is not None else None
        self._reason: str | None = None

    def cancel(self, reason: str = "cancelled") -> None:
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        if self._reason is not None:
            return True
        if self._deadline is not None and self._clock() >= self._deadline:
            self._reason = "deadline exceeded"
            return True
        return False

    @property
    def reason(self) -> str | None:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled(self._reason)
