"""Cooperative cancellation for in-flight searches."""


class CancellationToken:
    """Flag checked by adapters between request attempts."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled
