from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class CancelToken:
    """Cooperative cancellation flag passed explicitly down the pipeline."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.reason = ""

    def cancel(self, reason: str = "") -> None:
        if not self._event.is_set():
            self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class RecordStream(Generic[T]):
    """
    Pull-based view over a (possibly slow, possibly infinite) iterable.

    The cancel token is checked before each element is pulled. Iteration stops
    early, without raising, when the token is cancelled or when the source
    raises; `interrupted` and `errors` tell the consumer the result is partial.
    """

    def __init__(self, source: Iterable[T], cancel: CancelToken | None = None) -> None:
        self._source = source
        self.cancel = cancel if cancel is not None else CancelToken()
        self.interrupted = False
        self.errors: list[str] = []
        self.pulled = 0

    def __iter__(self) -> Iterator[T]:
        it = iter(self._source)
        while True:
            if self.cancel.cancelled:
                self.interrupted = True
                # Closing a generator source runs its cleanup, e.g. closing an open cache file.
                close = getattr(it, "close", None)
                if close is not None:
                    close()
                return
            try:
                item = next(it)
            except StopIteration:
                return
            except Exception as e:
                self.interrupted = True
                self.errors.append(f"record stream failed after {self.pulled} records: {e}")
                return
            self.pulled += 1
            yield item


def as_record_stream(source: Iterable[T], cancel: CancelToken | None = None) -> RecordStream[T]:
    # An existing stream keeps its own token.
    if isinstance(source, RecordStream):
        return source
    return RecordStream(source, cancel)

