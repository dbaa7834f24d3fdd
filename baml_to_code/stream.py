"""
Streaming container returned by streaming actions.

A StreamHandle is a lazy, forward-only iterator. The underlying resource
(for example an open model response) is acquired on the first pull and
released exactly once, on whichever comes first:

- the sequence is exhausted,
- the consumer calls ``close()``, leaves a ``with`` block or breaks out of a ``for`` loop,
- the producer raises, or acquiring the resource fails,
- the handle is garbage collected after the consumer abandoned it.

When the resource is released before exhaustion the stream counts as
cancelled and the ``on_cancel`` hook runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from .errors import StreamClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StreamHandle(Generic[T]):
    """Lazy, non-restartable sequence of ``element_type`` values.

    Args:
        open_stream: Called once, on the first pull, to acquire the
            underlying iterable. If the iterable or its iterator has a
            ``close()`` method it is called on release.
        element_type: Declared type of the elements, for introspection
        on_cancel: Called once if the stream is released before exhaustion
    """

    def __init__(
        self,
        open_stream: Callable[[], Iterable[T]],
        element_type: Any = None,
        on_cancel: Callable[[], None] | None = None,
    ):
        self._open_stream = open_stream
        self._on_cancel = on_cancel
        self._resource: Iterable[T] | None = None
        self._iterator: Iterator[T] | None = None
        self.element_type = element_type
        self.started = False
        self.exhausted = False
        self.cancelled = False
        self.closed = False

    def __iter__(self) -> Iterator[T]:
        # The loop owns this generator: leaving the loop early finalizes it
        # and releases the stream
        try:
            while True:
                try:
                    item = next(self)
                except StopIteration:
                    return
                yield item
        finally:
            self.close()

    def __next__(self) -> T:
        if self.exhausted:
            raise StopIteration
        if self.closed:
            raise StreamClosedError("Stream has been closed and cannot be restarted")

        if self._iterator is None:
            self.started = True
            try:
                self._resource = self._open_stream()
                self._iterator = iter(self._resource)
            except BaseException:
                # A failed acquisition is final, the stream is not retried
                self._release()
                raise

        try:
            return next(self._iterator)
        except StopIteration:
            self.exhausted = True
            self._release()
            raise
        except BaseException:
            self._release()
            raise

    def close(self) -> None:
        """Stop the stream and release the underlying resource.

        Safe to call more than once. Calls ``on_cancel`` when the resource
        was acquired and the stream had not been exhausted.
        """
        if self.closed:
            return
        cancelled = self.started and not self.exhausted
        self._release()
        if cancelled:
            self.cancelled = True
            logger.debug("Stream cancelled before exhaustion")
            if self._on_cancel is not None:
                self._on_cancel()

    def _release(self) -> None:
        if self.closed:
            return
        self.closed = True
        iterator, resource = self._iterator, self._resource
        self._iterator = None
        self._resource = None
        try:
            _close(iterator)
        finally:
            if resource is not iterator:
                _close(resource)

    def __enter__(self) -> StreamHandle[T]:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def __del__(self):
        # Abandoned by the consumer: release whatever is still held
        if not getattr(self, "closed", True):
            self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open" if self.started else "pending"
        return f"<StreamHandle element_type={self.element_type!r} {state}>"


def _close(obj: Any) -> None:
    close = getattr(obj, "close", None)
    if callable(close):
        close()
