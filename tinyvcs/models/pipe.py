"""Bounded in-process pipe between a producer thread and a reading consumer."""

import contextlib
import threading
from collections.abc import Callable, Iterable
from queue import Full, Queue
from typing import Iterator

__all__ = ["BoundedPipe", "PipeClosed", "stream_from"]

_EOF = object()


class PipeClosed(Exception):
    """Raised in the producer when the reader went away."""


class _Failure:
    def __init__(self, exc: BaseException):
        self.exc = exc


class BoundedPipe:
    """File-like reader fed by a writer through a queue of at most ``capacity`` chunks.

    ``write`` blocks while the queue is full, which throttles the producer to
    the consumer's pace.
    """

    def __init__(self, capacity: int = 16, *, poll_interval: float = 0.05):
        self._queue: Queue = Queue(maxsize=capacity)
        self._buffer = b""
        self._eof = False
        self._closed = threading.Event()
        self._poll_interval = poll_interval

    def _put(self, item):
        while True:
            if self._closed.is_set():
                raise PipeClosed("reader closed the pipe")
            try:
                self._queue.put(item, timeout=self._poll_interval)
                return
            except Full:
                continue

    def write(self, data: bytes) -> int:
        if data:
            self._put(bytes(data))
        return len(data)

    def finish(self, exc: BaseException | None = None):
        """Signal end of stream, or hand ``exc`` over to the reader."""
        self._put(_Failure(exc) if exc is not None else _EOF)

    def read(self, size: int = -1) -> bytes:
        while not self._eof and (size < 0 or len(self._buffer) < size):
            item = self._queue.get()
            if item is _EOF:
                self._eof = True
            elif isinstance(item, _Failure):
                self._eof = True
                raise item.exc
            else:
                self._buffer += item
        if size < 0:
            data, self._buffer = self._buffer, b""
        else:
            data, self._buffer = self._buffer[:size], self._buffer[size:]
        return data

    def close(self):
        self._closed.set()


@contextlib.contextmanager
def stream_from(produce: Callable[[], Iterable[bytes]], *, capacity: int = 16) -> Iterator[BoundedPipe]:
    """Run ``produce`` on a worker thread and yield a reader over its chunks.

    An exception raised by the producer is re-raised from ``read``.
    """
    pipe = BoundedPipe(capacity)

    def worker():
        try:
            for chunk in produce():
                pipe.write(chunk)
        except PipeClosed:
            return
        except BaseException as exc:
            with contextlib.suppress(PipeClosed):
                pipe.finish(exc)
            return
        with contextlib.suppress(PipeClosed):
            pipe.finish()

    thread = threading.Thread(target=worker, name="tinyvcs-pipe-producer", daemon=True)
    thread.start()
    try:
        yield pipe
    finally:
        pipe.close()
        thread.join()
