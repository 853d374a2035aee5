"""
Future helpers used to chain the asynchronous stages of a deployment.
"""
import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def default_executor() -> Executor:
    """Return the shared worker pool, creating it on first use."""
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(thread_name_prefix="lambda-uploader")
        return _executor


def completed(value: Any = None) -> Future:
    """Return a future that has already succeeded with ``value``."""
    future: Future = Future()
    future.set_result(value)
    return future


def failed(exception: BaseException) -> Future:
    """Return a future that has already failed with ``exception``."""
    future: Future = Future()
    future.set_exception(exception)
    return future


def _mirror(source: Future, target: Future) -> None:
    if target.done():
        # Cancelled by the caller; the outcome of the last stage is dropped.
        return
    if source.cancelled():
        target.cancel()
        return
    exception = source.exception()
    if exception is not None:
        target.set_exception(exception)
    else:
        target.set_result(source.result())


def then_compose(future: "Future[T]", fn: Callable[[T], "Future[R]"]) -> "Future[R]":
    """
    Chain ``fn`` after ``future``.

    ``fn`` receives the successful result of ``future`` and returns the next future; the
    returned future resolves with that future's outcome. If ``future`` fails, ``fn`` is not
    called and the returned future fails with the same exception.

    Args:
        future: The stage to wait for
        fn: Starts the next stage from the result of ``future``

    Returns:
        A future for the outcome of the whole chain
    """
    chained: Future = Future()

    def _on_done(done: Future) -> None:
        if chained.done():
            return
        if done.cancelled():
            chained.cancel()
            return
        exception = done.exception()
        if exception is not None:
            chained.set_exception(exception)
            return
        try:
            next_future = fn(done.result())
        except Exception as e:
            logger.debug(f"Continuation raised before returning a future: {e}")
            chained.set_exception(e)
            return
        next_future.add_done_callback(lambda nxt: _mirror(nxt, chained))

    future.add_done_callback(_on_done)
    return chained
