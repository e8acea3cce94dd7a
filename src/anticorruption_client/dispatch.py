"""Run backend calls off the UI thread and hand results back to it.

The UI toolkit supplies ``post``: a callable that schedules a function on the
UI thread (``App.call_from_thread`` in Textual, ``widget.after(0, fn)`` in
Tk, ``QTimer.singleShot(0, fn)`` in Qt). Callbacks only ever run through it.

Every request is submitted under a key. A newer request under the same key
supersedes the older one: the older one is cancelled if it has not started,
and its result is dropped if it has.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import Any

from anticorruption_client.errors import ClientError

logger = logging.getLogger("anticorruption_client.dispatch")

Post = Callable[[Callable[[], None]], None]


def _run_now(fn: Callable[[], None]) -> None:
    fn()


class ImmediateExecutor(Executor):
    """Executor that runs each call in the submitting thread.

    For scripts and tests that have no UI thread to protect.
    """

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        future: Future = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except BaseException as e:
            future.set_exception(e)
        else:
            future.set_result(result)
        return future


class Dispatcher:
    """Executor plus UI-thread marshalling plus per-key supersession."""

    def __init__(
        self,
        post: Post | None = None,
        max_workers: int = 4,
        executor: Executor | None = None,
    ) -> None:
        self._post = post or _run_now
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="backend"
        )
        self._lock = threading.Lock()
        self._pending: dict[str, Future] = {}

    def is_pending(self, key: str) -> bool:
        """True while a request submitted under ``key`` has not finished."""
        with self._lock:
            future = self._pending.get(key)
            return future is not None and not future.done()

    def submit(
        self,
        key: str,
        call: Callable[[], Any],
        on_success: Callable[[Any], None] | None = None,
        on_error: Callable[[BaseException], None] | None = None,
        supersede: bool = True,
    ) -> Future | None:
        """Run ``call`` in the background and deliver its outcome on the UI thread.

        With ``supersede=False`` a request under a key that is still pending
        is refused (None is returned) instead of replacing the older one.
        """
        with self._lock:
            previous = self._pending.get(key)
            if previous is not None and not previous.done():
                if not supersede:
                    logger.debug(f"Ignoring duplicate request {key!r} while one is in flight")
                    return None
                logger.debug(f"Superseding in-flight request {key!r}")
            future = self._executor.submit(call)
            self._pending[key] = future

        # Outside the lock: cancel() runs the old future's done-callbacks inline.
        if previous is not None:
            previous.cancel()
        future.add_done_callback(lambda f: self._deliver(key, f, on_success, on_error))
        return future

    def _deliver(
        self,
        key: str,
        future: Future,
        on_success: Callable[[Any], None] | None,
        on_error: Callable[[BaseException], None] | None,
    ) -> None:
        with self._lock:
            current = self._pending.get(key) is future
            if current:
                del self._pending[key]
        if future.cancelled() or not current:
            logger.debug(f"Dropping result of superseded request {key!r}")
            return

        error = future.exception()
        if error is None:
            if on_success is not None:
                result = future.result()
                self._post(lambda: on_success(result))
            return

        if not isinstance(error, ClientError):
            logger.error(f"Unexpected error in request {key!r}", exc_info=error)
        if on_error is not None:
            self._post(lambda: on_error(error))
        elif isinstance(error, ClientError):
            logger.error(f"Request {key!r} failed: {error.message}")

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait, cancel_futures=True)
