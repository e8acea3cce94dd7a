import threading
from concurrent.futures import Executor, Future

from anticorruption_client.dispatch import Dispatcher, ImmediateExecutor
from anticorruption_client.errors import BackendError


class ManualExecutor(Executor):
    """Holds submitted calls until the test starts and finishes them."""

    def __init__(self) -> None:
        self.jobs: list[tuple[Future, object]] = []

    def submit(self, fn, /, *args, **kwargs) -> Future:
        future: Future = Future()
        self.jobs.append((future, lambda: fn(*args, **kwargs)))
        return future

    def start(self, index: int) -> bool:
        return self.jobs[index][0].set_running_or_notify_cancel()

    def finish(self, index: int) -> None:
        future, call = self.jobs[index]
        future.set_result(call())


class PostQueue:
    """Stands in for the UI thread: posted callbacks run when drained."""

    def __init__(self) -> None:
        self.posted = []

    def __call__(self, fn) -> None:
        self.posted.append(fn)

    def drain(self) -> None:
        while self.posted:
            self.posted.pop(0)()


def test_results_go_through_post():
    post = PostQueue()
    dispatcher = Dispatcher(post=post, executor=ImmediateExecutor())
    results = []

    dispatcher.submit("reports", lambda: [1, 2], results.append)

    assert results == []
    post.drain()
    assert results == [[1, 2]]


def test_errors_go_to_on_error():
    dispatcher = Dispatcher(executor=ImmediateExecutor())
    errors = []

    def fail():
        raise BackendError("Server said no", status="BAD_REQUEST")

    dispatcher.submit("users", fail, on_error=errors.append)

    assert len(errors) == 1
    assert errors[0].message == "Server said no"


def test_superseded_request_is_cancelled_before_it_starts():
    executor = ManualExecutor()
    dispatcher = Dispatcher(executor=executor)
    results = []

    dispatcher.submit("reports", lambda: "old", results.append)
    dispatcher.submit("reports", lambda: "new", results.append)

    assert not executor.start(0)
    executor.start(1)
    executor.finish(1)
    assert results == ["new"]


def test_superseded_running_request_result_is_dropped():
    executor = ManualExecutor()
    dispatcher = Dispatcher(executor=executor)
    results = []

    dispatcher.submit("reports", lambda: "old", results.append)
    executor.start(0)
    dispatcher.submit("reports", lambda: "new", results.append)
    executor.start(1)

    executor.finish(0)
    assert results == []
    executor.finish(1)
    assert results == ["new"]


def test_different_keys_do_not_supersede_each_other():
    executor = ManualExecutor()
    dispatcher = Dispatcher(executor=executor)
    results = []

    dispatcher.submit("reports", lambda: "reports", results.append)
    dispatcher.submit("users", lambda: "users", results.append)
    for i in range(2):
        executor.start(i)
        executor.finish(i)

    assert results == ["reports", "users"]


def test_duplicate_mutation_is_refused_while_pending():
    executor = ManualExecutor()
    dispatcher = Dispatcher(executor=executor)

    first = dispatcher.submit("create-report", lambda: None, supersede=False)
    second = dispatcher.submit("create-report", lambda: None, supersede=False)

    assert first is not None
    assert second is None
    assert dispatcher.is_pending("create-report")
    assert len(executor.jobs) == 1

    executor.start(0)
    executor.finish(0)
    assert not dispatcher.is_pending("create-report")
    assert dispatcher.submit("create-report", lambda: None, supersede=False) is not None


def test_thread_pool_runs_off_the_calling_thread():
    dispatcher = Dispatcher(max_workers=1)
    caller = threading.get_ident()
    seen = []
    done = threading.Event()

    def deliver(worker_ident):
        seen.append(worker_ident)
        done.set()

    dispatcher.submit("work", threading.get_ident, deliver)
    assert done.wait(timeout=5)
    dispatcher.shutdown()

    assert seen and seen[0] != caller
