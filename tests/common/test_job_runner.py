from workhub.common.jobs import ThreadPoolJobRunner, run_with_attempts
from workhub.core.exceptions import NotFoundError

from fakes import InlineJobRunner


class Flaky:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError("transient")
        return "done"


def test_retries_until_success_with_fixed_delay():
    job = Flaky(failures=2)
    delays = []

    assert run_with_attempts(job, name="flaky", attempts=3, retry_delay=0.5, sleep=delays.append)
    assert job.calls == 3
    assert delays == [0.5, 0.5]


def test_gives_up_after_last_attempt():
    job = Flaky(failures=5)

    assert not run_with_attempts(job, name="flaky", attempts=3, retry_delay=0, sleep=lambda _: None)
    assert job.calls == 3


def test_domain_error_is_not_retried():
    calls = []

    def job():
        calls.append(1)
        raise NotFoundError("gone")

    assert not run_with_attempts(job, name="missing", attempts=3, retry_delay=0, sleep=lambda _: None)
    assert len(calls) == 1


def test_inline_runner_records_completed_jobs():
    runner = InlineJobRunner()
    runner.enqueue(Flaky(failures=1), name="one")
    runner.enqueue(Flaky(failures=9), name="never")

    assert runner.completed == ["one"]


def test_thread_pool_runner_returns_future():
    runner = ThreadPoolJobRunner(max_workers=1, attempts=1, retry_delay=0)
    try:
        assert runner.enqueue(Flaky(failures=0), name="quick").result(timeout=5) is True
    finally:
        runner.shutdown()
