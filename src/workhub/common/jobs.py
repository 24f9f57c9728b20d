"""Background job execution with a fixed number of attempts."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Protocol

from ..core.constants import DEFAULT_JOB_ATTEMPTS, DEFAULT_JOB_RETRY_DELAY_SECONDS, DEFAULT_JOB_WORKERS
from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)

Job = Callable[[], object]


class JobRunner(Protocol):
    def enqueue(self, job: Job, *, name: str) -> None:
        raise NotImplementedError


def run_with_attempts(job: Job, *, name: str, attempts: int, retry_delay: float, sleep=time.sleep) -> bool:
    """Run job until it succeeds or attempts run out.

    DomainError means the job can never succeed (missing record etc.): no retry.
    """

    for attempt in range(1, attempts + 1):
        try:
            job()
            return True
        except DomainError as e:
            logger.warning("Job %s dropped: %s", name, e)
            return False
        except Exception:
            if attempt >= attempts:
                logger.exception("Job %s failed after %d attempts", name, attempts)
                return False
            logger.warning("Job %s failed (attempt %d/%d), retrying", name, attempt, attempts)
            sleep(retry_delay)
    return False


class ThreadPoolJobRunner:
    def __init__(
        self,
        *,
        max_workers: int = DEFAULT_JOB_WORKERS,
        attempts: int = DEFAULT_JOB_ATTEMPTS,
        retry_delay: float = DEFAULT_JOB_RETRY_DELAY_SECONDS,
    ):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="workhub-job")
        self._attempts = int(attempts)
        self._retry_delay = float(retry_delay)

    def enqueue(self, job: Job, *, name: str) -> Future:
        return self._executor.submit(
            run_with_attempts, job, name=name, attempts=self._attempts, retry_delay=self._retry_delay
        )

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
