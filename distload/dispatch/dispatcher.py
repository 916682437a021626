"""Fan-out of planned jobs and fan-in of their reports."""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from ..core.errors import DispatchError
from ..core.models import Job, Settings
from .executors import Executor
from .invokers import Invoker


def epoch_millis() -> int:
    return int(time.time() * 1000)


class Dispatcher:
    """
    Runs the first job in the current worker and hands the rest to new workers.

    Every job is launched concurrently. The local job starts at its scheduled
    time; remote jobs are invoked time_buffer_millis early so the new worker
    can start up and wait out the difference itself.
    """

    def __init__(
        self,
        settings: Settings,
        executor: Executor,
        invoker: Optional[Invoker] = None,
        clock: Callable[[], int] = epoch_millis,
    ):
        self.settings = settings
        self.executor = executor
        self.invoker = invoker
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    async def run(self, jobs: List[Job]) -> List[Optional[Any]]:
        """
        Dispatch jobs and collect their reports.

        Args:
            jobs: Planned jobs; the first one runs in-process

        Returns:
            One report per job in input order (None for Event invocations).
            A failed job yields a report describing the failure instead of
            cancelling the others.
        """
        if not jobs:
            return []

        tasks = [self._execute(jobs[0])]
        tasks.extend(self._invoke(index, job) for index, job in enumerate(jobs[1:], start=1))

        results = await asyncio.gather(*tasks, return_exceptions=True)

        reports: List[Optional[Any]] = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                key = "executionError" if index == 0 else "dispatchError"
                self.logger.error(f"Job {index} failed: {result}")
                reports.append(failure_report(result, key))
            else:
                reports.append(result)
        return reports

    async def _execute(self, job: Job) -> Any:
        delay = max(0, job.start - self.clock())
        if delay > 0:
            self.logger.info(f"Waiting {delay}ms to execute local job")
            await asyncio.sleep(delay / 1000)
        return await self.executor.execute(replace(job.script, start=job.start), job.start)

    async def _invoke(self, index: int, job: Job) -> Optional[Any]:
        if self.invoker is None:
            raise DispatchError("No invoker configured for remote jobs")
        delay = max(0, job.start - self.clock() - self.settings.time_buffer_millis)
        if delay > 0:
            self.logger.info(f"Waiting {delay}ms to invoke job {index}")
            await asyncio.sleep(delay / 1000)
        self.logger.info(f"Invoking job {index} as {job.invocation.value}")
        return await self.invoker.invoke(job.payload, job.invocation)


def failure_report(error: BaseException, key: str) -> Dict[str, Any]:
    """Report standing in for a job that failed to run."""
    return {
        "errors": {type(error).__name__: 1},
        key: str(error),
    }
