from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .aggregator import ResultAggregator
from .app_logging import get_logger, log_with_fields
from .executors import default_registry
from .limiter import ConcurrencyLimiter
from .models import BatchReport, Job, JobOutcome
from .registry import ExecutorRegistry
from .runner import JobRunner

ProgressCallback = Callable[[int, int, str], None]


class BatchOrchestrator:
    """Fans a list of jobs out under a concurrency limit and collects every outcome.

    Each job gets its own task straight away; only the executor call inside
    ``JobRunner.run`` waits for a limiter slot. Outcomes are recorded and
    ``on_progress`` is called in completion order from the coordinating
    coroutine, so the aggregator needs no locking.
    """

    def __init__(
        self,
        registry: ExecutorRegistry,
        max_concurrency: int = 4,
        logger: logging.Logger | None = None,
    ) -> None:
        if isinstance(max_concurrency, bool) or not isinstance(max_concurrency, int):
            raise TypeError("max_concurrency must be an integer")
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.registry = registry
        self.max_concurrency = max_concurrency
        self.logger = logger or get_logger()

    def execute(
        self,
        jobs: Iterable[Job],
        shared_input: Any,
        on_progress: ProgressCallback | None = None,
    ) -> BatchReport:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise RuntimeError("execute() cannot run inside an event loop; await execute_async() instead")
        job_list = self._validate(jobs)
        if not job_list:
            return ResultAggregator().report(0.0)
        return asyncio.run(self._execute(job_list, shared_input, on_progress))

    async def execute_async(
        self,
        jobs: Iterable[Job],
        shared_input: Any,
        on_progress: ProgressCallback | None = None,
    ) -> BatchReport:
        job_list = self._validate(jobs)
        if not job_list:
            return ResultAggregator().report(0.0)
        return await self._execute(job_list, shared_input, on_progress)

    def make_limiter(self) -> ConcurrencyLimiter:
        return ConcurrencyLimiter(self.max_concurrency)

    async def _execute(
        self,
        jobs: list[Job],
        shared_input: Any,
        on_progress: ProgressCallback | None,
    ) -> BatchReport:
        total = len(jobs)
        started = time.perf_counter()
        limiter = self.make_limiter()
        aggregator = ResultAggregator()
        log_with_fields(
            self.logger,
            logging.INFO,
            "batch_started",
            jobs=total,
            max_concurrency=self.max_concurrency,
        )

        with ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="exportbatch") as pool:
            runner = JobRunner(self.registry.snapshot(), limiter, pool=pool, logger=self.logger)

            async def run_one(job: Job) -> tuple[Job, JobOutcome]:
                return job, await runner.run(job, shared_input)

            tasks = [asyncio.create_task(run_one(job)) for job in jobs]
            try:
                for completed, next_done in enumerate(asyncio.as_completed(tasks), start=1):
                    job, outcome = await next_done
                    aggregator.add(job.identifier, outcome)
                    self._notify(on_progress, completed, total, job.identifier)
            finally:
                pending = [task for task in tasks if not task.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

        report = aggregator.report(time.perf_counter() - started)
        log_with_fields(
            self.logger,
            logging.INFO,
            "batch_finished",
            jobs=total,
            succeeded=report.succeeded_count,
            failed=report.failed_count,
            total_bytes=report.total_bytes,
            elapsed=round(report.total_elapsed, 6),
        )
        return report

    def _notify(self, on_progress: ProgressCallback | None, completed: int, total: int, identifier: str) -> None:
        if on_progress is None:
            return
        try:
            on_progress(completed, total, identifier)
        except Exception:
            self.logger.exception(
                "progress_callback_failed",
                extra={"extra_fields": {"identifier": identifier, "completed": completed}},
            )

    @staticmethod
    def _validate(jobs: Iterable[Job] | None) -> list[Job]:
        if jobs is None:
            raise TypeError("jobs must be a list of Job, not None")
        job_list = list(jobs)
        for index, job in enumerate(job_list):
            if not isinstance(job, Job):
                raise TypeError(f"jobs[{index}] must be a Job, got {type(job).__name__}")
        return job_list


def execute(
    jobs: Iterable[Job],
    shared_input: Any,
    max_concurrency: int,
    on_progress: ProgressCallback | None = None,
    registry: ExecutorRegistry | None = None,
) -> BatchReport:
    if registry is None:
        registry = default_registry()
    return BatchOrchestrator(registry, max_concurrency).execute(jobs, shared_input, on_progress)
