from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import time
from concurrent.futures import Executor as PoolExecutor
from typing import Any

from .app_logging import get_logger, log_with_fields
from .limiter import ConcurrencyLimiter
from .models import Failure, Job, JobOutcome, Success, kind_key
from .registry import ExecutorRegistry


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return message if message else type(exc).__name__


class JobRunner:
    """Runs a single job under the limiter and turns every exit into an outcome.

    Sync executors run on ``pool`` (the loop's default executor when ``None``);
    ``async def`` executors are awaited on the loop. Errors raised by the
    executor, including ``SystemExit`` from a worker thread, become a
    ``Failure``. Cancellation and ``KeyboardInterrupt`` propagate, and the
    slot is released on every path.
    """

    def __init__(
        self,
        registry: ExecutorRegistry,
        limiter: ConcurrencyLimiter,
        pool: PoolExecutor | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.registry = registry
        self.limiter = limiter
        self.pool = pool
        self.logger = logger or get_logger()

    async def run(self, job: Job, shared_input: Any) -> JobOutcome:
        async with self.limiter.slot():
            started = time.perf_counter()
            try:
                executor = self.registry.resolve(job.kind)
                result = await self._invoke(executor, shared_input, job)
                payload = self._as_bytes(result)
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                return self._failure(job, exc, started)
            except BaseException as exc:
                if isinstance(exc, KeyboardInterrupt):
                    raise
                return self._failure(job, exc, started, abnormal=True)

            elapsed = time.perf_counter() - started
            log_with_fields(
                self.logger,
                logging.INFO,
                "job_succeeded",
                identifier=job.identifier,
                kind=kind_key(job.kind),
                bytes_produced=len(payload),
                elapsed=round(elapsed, 6),
            )
            return Success(
                bytes_produced=len(payload),
                elapsed=elapsed,
                payload=payload,
                kind=kind_key(job.kind),
            )

    async def _invoke(self, executor: Any, shared_input: Any, job: Job) -> Any:
        if inspect.iscoroutinefunction(executor):
            return await executor(shared_input, job.config)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(self.pool, functools.partial(executor, shared_input, job.config))
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _as_bytes(result: Any) -> bytes:
        if isinstance(result, bytes):
            return result
        if isinstance(result, (bytearray, memoryview)):
            return bytes(result)
        raise TypeError(f"executor returned {type(result).__name__}, expected bytes")

    def _failure(self, job: Job, exc: BaseException, started: float, *, abnormal: bool = False) -> Failure:
        elapsed = time.perf_counter() - started
        log_with_fields(
            self.logger,
            logging.ERROR,
            "job_failed",
            identifier=job.identifier,
            kind=kind_key(job.kind),
            error=_describe(exc),
            error_type=type(exc).__name__,
            abnormal=abnormal,
            elapsed=round(elapsed, 6),
        )
        return Failure(
            error_message=_describe(exc),
            elapsed=elapsed,
            error_type=type(exc).__name__,
            kind=kind_key(job.kind),
        )
