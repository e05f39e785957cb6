"""Background worker for processing queued jobs.

Provides a worker that:
- Claims and processes jobs from the queue
- Runs processing hooks before each handler (e.g. to restore the tenant)
- Runs finished hooks after each job, whatever its outcome
- Supports graceful shutdown

Example:
    worker = JobWorker()
    worker.register_handler("send_invoice", handle_invoice)

    # Run worker (blocks until shutdown)
    await worker.run()
"""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Awaitable, Callable

from grove.jobs.queue import Job, JobQueue

logger = logging.getLogger(__name__)

# Type alias for job handlers
JobHandler = Callable[[Job], Awaitable[dict[str, Any] | None]]

# Runs before (processing) or after (finished) the handler of a job
JobHook = Callable[[Job], Awaitable[None]]


@dataclass
class WorkerConfig:
    """Worker configuration."""

    name: str = "default"

    batch_size: int = 1
    poll_interval: float = 1.0
    claim_timeout: int = 5


class JobWorker:
    """Background worker for processing queued jobs.

    A failing processing hook fails the job with retry, exactly like a
    failing handler, so the queue's retry and dead letter handling apply.
    """

    def __init__(
        self,
        queue: JobQueue | None = None,
        config: WorkerConfig | None = None,
    ) -> None:
        self.queue = queue or JobQueue()
        self.config = config or WorkerConfig()
        self._handlers: dict[str, JobHandler] = {}
        self._processing_hooks: list[JobHook] = []
        self._finished_hooks: list[JobHook] = []
        self._running = False
        self._tasks: list[asyncio.Task[None]] = []

    def register_handler(self, task: str, handler: JobHandler) -> None:
        """Register a handler for a task type.

        Example:
            async def handle_invoice(job: Job) -> dict:
                invoice_id = job.payload["invoice_id"]
                await send_invoice(invoice_id)
                return {"sent": True}

            worker.register_handler("send_invoice", handle_invoice)
        """
        self._handlers[task] = handler
        logger.info(f"Registered handler for task: {task}")

    def add_processing_hook(self, hook: JobHook) -> None:
        """Register a hook run before each job's handler."""
        self._processing_hooks.append(hook)

    def add_finished_hook(self, hook: JobHook) -> None:
        """Register a hook run after each job, successful or not."""
        self._finished_hooks.append(hook)

    async def start(self) -> None:
        """Initialize the queue and install signal handlers."""
        await self.queue.initialize()
        self._running = True

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

        logger.info(f"Worker started: {self.config.name}")

    async def stop(self) -> None:
        """Stop the worker, waiting for in-flight jobs."""
        logger.info(f"Stopping worker: {self.config.name}")
        self._running = False

        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        logger.info(f"Worker stopped: {self.config.name}")

    def _signal_handler(self) -> None:
        """Handle shutdown signals."""
        logger.info("Received shutdown signal")
        asyncio.create_task(self.stop())

    async def run(self) -> None:
        """Run the worker until shutdown."""
        await self.start()

        try:
            while self._running:
                try:
                    async for job in self.queue.claim_jobs(
                        batch_size=self.config.batch_size,
                        timeout=self.config.claim_timeout,
                    ):
                        # Each job runs in its own task, and so its own context
                        task = asyncio.create_task(self._process_job(job))
                        self._tasks.append(task)
                        task.add_done_callback(self._tasks.remove)

                except asyncio.CancelledError:
                    break
                except Exception as e:
                    logger.error(f"Error claiming jobs: {e}")

                await asyncio.sleep(self.config.poll_interval)

        finally:
            await self.stop()

    async def _process_job(self, job: Job) -> None:
        """Process a single job."""
        handler = self._handlers.get(job.task)

        if handler is None:
            logger.error(f"No handler for task: {job.task}")
            await self.queue.fail_job(job.id, f"Unknown task type: {job.task}", retry=False)
            return

        try:
            for hook in self._processing_hooks:
                await hook(job)

            logger.info(f"Processing job: {job.id} ({job.task})")
            result = await handler(job)
            await self.queue.complete_job(job.id, result)
            logger.info(f"Job completed successfully: {job.id}")

        except Exception as e:
            logger.error(f"Job failed: {job.id} - {e}")
            await self.queue.fail_job(job.id, str(e), retry=True)

        finally:
            for hook in self._finished_hooks:
                await hook(job)

    async def run_once(self) -> int:
        """Process one batch of jobs and return the number processed."""
        await self.queue.initialize()
        count = 0

        async for job in self.queue.claim_jobs(batch_size=self.config.batch_size, timeout=1):
            await self._process_job(job)
            count += 1

        return count

    async def __aenter__(self) -> JobWorker:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.stop()
