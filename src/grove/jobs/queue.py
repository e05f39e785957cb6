"""Redis-backed job queue that carries per-job context.

Jobs are JSON records under ``grove:job:<id>``; their ids move between three
Redis lists:

    submit -> pending -> (BRPOPLPUSH) -> processing -> done | pending | dlq

Dispatch hooks run inside ``submit`` and may write to ``Job.context`` before
the record is stored, which is how the tenants current at dispatch travel
to the worker.

Example:
    queue = JobQueue()
    queue.add_dispatch_hook(CaptureTenantsForJob(grove))

    job_id = await queue.submit("send_invoice", {"invoice_id": 42})
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, AsyncIterator, Awaitable, Callable, TypeVar, cast
from uuid import uuid4

if TYPE_CHECKING:
    from redis.asyncio import Redis

from grove.redis import get_redis

T = TypeVar("T")


def _await_redis(result: Awaitable[T] | T) -> Awaitable[T]:
    """Cast redis-py async results to an awaitable for mypy."""
    return cast(Awaitable[T], result)


logger = logging.getLogger(__name__)

JOB_PREFIX = "grove:job:"
QUEUE_PENDING = "grove:jobs:pending"
QUEUE_PROCESSING = "grove:jobs:processing"
QUEUE_DLQ = "grove:jobs:dlq"

DEFAULT_JOB_TTL = 86400 * 7  # 7 days
DEFAULT_RESULT_TTL = 86400  # 24 hours
DEFAULT_MAX_RETRIES = 3


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    DEAD = "dead"  # Out of attempts, parked on the DLQ


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


@dataclass
class Job:
    """A queued unit of work.

    ``payload`` belongs to the handler. ``context`` is filled by dispatch
    hooks and read back by processing hooks; handlers should not rely on it.
    """

    id: str
    task: str
    payload: dict[str, Any]
    context: dict[str, Any] = field(default_factory=dict)
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: datetime | None = None
    completed_at: datetime | None = None
    result: dict[str, Any] | None = None
    error: str | None = None
    attempts: int = 0
    max_retries: int = DEFAULT_MAX_RETRIES

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation stored in Redis."""
        return {
            "id": self.id,
            "task": self.task,
            "payload": self.payload,
            "context": self.context,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "result": self.result,
            "error": self.error,
            "attempts": self.attempts,
            "max_retries": self.max_retries,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Job:
        """Rebuild a job from its stored record; records without context get an empty one."""
        return cls(
            id=data["id"],
            task=data["task"],
            payload=data["payload"],
            context=data.get("context") or {},
            status=JobStatus(data["status"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            started_at=_parse_time(data.get("started_at")),
            completed_at=_parse_time(data.get("completed_at")),
            result=data.get("result"),
            error=data.get("error"),
            attempts=data.get("attempts", 0),
            max_retries=data.get("max_retries", DEFAULT_MAX_RETRIES),
        )


# Runs in submit() before the job is stored
DispatchHook = Callable[[Job], Awaitable[None]]


class JobQueue:
    """Job queue over Redis lists with dispatch hooks."""

    def __init__(
        self,
        job_ttl: int = DEFAULT_JOB_TTL,
        result_ttl: int = DEFAULT_RESULT_TTL,
        max_retries: int = DEFAULT_MAX_RETRIES,
    ) -> None:
        self.job_ttl = job_ttl
        self.result_ttl = result_ttl
        self.max_retries = max_retries
        self._redis: Redis | None = None
        self._dispatch_hooks: list[DispatchHook] = []

    async def initialize(self) -> None:
        """Initialize Redis connection, keeping one that is already set."""
        if self._redis is not None:
            return
        self._redis = await get_redis()
        logger.info("Job queue initialized")

    async def _get_redis(self) -> Redis:
        if self._redis is None:
            await self.initialize()
        return self._redis  # type: ignore[return-value]

    def _job_key(self, job_id: str) -> str:
        return f"{JOB_PREFIX}{job_id}"

    async def _store(self, job: Job, ttl: int) -> None:
        redis = await self._get_redis()
        await _await_redis(redis.set(self._job_key(job.id), json.dumps(job.to_dict()), ex=ttl))

    def add_dispatch_hook(self, hook: DispatchHook) -> None:
        """Register a hook run on every job before it is stored."""
        self._dispatch_hooks.append(hook)

    async def submit(
        self,
        task: str,
        payload: dict[str, Any] | None = None,
        max_retries: int | None = None,
    ) -> str:
        """Run the dispatch hooks, store the job and queue it.

        A failing dispatch hook propagates and nothing is queued.

        Returns:
            Job ID for tracking
        """
        redis = await self._get_redis()

        job = Job(
            id=str(uuid4()),
            task=task,
            payload=payload or {},
            max_retries=max_retries if max_retries is not None else self.max_retries,
        )

        for hook in self._dispatch_hooks:
            await hook(job)

        await self._store(job, self.job_ttl)
        await _await_redis(redis.lpush(QUEUE_PENDING, job.id))

        logger.info(f"Job submitted: {job.id} ({task}), context keys {sorted(job.context)}")
        return job.id

    async def get_job(self, job_id: str) -> Job | None:
        redis = await self._get_redis()
        data = await redis.get(self._job_key(job_id))

        if data is None:
            return None

        return Job.from_dict(json.loads(data))

    async def claim_jobs(
        self,
        batch_size: int = 1,
        timeout: int | None = None,
    ) -> AsyncIterator[Job]:
        """Move up to ``batch_size`` jobs to processing and yield them.

        Args:
            batch_size: Maximum number of jobs to claim
            timeout: Seconds to block for each job (None blocks forever)
        """
        redis = await self._get_redis()

        for _ in range(batch_size):
            raw_id = cast(
                bytes | str | None,
                await _await_redis(
                    redis.brpoplpush(QUEUE_PENDING, QUEUE_PROCESSING, timeout=timeout or 0)
                ),
            )
            if raw_id is None:
                break

            job_id = raw_id.decode() if isinstance(raw_id, bytes) else raw_id
            job = await self.get_job(job_id)

            if job is None:
                # Record expired while queued
                await _await_redis(redis.lrem(QUEUE_PROCESSING, 1, job_id))
                continue

            job.status = JobStatus.RUNNING
            job.started_at = datetime.now(timezone.utc)
            job.attempts += 1
            await self._store(job, self.job_ttl)

            logger.info(f"Job claimed: {job.id} (attempt {job.attempts})")
            yield job

    async def complete_job(self, job_id: str, result: dict[str, Any] | None = None) -> None:
        redis = await self._get_redis()
        job = await self.get_job(job_id)

        if job is None:
            logger.warning(f"Job not found for completion: {job_id}")
            return

        job.status = JobStatus.COMPLETED
        job.completed_at = datetime.now(timezone.utc)
        job.result = result

        await self._store(job, self.result_ttl)
        await _await_redis(redis.lrem(QUEUE_PROCESSING, 1, job_id))

        logger.info(f"Job completed: {job_id}")

    async def fail_job(self, job_id: str, error: str, retry: bool = True) -> None:
        """Record a failure; re-queue while attempts remain, else park on the DLQ.

        Jobs whose tenant context could not be restored come through here
        with ``retry=True`` like any other failure.
        """
        redis = await self._get_redis()
        job = await self.get_job(job_id)

        if job is None:
            logger.warning(f"Job not found for failure: {job_id}")
            return

        job.error = error
        await _await_redis(redis.lrem(QUEUE_PROCESSING, 1, job_id))

        if retry and job.attempts < job.max_retries:
            job.status = JobStatus.PENDING
            await self._store(job, self.job_ttl)
            await _await_redis(redis.lpush(QUEUE_PENDING, job_id))
            logger.info(f"Job re-queued: {job_id} (attempt {job.attempts}/{job.max_retries})")
            return

        job.status = JobStatus.DEAD
        job.completed_at = datetime.now(timezone.utc)
        await self._store(job, self.job_ttl)
        await _await_redis(redis.lpush(QUEUE_DLQ, job_id))
        logger.warning(f"Job moved to DLQ: {job_id} ({error})")
