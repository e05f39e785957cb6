"""Tests for carrying the current tenants across the job queue."""

from __future__ import annotations

import pytest
from support import TENANTS, InMemoryRedis, make_settings

from grove.core import Grove
from grove.exceptions import JobRestoreError
from grove.jobs.queue import Job, JobQueue, JobStatus
from grove.jobs.tenancy import (
    CONTEXT_KEY,
    CaptureTenantsForJob,
    SetCurrentTenantForJob,
    bind_job_tenancy,
    capture_tenant_context,
)
from grove.jobs.worker import JobWorker, WorkerConfig
from grove.tenants import TenantKey

TWO_TENANCIES = {
    "tenancies": {
        "tenants": {"provider": "tenants"},
        "teams": {"provider": "teams"},
    },
    "providers": {
        "tenants": {"driver": "static", "tenants": TENANTS},
        "teams": {
            "driver": "static",
            "tenants": [{"id": "red", "identifier": "red-team"}],
        },
    },
}


@pytest.fixture
def redis() -> InMemoryRedis:
    return InMemoryRedis()


def make_queue(redis: InMemoryRedis) -> JobQueue:
    queue = JobQueue()
    queue._redis = redis
    return queue


class TestCaptureTenants:
    """Tests for capturing tenant keys at dispatch."""

    @pytest.mark.asyncio
    async def test_captures_only_identified_tenancies(self) -> None:
        grove = Grove(make_settings(**TWO_TENANCIES))
        await grove.tenancy("tenants").identify("acme")
        grove.tenancy("teams")

        assert capture_tenant_context(grove) == {"tenants": 1}

    @pytest.mark.asyncio
    async def test_no_context_without_tenant(self, grove: Grove) -> None:
        job = Job(id="job-1", task="send_invoice", payload={})

        await CaptureTenantsForJob(grove)(job)

        assert CONTEXT_KEY not in job.context

    @pytest.mark.asyncio
    async def test_captures_keys_not_identifiers(self, grove: Grove) -> None:
        await grove.tenancy().identify("globex")
        job = Job(id="job-1", task="send_invoice", payload={})

        await CaptureTenantsForJob(grove)(job)

        assert job.context == {CONTEXT_KEY: {"tenants": 2}}


class TestRestoreTenants:
    """Tests for restoring captured tenants before a job runs."""

    @pytest.mark.asyncio
    async def test_loads_by_key(self, grove: Grove) -> None:
        job = Job(id="job-1", task="send_invoice", payload={}, context={CONTEXT_KEY: {"tenants": 3}})

        await SetCurrentTenantForJob(grove)(job)

        assert grove.tenancy().identifier() == "x"

    @pytest.mark.asyncio
    async def test_replaces_leftover_tenant(self, grove: Grove) -> None:
        await grove.tenancy().identify("acme")
        job = Job(id="job-1", task="send_invoice", payload={})

        await SetCurrentTenantForJob(grove)(job)

        assert grove.tenancy().check() is False

    @pytest.mark.asyncio
    async def test_missing_tenant_raises(self, grove: Grove) -> None:
        job = Job(
            id="job-1", task="send_invoice", payload={}, context={CONTEXT_KEY: {"tenants": 404}}
        )

        with pytest.raises(JobRestoreError) as exc_info:
            await SetCurrentTenantForJob(grove)(job)

        assert exc_info.value.job_id == "job-1"
        assert exc_info.value.key == 404
        assert grove.tenancy().check() is False


class TestJobRoundTrip:
    """Tests for dispatching in one process and running in another."""

    @pytest.mark.asyncio
    async def test_worker_sees_dispatching_tenants(self, redis: InMemoryRedis) -> None:
        """A fresh worker process runs the job under the captured tenants."""
        api = Grove(make_settings(**TWO_TENANCIES))
        api_queue = make_queue(redis)
        bind_job_tenancy(api, api_queue)

        await api.tenancy("tenants").identify("globex")
        await api.tenancy("teams").identify("red-team")
        job_id = await api_queue.submit("send_invoice", {"invoice_id": 42})

        background = Grove(make_settings(**TWO_TENANCIES))
        worker_queue = make_queue(redis)
        worker = JobWorker(queue=worker_queue, config=WorkerConfig(batch_size=1))
        bind_job_tenancy(background, worker_queue, worker)

        seen: dict[str, TenantKey | None] = {}

        async def handler(job: Job) -> dict:
            seen["tenants"] = background.tenancy("tenants").key()
            seen["teams"] = background.tenancy("teams").key()
            return {"sent": True}

        worker.register_handler("send_invoice", handler)

        assert await worker.run_once() == 1

        assert seen == {"tenants": 2, "teams": "red"}
        assert background.tenancy("tenants").check() is False
        assert background.tenancy("teams").check() is False

        job = await worker_queue.get_job(job_id)
        assert job is not None
        assert job.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_job_without_tenant_runs_untenanted(self, redis: InMemoryRedis) -> None:
        api = Grove(make_settings())
        queue = make_queue(redis)
        worker = JobWorker(queue=queue)
        bind_job_tenancy(api, queue, worker)

        job_id = await queue.submit("send_invoice", {})
        seen: list[bool] = []

        async def handler(job: Job) -> None:
            seen.append(api.tenancy().check())

        worker.register_handler("send_invoice", handler)
        await worker.run_once()

        assert seen == [False]
        job = await queue.get_job(job_id)
        assert job is not None
        assert job.context == {}

    @pytest.mark.asyncio
    async def test_unrestorable_job_fails_with_retry(self, redis: InMemoryRedis) -> None:
        """A tenant deleted after dispatch fails the job instead of running it."""
        api = Grove(make_settings())
        queue = make_queue(redis)
        bind_job_tenancy(api, queue)
        await api.tenancy().identify("acme")
        job_id = await queue.submit("send_invoice", {}, max_retries=1)

        # The worker's provider no longer knows tenant 1
        background = Grove(
            make_settings(
                providers={"tenants": {"driver": "static", "tenants": TENANTS[1:]}},
            )
        )
        worker = JobWorker(queue=queue)
        bind_job_tenancy(background, queue, worker)
        handled: list[str] = []

        async def handler(job: Job) -> None:
            handled.append(job.id)

        worker.register_handler("send_invoice", handler)
        await worker.run_once()

        assert handled == []
        job = await queue.get_job(job_id)
        assert job is not None
        assert job.status == JobStatus.DEAD
        assert "Unable to restore tenant [1]" in (job.error or "")
