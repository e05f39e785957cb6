"""Carry the current tenants across the queue.

At dispatch, the key of every tenancy's current tenant is captured into the
job's context under ``grove.tenants``. Before the job runs, each tenancy is
reloaded from its captured key. Restoration always loads by key; there is
no request to identify against, and the key is trusted.

Example:
    bind_job_tenancy(grove, queue, worker)
"""

from __future__ import annotations

import logging
from typing import Any

from grove.core import Grove
from grove.exceptions import JobRestoreError, TenantNotFoundError
from grove.jobs.queue import Job, JobQueue
from grove.jobs.worker import JobWorker
from grove.tenants import TenantKey

logger = logging.getLogger(__name__)

CONTEXT_KEY = "grove.tenants"


def capture_tenant_context(grove: Grove) -> dict[str, TenantKey]:
    """Map each tenancy with a current tenant to that tenant's key."""
    tenants: dict[str, TenantKey] = {}

    for name, tenancy in grove.tenancies().resolved().items():
        key = tenancy.key()
        if key is not None:
            tenants[name] = key

    return tenants


class CaptureTenantsForJob:
    """Dispatch hook storing the current tenants on the job."""

    def __init__(self, grove: Grove) -> None:
        self.grove = grove

    async def __call__(self, job: Job) -> None:
        tenants = capture_tenant_context(self.grove)
        if tenants:
            job.context[CONTEXT_KEY] = tenants


class SetCurrentTenantForJob:
    """Processing hook restoring the tenants captured for the job."""

    def __init__(self, grove: Grove) -> None:
        self.grove = grove

    async def __call__(self, job: Job) -> None:
        await self.grove.reset()

        tenants: dict[str, Any] = job.context.get(CONTEXT_KEY, {})

        for tenancy_name, key in tenants.items():
            tenancy = self.grove.tenancy(tenancy_name)

            try:
                # It's always the key, so load rather than identify
                await tenancy.load(key)
            except TenantNotFoundError as e:
                raise JobRestoreError(job.id, tenancy_name, key) from e

            logger.info(f"Restored tenant {key} on tenancy {tenancy_name} for job {job.id}")


class ForgetTenantsAfterJob:
    """Finished hook emptying every tenancy once the job is done."""

    def __init__(self, grove: Grove) -> None:
        self.grove = grove

    async def __call__(self, job: Job) -> None:
        await self.grove.reset()


def bind_job_tenancy(grove: Grove, queue: JobQueue, worker: JobWorker | None = None) -> None:
    """Wire tenant capture into a queue and tenant restore into a worker."""
    queue.add_dispatch_hook(CaptureTenantsForJob(grove))

    if worker is not None:
        worker.add_processing_hook(SetCurrentTenantForJob(grove))
        worker.add_finished_hook(ForgetTenantsAfterJob(grove))
