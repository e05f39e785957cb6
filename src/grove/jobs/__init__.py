"""Tenant-aware background jobs.

Provides a Redis-backed job queue and worker whose jobs carry the tenants
that were current when they were submitted.

Example:
    from grove.jobs import JobQueue, JobWorker, bind_job_tenancy

    queue = JobQueue()
    worker = JobWorker(queue=queue)
    bind_job_tenancy(grove, queue, worker)

    # In a request where tenant "acme" is current
    await queue.submit("send_invoice", {"invoice_id": 42})

    # In the worker, the handler runs with "acme" loaded again
    await worker.run()
"""

from grove.jobs.queue import (
    DEFAULT_JOB_TTL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_RESULT_TTL,
    Job,
    JobQueue,
    JobStatus,
)
from grove.jobs.tenancy import (
    CONTEXT_KEY,
    CaptureTenantsForJob,
    ForgetTenantsAfterJob,
    SetCurrentTenantForJob,
    bind_job_tenancy,
    capture_tenant_context,
)
from grove.jobs.worker import JobHandler, JobWorker, WorkerConfig

__all__ = [
    # Queue
    "Job",
    "JobQueue",
    "JobStatus",
    "DEFAULT_JOB_TTL",
    "DEFAULT_RESULT_TTL",
    "DEFAULT_MAX_RETRIES",
    # Worker
    "JobWorker",
    "JobHandler",
    "WorkerConfig",
    # Tenant context
    "CONTEXT_KEY",
    "capture_tenant_context",
    "CaptureTenantsForJob",
    "SetCurrentTenantForJob",
    "ForgetTenantsAfterJob",
    "bind_job_tenancy",
]
