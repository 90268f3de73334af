"""
batchsched - a simplified cluster batch scheduler.

This package assigns resource-hungry jobs to a fixed pool of worker nodes
under three ordering policies (first-come-first-served, smallest footprint
first, shortest duration first) using first-fit placement, and reports
per-node CPU and memory utilization.
"""

from .config import SchedulerConfig
from .errors import (
    BatchSchedError,
    ConfigurationError,
    ResourceError,
    SchedulingError,
    WorkloadError,
)
from .scheduler import BatchScheduler, NodePool, WorkerNode
from .types import (
    AllocationEvent,
    FailureEvent,
    Job,
    JobStatus,
    PassResult,
    ResourceRequest,
    UtilizationRow,
)

__all__ = [
    "SchedulerConfig",
    "BatchScheduler",
    "WorkerNode",
    "NodePool",
    "Job",
    "JobStatus",
    "ResourceRequest",
    "AllocationEvent",
    "FailureEvent",
    "PassResult",
    "UtilizationRow",
    "BatchSchedError",
    "ConfigurationError",
    "SchedulingError",
    "ResourceError",
    "WorkloadError",
]
