"""
Batch Scheduler for batchsched

``BatchScheduler`` owns a node pool, one queue per ordering policy and the
pending list. A scheduling pass drains one policy's queue against the
shared pool: each job is either allocated on a node or set aside as
pending. The pool's residual capacity carries over from one pass to the
next, and the pending list accumulates across passes.
"""

import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config import SchedulerConfig, get_config
from ..errors import SchedulingError, raise_configuration_error
from ..logging import get_logger, trace_operation
from ..types import (
    AllocationEvent,
    FailureEvent,
    Job,
    JobStatus,
    PassResult,
    SchedulingEvent,
    UtilizationRow,
)
from .node import NodePool
from .placement import PlacementStrategy, get_placement_strategy
from .policies import POLICIES, OrderingPolicy, PolicyQueue, get_policy

logger = get_logger(__name__)

EventListener = Callable[[SchedulingEvent], None]


class BatchScheduler:
    """
    Assigns queued jobs to worker nodes, one policy pass at a time.

    Passes are synchronous and never interleave. Jobs that fit nowhere are
    appended to ``pending_jobs`` and are not retried unless the caller
    hands them back with ``requeue_pending``.
    """

    def __init__(self, num_nodes: Optional[int] = None,
                 cores_per_node: Optional[int] = None,
                 memory_per_node: Optional[int] = None,
                 placement: Optional[PlacementStrategy] = None,
                 config: Optional[SchedulerConfig] = None):
        self.config = config or get_config()
        cluster = self.config.cluster

        num_nodes = cluster.num_nodes if num_nodes is None else num_nodes
        cores_per_node = cluster.cores_per_node if cores_per_node is None else cores_per_node
        memory_per_node = (cluster.memory_per_node_gb if memory_per_node is None
                           else memory_per_node)

        for field_name, value in (("num_nodes", num_nodes),
                                  ("cores_per_node", cores_per_node),
                                  ("memory_per_node_gb", memory_per_node)):
            if value <= 0:
                raise_configuration_error(field_name, value, "positive integer")

        self.pool = NodePool(num_nodes, cores_per_node, memory_per_node)
        self.placement = placement or get_placement_strategy(self.config.placement_strategy)

        self._queues: Dict[str, PolicyQueue] = {
            name: PolicyQueue(policy) for name, policy in POLICIES.items()
        }
        self._pending: List[Job] = []
        self._allocations: Dict[Any, int] = {}
        self._known_jobs: Dict[Any, Job] = {}
        self._events: List[SchedulingEvent] = []
        self._listeners: List[EventListener] = []
        self._pass_lock = threading.Lock()

        logger.info("Scheduler initialized",
                    num_nodes=num_nodes,
                    cores_per_node=cores_per_node,
                    memory_per_node=memory_per_node,
                    placement=self.placement.name)

    # Submission

    def submit(self, job: Job, policy="fcfs"):
        """Route a job to the queue of exactly one policy."""
        ordering = get_policy(policy)

        if job.job_id in self._known_jobs:
            raise SchedulingError("job already submitted", job_ids=[job.job_id])

        job.status = JobStatus.QUEUED
        self._known_jobs[job.job_id] = job
        self._queues[ordering.name].push(job)
        logger.debug("Job submitted", job_id=job.job_id, policy=ordering.name)

    def submit_many(self, jobs: Iterable[Job], policy="fcfs"):
        for job in jobs:
            self.submit(job, policy)

    def requeue_pending(self, policy="fcfs") -> int:
        """Move every pending job into a policy queue. Returns the count moved."""
        ordering = get_policy(policy)
        moved = self._pending
        self._pending = []

        for job in moved:
            job.status = JobStatus.QUEUED
            self._queues[ordering.name].push(job)

        if moved:
            logger.info("Pending jobs re-queued", policy=ordering.name, count=len(moved))
        return len(moved)

    # Scheduling

    @trace_operation("scheduling_pass")
    def run_pass(self, policy) -> PassResult:
        """Drain one policy's queue against the node pool."""
        ordering = get_policy(policy)
        queue = self._queues[ordering.name]
        result = PassResult(policy=ordering.name)

        with self._pass_lock:
            logger.info("Scheduling pass started", policy=ordering.name, queued=len(queue))

            for job in queue.drain():
                result.events.append(self._place(job, ordering))

        logger.info("Scheduling pass finished",
                    policy=ordering.name,
                    allocated=len(result.allocations),
                    pending=len(result.failures))
        return result

    def run_all(self, order: Optional[Iterable] = None) -> List[PassResult]:
        """Run one pass per policy, in order, against the same pool."""
        order = self.config.policy_order if order is None else order
        return [self.run_pass(policy) for policy in order]

    def _place(self, job: Job, ordering: OrderingPolicy) -> SchedulingEvent:
        node_id = self.placement.try_place(job, self.pool)

        if node_id is not None:
            job.status = JobStatus.ALLOCATED
            job.node_id = node_id
            self._allocations[job.job_id] = node_id
            event = AllocationEvent(job_id=job.job_id, node_id=node_id, policy=ordering.name)
            logger.info("Job allocated", job_id=job.job_id, node_id=node_id,
                        policy=ordering.name)
        else:
            job.status = JobStatus.PENDING
            self._pending.append(job)
            event = FailureEvent(job_id=job.job_id, policy=ordering.name)
            logger.warning("Job could not be allocated", job_id=job.job_id,
                           policy=ordering.name,
                           cores_required=job.cores_required,
                           memory_required=job.memory_required)

        self._emit(event)
        return event

    # Events

    def add_listener(self, listener: EventListener):
        """Register a callback invoked with every allocation/failure event."""
        self._listeners.append(listener)

    def _emit(self, event: SchedulingEvent):
        self._events.append(event)
        for listener in self._listeners:
            listener(event)

    # Release

    def release(self, job_id: Any) -> Job:
        """Free the resources an allocated job holds and mark it completed."""
        node_id = self._allocations.get(job_id)
        if node_id is None:
            raise SchedulingError("job is not allocated", job_ids=[job_id])

        job = self._known_jobs[job_id]
        self.pool[node_id].release(job)
        del self._allocations[job_id]
        job.mark_completed()
        job.node_id = None

        logger.info("Job released", job_id=job_id, node_id=node_id)
        return job

    # Introspection

    @property
    def pending_jobs(self) -> List[Job]:
        return list(self._pending)

    @property
    def allocations(self) -> Dict[Any, int]:
        """job_id -> node_id for every job currently holding resources."""
        return dict(self._allocations)

    @property
    def events(self) -> List[SchedulingEvent]:
        return list(self._events)

    def queue_size(self, policy) -> int:
        return len(self._queues[get_policy(policy).name])

    def queued_jobs(self, policy) -> List[Job]:
        """Jobs waiting in a policy queue, in the order they would be offered."""
        return self._queues[get_policy(policy).name].snapshot()

    def utilization_report(self) -> List[UtilizationRow]:
        """One utilization row per node, in node id order."""
        return self.pool.utilization()

    def summary(self) -> Dict[str, Any]:
        totals = self.pool.totals()
        return {
            "nodes": len(self.pool),
            "allocated_jobs": len(self._allocations),
            "pending_jobs": len(self._pending),
            "queued_jobs": {name: len(q) for name, q in self._queues.items()},
            "busy_nodes": totals["busy_nodes"],
            "cpu_utilization_pct": totals["cpu_utilization_pct"],
            "memory_utilization_pct": totals["memory_utilization_pct"],
        }
