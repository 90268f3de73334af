"""
Worker Node Resource Accounting for batchsched

A ``WorkerNode`` is the resource ledger for one machine: it owns the
available-core and available-memory counters and the set of jobs holding
resources on it. ``NodePool`` is the fixed, ordered collection of nodes a
scheduler owns.
"""

import threading
from typing import Any, Dict, Iterator, List

from ..errors import ResourceError, SchedulingError
from ..types import Job, UtilizationRow


class WorkerNode:
    """Resource ledger for a single worker node."""

    def __init__(self, node_id: int, total_cores: int = 24, total_memory: int = 64):
        if total_cores <= 0:
            raise ValueError("total_cores must be positive")
        if total_memory <= 0:
            raise ValueError("total_memory must be positive")

        self.node_id = node_id
        self.total_cores = total_cores
        self.total_memory = total_memory  # in GB
        self.available_cores = total_cores
        self.available_memory = total_memory

        self._jobs: Dict[Any, Job] = {}
        # Guards check-and-mutate on the counters
        self._lock = threading.Lock()

    def can_fit(self, job: Job) -> bool:
        """Check if the node currently has room for a job."""
        return (self.available_cores >= job.cores_required and
                self.available_memory >= job.memory_required)

    def allocate(self, job: Job) -> bool:
        """
        Reserve a job's cores and memory on this node.

        The capacity check and the subtraction happen under one lock, so two
        callers can never both pass the check against the same residual
        capacity.

        Returns:
            True if the resources were reserved, False if the node lacks room
            (in which case nothing changes).

        Raises:
            SchedulingError: if the job already holds resources on this node.
        """
        with self._lock:
            if job.job_id in self._jobs:
                raise SchedulingError("job already allocated", job_ids=[job.job_id],
                                      node_id=self.node_id)

            if not self.can_fit(job):
                return False

            self.available_cores -= job.cores_required
            self.available_memory -= job.memory_required
            self._jobs[job.job_id] = job
            return True

    def release(self, job: Job):
        """Return the cores and memory recorded for a job to the node."""
        with self._lock:
            held = self._jobs.pop(job.job_id, None)
            if held is None:
                raise ResourceError("node", f"job {job.job_id} holds no resources here",
                                    node_id=self.node_id)

            self.available_cores += held.cores_required
            self.available_memory += held.memory_required

    @property
    def allocated_jobs(self) -> List[Job]:
        """Jobs currently holding resources on this node, in allocation order."""
        return list(self._jobs.values())

    @property
    def used_cores(self) -> int:
        return self.total_cores - self.available_cores

    @property
    def used_memory(self) -> int:
        return self.total_memory - self.available_memory

    def cpu_utilization_pct(self) -> float:
        return 100.0 * (1.0 - self.available_cores / self.total_cores)

    def memory_utilization_pct(self) -> float:
        return 100.0 * (1.0 - self.available_memory / self.total_memory)

    def utilization(self) -> UtilizationRow:
        return UtilizationRow(
            node_id=self.node_id,
            cpu_utilization_pct=self.cpu_utilization_pct(),
            memory_utilization_pct=self.memory_utilization_pct(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "total_cores": self.total_cores,
            "total_memory": self.total_memory,
            "available_cores": self.available_cores,
            "available_memory": self.available_memory,
            "jobs": [job.job_id for job in self._jobs.values()],
        }

    def __repr__(self) -> str:
        return (f"WorkerNode(id={self.node_id}, cores={self.available_cores}/{self.total_cores}, "
                f"memory={self.available_memory}/{self.total_memory})")


class NodePool:
    """Fixed, ordered collection of worker nodes (ids 0..n-1)."""

    def __init__(self, num_nodes: int, cores_per_node: int = 24, memory_per_node: int = 64):
        if num_nodes <= 0:
            raise ValueError("num_nodes must be positive")

        self._nodes: List[WorkerNode] = [
            WorkerNode(node_id=i, total_cores=cores_per_node, total_memory=memory_per_node)
            for i in range(num_nodes)
        ]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[WorkerNode]:
        return iter(self._nodes)

    def __getitem__(self, node_id: int) -> WorkerNode:
        return self._nodes[node_id]

    def utilization(self) -> List[UtilizationRow]:
        """Utilization rows for every node, in id order."""
        return [node.utilization() for node in self._nodes]

    def totals(self) -> Dict[str, float]:
        """Cluster-wide capacity and utilization."""
        total_cores = sum(n.total_cores for n in self._nodes)
        total_memory = sum(n.total_memory for n in self._nodes)
        used_cores = sum(n.used_cores for n in self._nodes)
        used_memory = sum(n.used_memory for n in self._nodes)

        return {
            "total_cores": total_cores,
            "total_memory": total_memory,
            "used_cores": used_cores,
            "used_memory": used_memory,
            "cpu_utilization_pct": 100.0 * used_cores / total_cores,
            "memory_utilization_pct": 100.0 * used_memory / total_memory,
            "busy_nodes": sum(1 for n in self._nodes if n.used_cores or n.used_memory),
        }
