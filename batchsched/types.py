"""
Core Type Definitions for batchsched

This module defines the data types shared by the scheduler: jobs and their
resource demands, the events a scheduling pass emits, and the per-node
utilization rows handed to report sinks.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Union


class JobStatus(Enum):
    """Status of a job in the system."""

    QUEUED = auto()  # Submitted to a policy queue, not yet offered to placement
    ALLOCATED = auto()  # Holding resources on a node
    PENDING = auto()  # Failed placement and set aside
    COMPLETED = auto()  # Marked done by the caller


@dataclass(frozen=True)
class ResourceRequest:
    """Resources a job asks for. Immutable once created."""

    cores: int  # CPU cores
    memory_gb: int  # Memory in GB
    exec_hours: int  # Execution time in hours

    def __post_init__(self):
        """Validate resource demands."""
        if self.cores <= 0:
            raise ValueError("cores must be positive")

        if self.memory_gb <= 0:
            raise ValueError("memory_gb must be positive")

        if self.exec_hours <= 0:
            raise ValueError("exec_hours must be positive")

    @property
    def footprint(self) -> int:
        """Resource-weighted cost: exec_hours * cores * memory_gb."""
        return self.exec_hours * self.cores * self.memory_gb


@dataclass
class Job:
    """Represents a single unit of work and its resource demand."""

    job_id: Any
    requirements: ResourceRequest
    arrival_time: int = 0  # Informational; does not gate scheduling

    # Lifecycle state
    completed: bool = False
    status: JobStatus = JobStatus.QUEUED
    node_id: Optional[int] = None

    def __post_init__(self):
        """Validate job configuration."""
        if self.job_id is None or self.job_id == "":
            raise ValueError("job_id cannot be empty")

        if self.arrival_time < 0:
            raise ValueError("arrival_time cannot be negative")

    def __setattr__(self, name, value):
        # Demands are fixed once set
        if name == "requirements" and "requirements" in self.__dict__:
            raise AttributeError("requirements cannot be changed once set")
        super().__setattr__(name, value)

    @classmethod
    def create(cls, job_id: Any, arrival_time: int, cores: int,
               memory_gb: int, exec_hours: int) -> "Job":
        """Build a job from flat values."""
        return cls(
            job_id=job_id,
            arrival_time=arrival_time,
            requirements=ResourceRequest(cores=cores, memory_gb=memory_gb, exec_hours=exec_hours),
        )

    @property
    def cores_required(self) -> int:
        return self.requirements.cores

    @property
    def memory_required(self) -> int:
        return self.requirements.memory_gb

    @property
    def exec_time(self) -> int:
        return self.requirements.exec_hours

    @property
    def footprint(self) -> int:
        return self.requirements.footprint

    def mark_completed(self):
        """Flag the job as done. Resources are not released here."""
        self.completed = True
        self.status = JobStatus.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Convert job to dictionary representation."""
        return {
            "job_id": self.job_id,
            "arrival_time": self.arrival_time,
            "cores_required": self.cores_required,
            "memory_required": self.memory_required,
            "exec_time": self.exec_time,
            "footprint": self.footprint,
            "completed": self.completed,
            "status": self.status.name,
            "node_id": self.node_id,
        }


@dataclass(frozen=True)
class AllocationEvent:
    """A job was placed on a node."""

    job_id: Any
    node_id: int
    policy: str

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "allocated", "job_id": self.job_id, "node_id": self.node_id,
                "policy": self.policy}


@dataclass(frozen=True)
class FailureEvent:
    """No node could hold the job; it went to the pending list."""

    job_id: Any
    policy: str
    reason: str = "insufficient capacity"

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "failed", "job_id": self.job_id, "policy": self.policy,
                "reason": self.reason}


SchedulingEvent = Union[AllocationEvent, FailureEvent]


@dataclass
class PassResult:
    """Outcome of draining one policy queue."""

    policy: str
    events: List[SchedulingEvent] = field(default_factory=list)  # In offer order

    @property
    def allocations(self) -> List[AllocationEvent]:
        return [e for e in self.events if isinstance(e, AllocationEvent)]

    @property
    def failures(self) -> List[FailureEvent]:
        return [e for e in self.events if isinstance(e, FailureEvent)]

    @property
    def jobs_offered(self) -> int:
        return len(self.events)

    @property
    def is_empty(self) -> bool:
        """True when the queue had nothing to drain."""
        return not self.events

    @property
    def order(self) -> List[Any]:
        """Job ids in the order they were offered to placement."""
        return [e.job_id for e in self.events]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy,
            "jobs_offered": self.jobs_offered,
            "allocations": [e.to_dict() for e in self.allocations],
            "failures": [e.to_dict() for e in self.failures],
        }


@dataclass(frozen=True)
class UtilizationRow:
    """Per-node utilization handed to report sinks."""

    node_id: int
    cpu_utilization_pct: float
    memory_utilization_pct: float

    @property
    def is_idle(self) -> bool:
        return self.cpu_utilization_pct == 0.0 and self.memory_utilization_pct == 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "node_id": self.node_id,
            "cpu_utilization_pct": self.cpu_utilization_pct,
            "memory_utilization_pct": self.memory_utilization_pct,
        }
