"""
Ordering Policies for batchsched

A policy decides the order in which queued jobs are offered to placement.
Policies are plain data: a name plus a key function. ``PolicyQueue`` is the
one queue implementation every policy shares; it pops jobs in ascending key
order and falls back to submission order on ties.
"""

import heapq
import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Tuple

from ..types import Job


@dataclass(frozen=True)
class OrderingPolicy:
    """A named rule for ordering a batch of jobs."""

    name: str
    key: Callable[[Job], Any]
    description: str = ""

    def __str__(self) -> str:
        return self.name


FCFS = OrderingPolicy(
    name="fcfs",
    key=lambda job: 0,
    description="First-come-first-served: submission order",
)

SMALLEST_FOOTPRINT_FIRST = OrderingPolicy(
    name="smallest",
    key=lambda job: job.footprint,
    description="Smallest exec_time * cores * memory first",
)

SHORTEST_DURATION_FIRST = OrderingPolicy(
    name="shortest",
    key=lambda job: job.exec_time,
    description="Shortest exec_time first",
)

POLICIES: Dict[str, OrderingPolicy] = {
    p.name: p for p in (FCFS, SMALLEST_FOOTPRINT_FIRST, SHORTEST_DURATION_FIRST)
}

_ALIASES = {
    "fifo": "fcfs",
    "first_come_first_served": "fcfs",
    "smallest_footprint_first": "smallest",
    "smallest_job_first": "smallest",
    "shortest_duration_first": "shortest",
    "sdf": "shortest",
}


class PolicyQueue:
    """Priority queue of jobs ordered by a policy's key."""

    def __init__(self, policy: OrderingPolicy):
        self.policy = policy
        self._heap: List[Tuple[Any, int, Job]] = []
        # Submission sequence; breaks key ties and keeps Jobs out of comparisons
        self._counter = itertools.count()

    def push(self, job: Job):
        heapq.heappush(self._heap, (self.policy.key(job), next(self._counter), job))

    def pop(self) -> Job:
        """Remove and return the next job. Raises IndexError when empty."""
        if not self._heap:
            raise IndexError(f"pop from empty {self.policy.name} queue")
        return heapq.heappop(self._heap)[2]

    def peek(self) -> Job:
        if not self._heap:
            raise IndexError(f"peek at empty {self.policy.name} queue")
        return self._heap[0][2]

    def drain(self) -> Iterator[Job]:
        """Pop jobs one by one until the queue is empty."""
        while self._heap:
            yield self.pop()

    def snapshot(self) -> List[Job]:
        """Jobs in the order they would be popped, without popping them."""
        return [entry[2] for entry in sorted(self._heap)]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __repr__(self) -> str:
        return f"PolicyQueue(policy={self.policy.name}, size={len(self._heap)})"


def get_policy(policy) -> OrderingPolicy:
    """Resolve a policy name (or alias) to an OrderingPolicy."""
    if isinstance(policy, OrderingPolicy):
        return policy

    name = str(policy).lower().strip().replace("-", "_")
    name = _ALIASES.get(name, name)
    if name not in POLICIES:
        raise ValueError(f"Unknown ordering policy: {policy}")
    return POLICIES[name]
