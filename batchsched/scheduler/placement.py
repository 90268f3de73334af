"""
Job Placement Components for batchsched

A placement strategy picks the node a job lands on. Strategies commit the
allocation themselves through ``WorkerNode.allocate`` so the capacity check
and the reservation stay one step.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from ..logging import get_logger
from ..types import Job
from .node import WorkerNode


class PlacementStrategy(ABC):
    """Abstract base class for placement strategies."""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"batchsched.scheduler.placement.{name}")

    @abstractmethod
    def try_place(self, job: Job, nodes: Iterable[WorkerNode]) -> Optional[int]:
        """
        Allocate a job on one of the nodes.

        Args:
            job: Job to place
            nodes: Candidate nodes in scan order

        Returns:
            The id of the node now holding the job, or None if no node had room
        """
        pass


class FirstFitPlacement(PlacementStrategy):
    """
    First-fit placement.

    Scans nodes in id order and stops at the first one that accepts the job.
    O(nodes) per job; no backtracking and no search for a tighter fit.
    """

    def __init__(self):
        super().__init__("first_fit")

    def try_place(self, job: Job, nodes: Iterable[WorkerNode]) -> Optional[int]:
        for node in nodes:
            if node.allocate(job):
                return node.node_id

        self.logger.debug("No node can hold job",
                          job_id=job.job_id,
                          cores_required=job.cores_required,
                          memory_required=job.memory_required)
        return None


def get_placement_strategy(strategy_type: str = "first_fit") -> PlacementStrategy:
    """Get a placement strategy instance by type."""
    if strategy_type in ("first_fit", "first-fit"):
        return FirstFitPlacement()
    else:
        raise ValueError(f"Unknown placement strategy: {strategy_type}")
