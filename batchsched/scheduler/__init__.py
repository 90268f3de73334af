"""
Scheduler Components for batchsched

This package contains the allocation engine: worker node resource ledgers,
job ordering policies, placement strategies, and the batch scheduler that
drives scheduling passes.
"""

from .core import BatchScheduler
from .node import NodePool, WorkerNode
from .placement import FirstFitPlacement, PlacementStrategy, get_placement_strategy
from .policies import (
    FCFS,
    SHORTEST_DURATION_FIRST,
    SMALLEST_FOOTPRINT_FIRST,
    OrderingPolicy,
    PolicyQueue,
    get_policy,
)

__all__ = [
    "BatchScheduler",
    "WorkerNode",
    "NodePool",
    "OrderingPolicy",
    "PolicyQueue",
    "FCFS",
    "SMALLEST_FOOTPRINT_FIRST",
    "SHORTEST_DURATION_FIRST",
    "get_policy",
    "PlacementStrategy",
    "FirstFitPlacement",
    "get_placement_strategy",
]
