"""
Error Definitions for batchsched

Scheduling outcomes (a job that fits nowhere, an empty queue) are ordinary
return values. The exceptions below are reserved for misuse of the API and
for bad input: duplicate submissions, releasing resources a node does not
hold, malformed workload files, and invalid configuration.
"""

from typing import Any, Dict, List, Optional


class BatchSchedError(Exception):
    """Base exception class for all batchsched errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ConfigurationError(BatchSchedError):
    """Raised when configuration is invalid or inconsistent."""

    def __init__(self, field: str, value: Any, expected: str, **details):
        message = f"Invalid configuration for {field}: got {value}, expected {expected}"

        super().__init__(message, {"field": field, "value": value, "expected": expected, **details})
        self.field = field
        self.value = value
        self.expected = expected


class SchedulingError(BatchSchedError):
    """Raised when the scheduler is asked to do something inconsistent."""

    def __init__(self, reason: str, job_ids: Optional[List[Any]] = None, **details):
        if job_ids:
            message = f"Scheduling failed for jobs {job_ids}: {reason}"
        else:
            message = f"Scheduling failed: {reason}"

        super().__init__(message, {"reason": reason, "job_ids": job_ids, **details})
        self.reason = reason
        self.job_ids = job_ids or []


class ResourceError(BatchSchedError):
    """Raised when a node's resource ledger would be violated."""

    def __init__(self, resource_type: str, reason: str, **details):
        message = f"Resource error ({resource_type}): {reason}"

        super().__init__(message, {"resource_type": resource_type, "reason": reason, **details})
        self.resource_type = resource_type
        self.reason = reason


class WorkloadError(BatchSchedError):
    """Raised when a workload file cannot be read or parsed."""

    def __init__(self, path: str, reason: str, **details):
        message = f"Invalid workload {path}: {reason}"

        super().__init__(message, {"path": path, "reason": reason, **details})
        self.path = path
        self.reason = reason


def raise_configuration_error(field: str, value: Any, expected: str, **details):
    """Raise a configuration error with helpful context."""
    suggestions = {
        "num_nodes": "Set BATCHSCHED_NUM_NODES to a positive integer",
        "cores_per_node": "Set BATCHSCHED_CORES_PER_NODE to a positive integer",
        "memory_per_node_gb": "Set BATCHSCHED_MEMORY_PER_NODE_GB to a positive integer",
        "policy_order": "Use a comma-separated subset of fcfs,smallest,shortest",
    }

    suggestion = suggestions.get(field.lower())
    if suggestion:
        details["suggestion"] = suggestion

    raise ConfigurationError(field, value, expected, **details)
