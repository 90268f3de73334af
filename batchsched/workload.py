"""
Workload sources for batchsched.

Jobs reach the scheduler as ``(policy, Job)`` pairs. ``sample_workload``
returns the reference job list; ``load_workload`` reads the same shape
from a JSON file.
"""

import json
from pathlib import Path
from typing import List, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .errors import WorkloadError
from .scheduler.policies import get_policy
from .types import Job

Workload = List[Tuple[str, Job]]


class JobSpec(BaseModel):
    """One row of a workload file."""

    id: Union[int, str]
    arrival_time: int = Field(default=0, ge=0)
    cores_required: int = Field(gt=0)
    memory_required: int = Field(gt=0, description="GB")
    exec_time: int = Field(gt=0, description="hours")
    policy: str = "fcfs"

    @field_validator("id")
    @classmethod
    def validate_id(cls, v):
        if isinstance(v, str) and not v.strip():
            raise ValueError("id cannot be empty")
        return v

    @field_validator("policy")
    @classmethod
    def validate_policy(cls, v):
        return get_policy(v).name

    def to_job(self) -> Job:
        return Job.create(
            job_id=self.id,
            arrival_time=self.arrival_time,
            cores=self.cores_required,
            memory_gb=self.memory_required,
            exec_hours=self.exec_time,
        )


def sample_workload() -> Workload:
    """The five reference jobs and the queue each one is routed to."""
    return [
        ("fcfs", Job.create(1, 1, cores=10, memory_gb=32, exec_hours=5)),
        ("smallest", Job.create(2, 2, cores=5, memory_gb=16, exec_hours=3)),
        ("shortest", Job.create(3, 3, cores=20, memory_gb=48, exec_hours=2)),
        ("fcfs", Job.create(4, 4, cores=8, memory_gb=20, exec_hours=6)),
        ("smallest", Job.create(5, 5, cores=12, memory_gb=40, exec_hours=1)),
    ]


def load_workload(path) -> Workload:
    """
    Read a workload from a JSON file.

    Accepts either ``{"jobs": [...]}`` or a bare list of job objects with
    ``id``, ``arrival_time``, ``cores_required``, ``memory_required``,
    ``exec_time`` and an optional ``policy``.
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except OSError as e:
        raise WorkloadError(str(path), f"cannot read file: {e}")
    except json.JSONDecodeError as e:
        raise WorkloadError(str(path), f"invalid JSON: {e.msg}", line=e.lineno)

    rows = data.get("jobs") if isinstance(data, dict) else data
    if not isinstance(rows, list):
        raise WorkloadError(str(path), "expected a list of jobs or an object with 'jobs'")

    workload: Workload = []
    seen = set()
    for index, row in enumerate(rows):
        try:
            spec = JobSpec.model_validate(row)
        except ValidationError as e:
            raise WorkloadError(str(path), f"job #{index} is invalid",
                                errors=e.error_count(), first_error=e.errors()[0]["msg"])

        if spec.id in seen:
            raise WorkloadError(str(path), f"duplicate job id {spec.id}")
        seen.add(spec.id)
        workload.append((spec.policy, spec.to_job()))

    return workload


def submit_workload(scheduler, workload: Workload) -> int:
    """Submit every job of a workload to its queue. Returns the job count."""
    for policy, job in workload:
        scheduler.submit(job, policy)
    return len(workload)
