"""Shared test fixtures for batchsched."""

import pytest
from batchsched.config import reset_config, get_config
from batchsched.scheduler import BatchScheduler
from batchsched.types import Job


@pytest.fixture(autouse=True)
def _reset_global_config(monkeypatch):
    """Reset global config and clear scheduler env overrides for all tests."""
    for var in ("BATCHSCHED_NUM_NODES", "BATCHSCHED_CORES_PER_NODE",
                "BATCHSCHED_MEMORY_PER_NODE_GB", "POLICY_ORDER", "PLACEMENT_STRATEGY",
                "REPORT_PATH", "REPORT_PRECISION", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE"):
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def config():
    """Return the default SchedulerConfig."""
    return get_config()


@pytest.fixture
def sample_job():
    """Return a simple sample job."""
    return Job.create(1, 1, cores=10, memory_gb=32, exec_hours=5)


@pytest.fixture
def footprint_jobs():
    """Jobs with footprints 1600, 240 and 480, in that submission order."""
    return [
        Job.create("big", 1, cores=10, memory_gb=32, exec_hours=5),
        Job.create("small", 2, cores=5, memory_gb=16, exec_hours=3),
        Job.create("medium", 3, cores=12, memory_gb=40, exec_hours=1),
    ]


@pytest.fixture
def duration_jobs():
    """Jobs with exec_time 5, 3, 2, 6, 1 in submission order."""
    return [
        Job.create(f"d{hours}", i, cores=1, memory_gb=1, exec_hours=hours)
        for i, hours in enumerate([5, 3, 2, 6, 1])
    ]


@pytest.fixture
def small_scheduler():
    """A scheduler with four default-sized nodes."""
    return BatchScheduler(num_nodes=4)
