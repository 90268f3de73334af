"""Tests for the batch scheduler."""

import pytest

from batchsched.config import ClusterConfig, SchedulerConfig
from batchsched.errors import ConfigurationError, SchedulingError
from batchsched.scheduler import BatchScheduler
from batchsched.types import AllocationEvent, FailureEvent, Job, JobStatus


def _job(job_id, cores, memory, hours=1):
    return Job.create(job_id, 0, cores=cores, memory_gb=memory, exec_hours=hours)


class TestConstruction:
    def test_defaults_from_config(self):
        scheduler = BatchScheduler()
        assert len(scheduler.pool) == 128
        assert scheduler.pool[0].total_cores == 24
        assert scheduler.pool[0].total_memory == 64
        assert scheduler.placement.name == "first_fit"

    def test_explicit_shape(self):
        scheduler = BatchScheduler(num_nodes=2, cores_per_node=10, memory_per_node=20)
        assert len(scheduler.pool) == 2
        assert scheduler.pool[1].total_memory == 20

    def test_shape_from_custom_config(self):
        config = SchedulerConfig(cluster=ClusterConfig(num_nodes=3, cores_per_node=6))
        scheduler = BatchScheduler(config=config)
        assert len(scheduler.pool) == 3
        assert scheduler.pool[2].total_cores == 6

    def test_invalid_shape(self):
        with pytest.raises(ConfigurationError, match="num_nodes"):
            BatchScheduler(num_nodes=0)


class TestSubmit:
    def test_routes_to_one_queue(self, small_scheduler, sample_job):
        small_scheduler.submit(sample_job, "smallest")
        assert small_scheduler.queue_size("smallest") == 1
        assert small_scheduler.queue_size("fcfs") == 0
        assert small_scheduler.queue_size("shortest") == 0

    def test_default_policy_is_fcfs(self, small_scheduler, sample_job):
        small_scheduler.submit(sample_job)
        assert small_scheduler.queue_size("fcfs") == 1

    def test_duplicate_id_rejected(self, small_scheduler):
        small_scheduler.submit(_job(1, 1, 1), "fcfs")
        with pytest.raises(SchedulingError, match="already submitted"):
            small_scheduler.submit(_job(1, 2, 2), "shortest")

    def test_submit_many_and_queued_jobs(self, small_scheduler, duration_jobs):
        small_scheduler.submit_many(duration_jobs, "shortest")
        queued = small_scheduler.queued_jobs("shortest")
        assert [j.exec_time for j in queued] == [1, 2, 3, 5, 6]
        assert small_scheduler.queue_size("shortest") == 5

    def test_unknown_policy(self, small_scheduler, sample_job):
        with pytest.raises(ValueError):
            small_scheduler.submit(sample_job, "lottery")


class TestRunPass:
    def test_empty_queue_is_noop(self, small_scheduler):
        result = small_scheduler.run_pass("fcfs")
        assert result.is_empty
        assert small_scheduler.pending_jobs == []
        assert small_scheduler.events == []

    def test_fcfs_offers_in_submission_order(self, small_scheduler):
        for job_id in ("J1", "J2", "J3"):
            small_scheduler.submit(_job(job_id, 1, 1), "fcfs")
        result = small_scheduler.run_pass("fcfs")
        assert result.order == ["J1", "J2", "J3"]

    def test_fcfs_ignores_arrival_time(self, small_scheduler):
        for job_id, arrival in (("late", 50), ("early", 1), ("middle", 10)):
            small_scheduler.submit(Job.create(job_id, arrival, cores=1, memory_gb=1,
                                              exec_hours=1), "fcfs")
        result = small_scheduler.run_pass("fcfs")
        assert result.order == ["late", "early", "middle"]
        assert len(result.allocations) == 3

    def test_future_arrival_still_scheduled(self, small_scheduler):
        job = Job.create("future", 10_000, cores=1, memory_gb=1, exec_hours=1)
        small_scheduler.submit(job, "shortest")
        small_scheduler.run_pass("shortest")
        assert job.status == JobStatus.ALLOCATED

    def test_smallest_footprint_order(self, small_scheduler, footprint_jobs):
        for job in footprint_jobs:
            small_scheduler.submit(job, "smallest")
        result = small_scheduler.run_pass("smallest")
        assert result.order == ["small", "medium", "big"]

    def test_shortest_duration_order(self, small_scheduler, duration_jobs):
        for job in duration_jobs:
            small_scheduler.submit(job, "shortest")
        result = small_scheduler.run_pass("shortest")
        assert result.order == ["d1", "d2", "d3", "d5", "d6"]

    def test_pass_drains_only_its_queue(self, small_scheduler):
        small_scheduler.submit(_job(1, 1, 1), "fcfs")
        small_scheduler.submit(_job(2, 1, 1), "shortest")
        result = small_scheduler.run_pass("fcfs")
        assert result.order == [1]
        assert small_scheduler.queue_size("shortest") == 1

    def test_pending_accumulation(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        scheduler.submit(_job("first", 8, 8), "fcfs")
        scheduler.submit(_job("second", 8, 8), "fcfs")

        result = scheduler.run_pass("fcfs")

        assert [e.job_id for e in result.allocations] == ["first"]
        assert [e.job_id for e in result.failures] == ["second"]
        assert [j.job_id for j in scheduler.pending_jobs] == ["second"]
        assert scheduler.pool[0].available_cores == 2
        assert scheduler.pool[0].available_memory == 2

    def test_job_status_and_node_recorded(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        fits, too_big = _job("a", 4, 4), _job("b", 20, 1)
        scheduler.submit(fits)
        scheduler.submit(too_big)
        scheduler.run_pass("fcfs")

        assert fits.status == JobStatus.ALLOCATED
        assert fits.node_id == 0
        assert too_big.status == JobStatus.PENDING
        assert too_big.node_id is None
        assert scheduler.allocations == {"a": 0}

    def test_pending_job_is_unmodified(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=4, memory_per_node=4)
        job = _job("huge", 8, 8, hours=3)
        scheduler.submit(job)
        scheduler.run_pass("fcfs")
        pending = scheduler.pending_jobs[0]
        assert pending is job
        assert (pending.cores_required, pending.memory_required, pending.exec_time) == (8, 8, 3)

    def test_pending_not_retried_in_same_pass(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        scheduler.submit(_job(1, 10, 10))
        scheduler.submit(_job(2, 1, 1))
        result = scheduler.run_pass("fcfs")
        assert result.order == [1, 2]
        assert scheduler.queue_size("fcfs") == 0

    def test_conservation_after_pass(self, small_scheduler):
        for i in range(20):
            small_scheduler.submit(_job(i, 3 + i % 5, 7 + i % 11), "smallest")
        small_scheduler.run_pass("smallest")

        allocated = set()
        for node in small_scheduler.pool:
            held = node.allocated_jobs
            assert node.available_cores + sum(j.cores_required for j in held) == node.total_cores
            assert node.available_memory + sum(j.memory_required for j in held) == node.total_memory
            ids = {j.job_id for j in held}
            assert not ids & allocated
            allocated |= ids

        pending = {j.job_id for j in small_scheduler.pending_jobs}
        assert allocated | pending == set(range(20))
        assert not allocated & pending


class TestMultiplePasses:
    def test_later_pass_sees_depleted_pool(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=24, memory_per_node=64)
        scheduler.submit(_job("fcfs-job", 20, 48), "fcfs")
        scheduler.submit(_job("sdf-job", 10, 10), "shortest")

        first, second = scheduler.run_all(["fcfs", "shortest"])
        assert first.order == ["fcfs-job"]
        assert second.failures[0].job_id == "sdf-job"
        assert [j.job_id for j in scheduler.pending_jobs] == ["sdf-job"]

    def test_pending_accumulates_across_passes(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=4, memory_per_node=4)
        scheduler.submit(_job("a", 5, 1), "fcfs")
        scheduler.submit(_job("b", 5, 1), "smallest")
        scheduler.submit(_job("c", 5, 1), "shortest")
        scheduler.run_all()
        assert [j.job_id for j in scheduler.pending_jobs] == ["a", "b", "c"]

    def test_run_all_uses_configured_order(self, small_scheduler):
        results = small_scheduler.run_all()
        assert [r.policy for r in results] == ["fcfs", "smallest", "shortest"]


class TestRequeuePending:
    def test_requeue_moves_pending(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        first = _job("first", 8, 8)
        scheduler.submit(first)
        scheduler.submit(_job("second", 8, 8))
        scheduler.run_pass("fcfs")

        assert scheduler.requeue_pending("shortest") == 1
        assert scheduler.pending_jobs == []
        assert scheduler.queue_size("shortest") == 1

        scheduler.release("first")
        result = scheduler.run_pass("shortest")
        assert [e.job_id for e in result.allocations] == ["second"]

    def test_requeue_nothing(self, small_scheduler):
        assert small_scheduler.requeue_pending() == 0


class TestRelease:
    def test_release_frees_node(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        job = _job(1, 6, 6)
        scheduler.submit(job)
        scheduler.run_pass("fcfs")

        released = scheduler.release(1)
        assert released is job
        assert job.completed is True
        assert job.status == JobStatus.COMPLETED
        assert scheduler.pool[0].available_cores == 10
        assert scheduler.allocations == {}

    def test_release_unallocated_job(self, small_scheduler):
        with pytest.raises(SchedulingError, match="not allocated"):
            small_scheduler.release("ghost")


class TestEvents:
    def test_listener_receives_events(self):
        scheduler = BatchScheduler(num_nodes=1, cores_per_node=10, memory_per_node=10)
        received = []
        scheduler.add_listener(received.append)
        scheduler.submit(_job(1, 8, 8))
        scheduler.submit(_job(2, 8, 8))
        scheduler.run_pass("fcfs")

        assert received == [
            AllocationEvent(job_id=1, node_id=0, policy="fcfs"),
            FailureEvent(job_id=2, policy="fcfs"),
        ]
        assert scheduler.events == received


class TestReporting:
    def test_one_row_per_node_in_order(self, small_scheduler):
        rows = small_scheduler.utilization_report()
        assert [r.node_id for r in rows] == [0, 1, 2, 3]
        assert all(r.is_idle for r in rows)

    def test_half_used_node(self):
        scheduler = BatchScheduler(num_nodes=2, cores_per_node=24, memory_per_node=64)
        scheduler.submit(_job(1, 12, 64))
        scheduler.run_pass("fcfs")
        rows = scheduler.utilization_report()
        assert rows[0].cpu_utilization_pct == pytest.approx(50.0)
        assert rows[0].memory_utilization_pct == pytest.approx(100.0)
        assert rows[1].is_idle

    def test_report_is_idempotent(self, small_scheduler, footprint_jobs):
        for job in footprint_jobs:
            small_scheduler.submit(job, "smallest")
        small_scheduler.run_all()
        assert small_scheduler.utilization_report() == small_scheduler.utilization_report()

    def test_summary(self):
        scheduler = BatchScheduler(num_nodes=2, cores_per_node=10, memory_per_node=10)
        scheduler.submit(_job(1, 10, 10))
        scheduler.submit(_job(2, 20, 1))
        scheduler.submit(_job(3, 1, 1), "shortest")
        scheduler.run_pass("fcfs")

        summary = scheduler.summary()
        assert summary["nodes"] == 2
        assert summary["allocated_jobs"] == 1
        assert summary["pending_jobs"] == 1
        assert summary["queued_jobs"]["shortest"] == 1
        assert summary["cpu_utilization_pct"] == pytest.approx(50.0)
