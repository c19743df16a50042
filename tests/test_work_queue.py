"""Tests for the in-memory work queue scheduler and its stealing."""

import pytest

from core.work_queue import InMemoryWorkQueue


def _drain_callback(seen):
    """Callback that seeds once on rank 0, then processes one item per call."""
    state = {"seeded": False}

    def cb(handle):
        item = handle.dequeue()
        if item is None:
            if handle.rank == 0 and not state["seeded"]:
                state["seeded"] = True
                for i in range(9):
                    handle.enqueue(f"item-{i}")
                return True
            return False
        seen.append((handle.rank, item))
        return True

    return cb


class TestLifecycle:
    def test_run_requires_initialize(self):
        q = InMemoryWorkQueue()
        q.register_callback(lambda h: False)
        with pytest.raises(RuntimeError):
            q.run()

    def test_run_requires_callback(self):
        q = InMemoryWorkQueue()
        q.initialize()
        with pytest.raises(RuntimeError):
            q.run()

    def test_initialize_returns_local_rank(self):
        assert InMemoryWorkQueue(ranks=3).initialize(["--ignored"]) == 0

    def test_idle_callback_ends_after_one_round(self):
        q = InMemoryWorkQueue(ranks=2)
        q.initialize()
        q.register_callback(lambda h: False)
        q.run()
        assert q.invocations == 2
        q.finalize()
        q.finalize()

    def test_finalize_refuses_leftovers(self):
        q = InMemoryWorkQueue()
        q.handle(0).enqueue("left")
        with pytest.raises(RuntimeError):
            q.finalize()

    def test_rejects_empty_items(self):
        with pytest.raises(ValueError):
            InMemoryWorkQueue().handle(0).enqueue("")


class TestScheduling:
    def test_single_rank_processes_everything_once(self):
        seen = []
        q = InMemoryWorkQueue()
        q.initialize()
        q.register_callback(_drain_callback(seen))
        q.run()
        assert [item for _, item in seen] == [f"item-{i}" for i in range(9)]
        assert q.pending() == 0

    def test_idle_ranks_steal_from_busy_peer(self):
        seen = []
        q = InMemoryWorkQueue(ranks=3)
        q.initialize()
        q.register_callback(_drain_callback(seen))
        q.run()

        items = [item for _, item in seen]
        assert sorted(items) == sorted(f"item-{i}" for i in range(9))
        assert len(set(items)) == 9
        assert {rank for rank, _ in seen} == {0, 1, 2}
        assert q.steals >= 1

    def test_steal_takes_half_from_tail(self):
        q = InMemoryWorkQueue(ranks=2)
        for i in range(5):
            q.handle(0).enqueue(str(i))
        assert q.handle(1).dequeue() == "2"
        assert q.handle(0).dequeue() == "0"
        assert q.handle(0).dequeue() == "1"
        assert q.handle(1).dequeue() == "3"

    def test_dequeue_with_nothing_anywhere(self):
        assert InMemoryWorkQueue(ranks=2).handle(1).dequeue() is None
