# core/work_queue.py
"""
Work queue seam.

A rank's processing callback only ever sees a QueueHandle. The scheduler that
decides when to call it, and how items move between ranks, sits behind
WorkQueue. InMemoryWorkQueue drives one or more simulated ranks inside the
current process; a real deployment can plug in any distributed implementation
that honours the same contract.
"""
import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Deque, List, Optional, Sequence

logger = logging.getLogger(__name__)


class QueueHandle(ABC):
    """What a processing callback may do with its rank's queue."""

    rank: int

    @abstractmethod
    def enqueue(self, item: str) -> None:
        """Make item visible for local dequeue and for stealing by peers."""

    @abstractmethod
    def dequeue(self) -> Optional[str]:
        """
        Remove one item, rebalancing from peers when the local queue is empty.
        None means nothing is reachable from this rank right now, which is
        not the same as the whole run being finished.
        """


# Return value tells the scheduler whether the invocation made progress
# (or wants to be called again); falsy means "idle".
ProcessCallback = Callable[[QueueHandle], bool]


class WorkQueue(ABC):
    @abstractmethod
    def initialize(self, args: Sequence[str] = ()) -> int:
        """Join the run; returns the local rank."""

    @abstractmethod
    def register_callback(self, cb: ProcessCallback) -> None: ...

    @abstractmethod
    def run(self) -> None:
        """Block until every rank's queue is empty and nobody makes progress."""

    @abstractmethod
    def finalize(self) -> None: ...


class _RankHandle(QueueHandle):
    def __init__(self, owner: "InMemoryWorkQueue", rank: int) -> None:
        self._owner = owner
        self.rank = rank
        self.items: Deque[str] = deque()

    def enqueue(self, item: str) -> None:
        if not isinstance(item, str) or not item:
            raise ValueError("work items must be non-empty strings")
        self.items.append(item)

    def dequeue(self) -> Optional[str]:
        if not self.items:
            self._owner._steal_into(self)
        if not self.items:
            return None
        return self.items.popleft()


class InMemoryWorkQueue(WorkQueue):
    """
    `ranks` cooperating ranks scheduled round-robin in this process.

    Stealing: an empty rank takes ceil(n/2) items from the tail of the fullest
    peer. Termination: all queues empty and one full round in which no
    callback reported progress.
    """

    def __init__(self, ranks: int = 1) -> None:
        if ranks < 1:
            raise ValueError(f"ranks must be >= 1, got {ranks}")
        self._handles: List[_RankHandle] = [_RankHandle(self, r) for r in range(ranks)]
        self._callback: Optional[ProcessCallback] = None
        self._initialized = False
        self._finalized = False
        self.invocations = 0
        self.steals = 0

    @property
    def size(self) -> int:
        return len(self._handles)

    def handle(self, rank: int = 0) -> QueueHandle:
        return self._handles[rank]

    def pending(self) -> int:
        return sum(len(h.items) for h in self._handles)

    def initialize(self, args: Sequence[str] = ()) -> int:
        if args:
            logger.debug("queue.init ignoring args=%s", list(args))
        self._initialized = True
        logger.debug("queue.init ranks=%d", self.size)
        return 0

    def register_callback(self, cb: ProcessCallback) -> None:
        self._callback = cb

    def run(self) -> None:
        if not self._initialized:
            raise RuntimeError("initialize() must be called before run()")
        if self._callback is None:
            raise RuntimeError("no processing callback registered")

        while True:
            progressed = False
            for h in self._handles:
                self.invocations += 1
                if self._callback(h):
                    progressed = True
            if not progressed and self.pending() == 0:
                break
        logger.debug(
            "queue.drained invocations=%d steals=%d", self.invocations, self.steals
        )

    def finalize(self) -> None:
        if self._finalized:
            return
        left = self.pending()
        if left:
            raise RuntimeError(f"finalize() with {left} items still queued")
        self._finalized = True

    def _steal_into(self, thief: _RankHandle) -> None:
        victim = max(self._handles, key=lambda h: len(h.items))
        if victim is thief or not victim.items:
            return
        take = (len(victim.items) + 1) // 2
        moved = [victim.items.pop() for _ in range(take)]
        # keep the stolen run in its original order
        thief.items.extend(reversed(moved))
        self.steals += 1
        logger.debug(
            "queue.steal from=%d to=%d count=%d", victim.rank, thief.rank, take
        )
