# core/entities.py
import time
from dataclasses import dataclass, field
from typing import Callable, Optional
from redis import Redis
from config.cache import close_redis
from config.settings import Settings
from model.stats import RunStats


@dataclass(frozen=True)
class ReaperPolicy:
    """
    Per-run knobs. retention_seconds may be zero or negative (tests use that
    to make everything eligible); delete_enabled gates the actual unlink.
    """

    index_key: str
    batch_size: int = 10
    retention_seconds: int = 6 * 24 * 60 * 60
    delete_enabled: bool = False

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")

    @classmethod
    def from_settings(cls, s: Settings) -> "ReaperPolicy":
        return cls(
            index_key=s.INDEX_KEY,
            batch_size=s.BATCH_SIZE,
            retention_seconds=s.RETENTION_SECONDS,
            delete_enabled=s.DELETE_ENABLED,
        )


@dataclass
class WorkerContext:
    """
    Everything one worker process needs, built once at startup and passed
    explicitly to every component. Closing it releases the Redis client.
    """

    client: Redis
    policy: ReaperPolicy
    rank: int = 0
    clock: Callable[[], float] = time.time
    stats: RunStats = field(default_factory=RunStats)
    _closed: bool = field(default=False, init=False, repr=False)

    def now(self) -> int:
        return int(self.clock())

    def close(self) -> None:
        if not self._closed:
            close_redis(self.client)
            self._closed = True

    def __enter__(self) -> "WorkerContext":
        return self

    def __exit__(self, *exc: object) -> Optional[bool]:
        self.close()
        return None
