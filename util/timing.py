# util/timing.py
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional, Any
import logging


@dataclass
class RunClock:
    started_at: float
    finished_at: Optional[float] = None
    elapsed_ms: int = 0


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[RunClock]:
    """
    Usage:
      with timed(logger, "reaper.run", workers=4) as clock:
          ...
    Emits one INFO on exit, even when the body raises:
      "<name>.done ms=<int> started=<epoch> finished=<epoch> key=val ..."
    """
    clock = RunClock(started_at=time.time())
    t0 = time.perf_counter()
    try:
        yield clock
    finally:
        clock.elapsed_ms = int((time.perf_counter() - t0) * 1000)
        clock.finished_at = time.time()
        suffix = "".join(f" {k}={v}" for k, v in kv.items())
        logger.info(
            "%s.done ms=%d started=%d finished=%d%s",
            name,
            clock.elapsed_ms,
            clock.started_at,
            clock.finished_at,
            suffix,
        )
