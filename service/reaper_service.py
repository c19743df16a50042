# service/reaper_service.py
import logging
import multiprocessing
import queue as queue_mod
import sys
from typing import List, Optional, Sequence, Tuple
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from config.cache import open_redis
from core.entities import ReaperPolicy, WorkerContext
from core.reaper_worker import ReaperWorker
from core.work_queue import InMemoryWorkQueue, WorkQueue
from model.stats import RunStats
from util.enums import ErrorMessage, ExitCode
from util.errors import ReaperError, StoreConnectionError
from util.logger import init_logger
from util.types import RankReport

logger = logging.getLogger(__name__)


class ReaperService:
    """
    Drives one rank: join the queue, hand it the worker callback, block until
    the queue reports global completion, then tear down.

    Keys claimed by this rank and not yet verified when the process dies are
    lost: they are already gone from the index and nothing re-queues them.
    """

    def __init__(self, ctx: WorkerContext, work_queue: Optional[WorkQueue] = None) -> None:
        self._ctx = ctx
        self._queue = work_queue or InMemoryWorkQueue()

    def run(self, args: Sequence[str] = ()) -> RunStats:
        local_rank = self._queue.initialize(args)
        logger.info(
            "rank.start rank=%d local=%d index=%s batch=%d retention=%d delete=%s",
            self._ctx.rank,
            local_rank,
            self._ctx.policy.index_key,
            self._ctx.policy.batch_size,
            self._ctx.policy.retention_seconds,
            self._ctx.policy.delete_enabled,
        )
        self._queue.register_callback(ReaperWorker(self._ctx))
        try:
            self._queue.run()
        except (RedisConnectionError, RedisTimeoutError) as e:
            stats = self._ctx.stats
            logger.error(
                "rank.store_lost rank=%d outstanding=%d", self._ctx.rank, stats.outstanding
            )
            raise StoreConnectionError(str(e)) from e
        self._queue.finalize()

        stats = self._ctx.stats
        logger.info("rank.done rank=%d %s", self._ctx.rank, stats.summary())
        return stats


def run_rank(
    rank: int,
    host: str,
    port: int,
    policy: ReaperPolicy,
    reports: Optional["multiprocessing.Queue[RankReport]"] = None,
) -> RunStats:
    """Body of one worker process (or of the only rank when running inline)."""
    ctx = WorkerContext(client=open_redis(host, port), policy=policy, rank=rank)
    with ctx:
        stats = ReaperService(ctx).run()
    if reports is not None:
        reports.put(RankReport(kind="stats", rank=rank, stats=stats.model_dump()))
    return stats


def _process_main(
    rank: int,
    host: str,
    port: int,
    policy: ReaperPolicy,
    reports: "multiprocessing.Queue[RankReport]",
) -> None:
    # Force reconfiguration for child processes
    init_logger(rank=rank, force=True)
    try:
        run_rank(rank, host, port, policy, reports)
    except ReaperError as e:
        logger.critical("rank.fatal rank=%d err=%s", rank, e.message)
        reports.put(RankReport(kind="error", rank=rank, message=e.message))
        sys.exit(e.exit_code)


def launch(
    workers: int, host: str, port: int, policy: ReaperPolicy
) -> Tuple[RunStats, int]:
    """
    Run `workers` independent ranks. Ranks share nothing but Redis; the claim
    transaction is what keeps them off each other's candidates.
    Returns merged stats and the exit code for the whole run.
    """
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    if workers == 1:
        return run_rank(0, host, port, policy), ExitCode.SUCCESS

    reports: "multiprocessing.Queue[RankReport]" = multiprocessing.Queue()
    procs: List[multiprocessing.Process] = []
    for rank in range(workers):
        p = multiprocessing.Process(
            target=_process_main,
            args=(rank, host, port, policy, reports),
            name=f"reaper-rank-{rank}",
        )
        p.start()
        procs.append(p)
        logger.debug("launch.started rank=%d pid=%s", rank, p.pid)

    collected = collect_reports(reports, procs)
    for p in procs:
        p.join()

    parts = [RunStats(**r["stats"]) for r in collected if r.get("kind") == "stats"]
    failed = [p for p in procs if p.exitcode != 0]
    for p in failed:
        logger.error("launch.rank_failed name=%s exitcode=%s", p.name, p.exitcode)
    code = ErrorMessage.WORKER_FAILED.value.exit_code if failed else ExitCode.SUCCESS
    return RunStats.merge(parts), code


def collect_reports(
    reports: "multiprocessing.Queue[RankReport]",
    procs: Sequence[multiprocessing.Process],
    poll_seconds: float = 1.0,
) -> List[RankReport]:
    # Drain before join; a child blocked on a full pipe never exits.
    out: List[RankReport] = []
    while len(out) < len(procs):
        try:
            out.append(reports.get(timeout=poll_seconds))
        except queue_mod.Empty:
            if not any(p.is_alive() for p in procs):
                break
    return out
