# repository/candidate_index_repository.py
import logging
from typing import Any, List
from redis import Redis
from redis.exceptions import ResponseError, WatchError
from model.claim import ClaimOutcome
from repository.namespaces import MTIME_INDEX
from util.errors import ProtocolShapeError

logger = logging.getLogger(__name__)


def _as_key(raw: Any, command: str) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).decode("utf-8", errors="surrogateescape")
    if isinstance(raw, str):
        return raw
    raise ProtocolShapeError(command, f"member of type {type(raw).__name__}")


def _expect_list(reply: Any, command: str) -> List[str]:
    if not isinstance(reply, list):
        raise ProtocolShapeError(command, f"expected array, got {type(reply).__name__}")
    return [_as_key(v, command) for v in reply]


class CandidateIndexRepository:
    """
    Flow:
    - The index is a sorted set of candidate keys scored by mtime (oldest first).
    - claim_batch() is the only mutation: an optimistic WATCH/MULTI/EXEC pop of
      the lowest-ranked members, so no two workers ever hold the same key.
    - cardinality() and range_by_score() are read-only diagnostics.
    """

    def __init__(self, client: Redis) -> None:
        self._r = client

    # ---------------- Claim protocol ----------------

    def claim_batch(self, index_key: str, max_count: int) -> ClaimOutcome:
        if max_count < 1:
            raise ValueError(f"max_count must be >= 1, got {max_count}")

        with self._r.pipeline(transaction=True) as pipe:
            try:
                pipe.watch(index_key)
                members = _expect_list(
                    pipe.zrange(index_key, 0, max_count - 1), "ZRANGE"
                )
                logger.debug("claim.read index=%s count=%d", index_key, len(members))
                if not members:
                    pipe.unwatch()
                    return ClaimOutcome.empty()

                pipe.multi()
                pipe.zremrangebyrank(index_key, 0, len(members) - 1)
                replies = pipe.execute()
            except WatchError:
                # EXEC came back nil: someone touched the index after WATCH.
                logger.debug("claim.voided index=%s", index_key)
                return ClaimOutcome.conflict()
            except ResponseError as e:
                raise ProtocolShapeError("claim", str(e)) from e

        if not isinstance(replies, list) or len(replies) != 1:
            raise ProtocolShapeError("EXEC", f"unexpected reply {replies!r}")
        removed = replies[0]
        if not isinstance(removed, int):
            raise ProtocolShapeError(
                "ZREMRANGEBYRANK", f"expected integer, got {type(removed).__name__}"
            )
        if removed != len(members):
            # WATCH guarantees the range did not move; anything else is drift.
            raise ProtocolShapeError(
                "ZREMRANGEBYRANK", f"removed={removed} read={len(members)}"
            )
        return ClaimOutcome.claimed(members)

    # ---------------- Diagnostics ----------------

    def cardinality(self, index_key: str = MTIME_INDEX) -> int:
        try:
            reply = self._r.zcard(index_key)
        except ResponseError as e:
            raise ProtocolShapeError("ZCARD", str(e)) from e
        if not isinstance(reply, int):
            raise ProtocolShapeError("ZCARD", f"expected integer, got {type(reply).__name__}")
        return reply

    def range_by_score(self, index_key: str, low: int, high: int) -> List[str]:
        """Members with low <= score <= high, ascending. Never mutates."""
        try:
            reply = self._r.zrangebyscore(index_key, low, high)
        except ResponseError as e:
            raise ProtocolShapeError("ZRANGEBYSCORE", str(e)) from e
        return _expect_list(reply, "ZRANGEBYSCORE")
