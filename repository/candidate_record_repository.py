# repository/candidate_record_repository.py
from typing import Optional, Tuple
from redis import Redis
from redis.exceptions import ResponseError
from repository.namespaces import RECORD_FIELDS
from util.errors import ProtocolShapeError

RawField = Optional[bytes]


class CandidateRecordRepository:
    """
    Read-only view of the per-candidate hashes written by the indexer.
    Values are returned raw; decoding and validation belong to the verifier.
    """

    def __init__(self, client: Redis) -> None:
        self._r = client

    def fetch(self, key: str) -> Tuple[RawField, RawField]:
        """(mtime, path) in one HMGET round trip; either may be None."""
        # Back to the exact bytes ZRANGE returned, whatever the client's encoding.
        raw_key = key.encode("utf-8", errors="surrogateescape")
        try:
            reply = self._r.hmget(raw_key, list(RECORD_FIELDS))
        except ResponseError as e:
            raise ProtocolShapeError("HMGET", str(e)) from e
        if not isinstance(reply, list) or len(reply) != len(RECORD_FIELDS):
            raise ProtocolShapeError("HMGET", f"unexpected reply {reply!r}")
        mtime, path = reply
        return mtime, path
