# service/diagnostics_service.py
import logging
from typing import List
from repository.candidate_index_repository import CandidateIndexRepository

logger = logging.getLogger(__name__)


class DiagnosticsService:
    """Read-only views of the candidate index for operators. Never claims."""

    def __init__(self, index: CandidateIndexRepository, index_key: str) -> None:
        self._index = index
        self._key = index_key

    def remaining(self) -> int:
        n = self._index.cardinality(self._key)
        logger.info("index.remaining index=%s count=%d", self._key, n)
        return n

    def listing(self, low: int, high: int) -> List[str]:
        """
        Keys scored within [low, high], newest first.
        """
        keys = self._index.range_by_score(self._key, low, high)
        logger.debug(
            "index.listing index=%s low=%d high=%d count=%d", self._key, low, high, len(keys)
        )
        return list(reversed(keys))
