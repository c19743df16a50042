# core/reaper_worker.py
import logging
from core.entities import WorkerContext
from core.verifier import CandidateVerifier
from core.work_queue import QueueHandle
from model.candidate import VerificationResult
from model.claim import ClaimStatus
from repository.candidate_index_repository import CandidateIndexRepository
from repository.candidate_record_repository import CandidateRecordRepository

logger = logging.getLogger(__name__)


class ReaperWorker:
    """
    The processing callback handed to the work queue.

    Every invocation starts from scratch and does one of two things:
    - an item is available: verify (and maybe delete) exactly that item;
    - nothing is available: claim the next batch from the index and enqueue
      it, leaving the processing to later invocations on any rank.
    """

    def __init__(
        self,
        ctx: WorkerContext,
        index: CandidateIndexRepository | None = None,
        verifier: CandidateVerifier | None = None,
    ) -> None:
        self._ctx = ctx
        self._index = index or CandidateIndexRepository(ctx.client)
        self._verifier = verifier or CandidateVerifier(
            ctx, CandidateRecordRepository(ctx.client)
        )

    def __call__(self, handle: QueueHandle) -> bool:
        item = handle.dequeue()
        if item is None:
            return self.refill(handle)
        self.process(item, handle.rank)
        return True

    def refill(self, handle: QueueHandle) -> bool:
        policy = self._ctx.policy
        outcome = self._index.claim_batch(policy.index_key, policy.batch_size)
        self._ctx.stats.record_claim(outcome.status, len(outcome.keys))

        if outcome.status == ClaimStatus.claimed:
            for key in outcome.keys:
                handle.enqueue(key)
            logger.debug(
                "claim.ok rank=%d index=%s count=%d first=%s last=%s",
                handle.rank,
                policy.index_key,
                len(outcome.keys),
                outcome.keys[0],
                outcome.keys[-1],
            )
            return True

        if outcome.status == ClaimStatus.conflict:
            logger.debug(
                "claim.conflict rank=%d index=%s retry=next-cycle",
                handle.rank,
                policy.index_key,
            )
            return True

        logger.debug("claim.empty rank=%d index=%s", handle.rank, policy.index_key)
        return False

    def process(self, key: str, rank: int = 0) -> VerificationResult:
        result = self._verifier.verify(key)
        self._ctx.stats.record_verdict(result.verdict)
        logger.debug("process.done rank=%d key=%s verdict=%s", rank, key, result.verdict.value)
        return result
