# core/verifier.py
import logging
import os
import stat
from core.entities import WorkerContext
from model.candidate import CandidateRecord, VerificationResult, Verdict
from repository.candidate_record_repository import CandidateRecordRepository
from repository.namespaces import RECORD_FIELDS
from util import functions
from util.errors import MetadataFormatError

logger = logging.getLogger(__name__)


class CandidateVerifier:
    """
    Resolve a claimed key to its stored record, re-check the live file and
    decide. A key is handled at most once; nothing here puts it back.
    """

    def __init__(self, ctx: WorkerContext, records: CandidateRecordRepository) -> None:
        self._ctx = ctx
        self._records = records

    def resolve(self, key: str) -> CandidateRecord:
        raw_mtime, raw_path = self._records.fetch(key)
        mtime_field, path_field = RECORD_FIELDS
        mtime_text = functions.unquote_field(
            functions.as_text(raw_mtime, mtime_field), mtime_field
        )
        path = functions.unquote_field(functions.as_path(raw_path, path_field), path_field)
        return CandidateRecord(
            key=key,
            path=path,
            stored_mtime=functions.parse_unsigned(mtime_text, mtime_field),
        )

    def verify(self, key: str) -> VerificationResult:
        try:
            record = self.resolve(key)
        except MetadataFormatError as e:
            logger.info(
                "verify.malformed key=%s field=%s reason=%s detail=%s",
                key,
                e.field,
                e.reason.value,
                e,
            )
            return VerificationResult(
                key=key, verdict=Verdict.malformed, failure=e.reason, reason=str(e)
            )

        now = self._ctx.now()
        try:
            # lstat: a symlink swapped in at this path is judged as the link itself
            st = os.lstat(record.path)
        except OSError as e:
            logger.info(
                "verify.vanished key=%s path=%s stored=%d now=%d err=%s",
                key,
                record.path,
                record.stored_mtime,
                now,
                e.strerror or type(e).__name__,
            )
            return VerificationResult(
                key=key,
                verdict=Verdict.vanished,
                path=record.path,
                stored_mtime=record.stored_mtime,
                now=now,
                reason=e.strerror or type(e).__name__,
            )

        fresh = int(st.st_mtime)
        result = VerificationResult(
            key=key,
            verdict=Verdict.retained,
            path=record.path,
            stored_mtime=record.stored_mtime,
            fresh_mtime=fresh,
            now=now,
        )
        if fresh != record.stored_mtime:
            logger.debug(
                "verify.mtime_moved key=%s path=%s stored=%d fresh=%d",
                key,
                record.path,
                record.stored_mtime,
                fresh,
            )

        policy = self._ctx.policy
        if not functions.is_eligible(fresh, policy.retention_seconds, now):
            # Claimed but too young: it is out of the index for good.
            logger.info(
                "verify.retained key=%s path=%s stored=%d fresh=%d now=%d retention=%d",
                key,
                record.path,
                record.stored_mtime,
                fresh,
                now,
                policy.retention_seconds,
            )
            return result

        if not policy.delete_enabled:
            logger.info(
                "verify.eligible.gated key=%s path=%s stored=%d fresh=%d now=%d",
                key,
                record.path,
                record.stored_mtime,
                fresh,
                now,
            )
            result.verdict = Verdict.eligible
            return result

        return self._delete(result, st.st_mode)

    def _delete(self, result: VerificationResult, mode: int) -> VerificationResult:
        if stat.S_ISDIR(mode):
            logger.warning("delete.refused.directory key=%s path=%s", result.key, result.path)
            result.verdict = Verdict.delete_failed
            result.reason = "is a directory"
            return result
        try:
            os.unlink(result.path)
        except OSError as e:
            logger.warning(
                "delete.failed key=%s path=%s err=%s",
                result.key,
                result.path,
                e.strerror or type(e).__name__,
            )
            result.verdict = Verdict.delete_failed
            result.reason = e.strerror or type(e).__name__
            return result

        logger.info(
            "delete.ok key=%s path=%s stored=%s fresh=%s now=%s",
            result.key,
            result.path,
            result.stored_mtime,
            result.fresh_mtime,
            result.now,
        )
        result.verdict = Verdict.deleted
        return result
