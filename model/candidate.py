# model/candidate.py
from enum import Enum
from pydantic import BaseModel
from util.enums import MetadataFailure


class Verdict(str, Enum):
    deleted = "deleted"
    eligible = "eligible"  # old enough, but unlink is switched off
    retained = "retained"
    vanished = "vanished"
    malformed = "malformed"
    delete_failed = "delete_failed"


class CandidateRecord(BaseModel):
    key: str
    path: str
    stored_mtime: int


class VerificationResult(BaseModel):
    key: str
    verdict: Verdict
    path: str | None = None
    stored_mtime: int | None = None
    fresh_mtime: int | None = None
    now: int | None = None
    failure: MetadataFailure | None = None
    reason: str | None = None
