# model/stats.py
from typing import Iterable
from pydantic import BaseModel
from model.candidate import Verdict
from model.claim import ClaimStatus


class RunStats(BaseModel):
    claims: int = 0
    claimed: int = 0
    conflicts: int = 0
    empty_polls: int = 0
    processed: int = 0
    deleted: int = 0
    eligible: int = 0
    retained: int = 0
    vanished: int = 0
    malformed: int = 0
    delete_failed: int = 0

    def record_claim(self, status: ClaimStatus, count: int = 0) -> None:
        if status == ClaimStatus.claimed:
            self.claims += 1
            self.claimed += count
        elif status == ClaimStatus.conflict:
            self.conflicts += 1
        else:
            self.empty_polls += 1

    def record_verdict(self, verdict: Verdict) -> None:
        self.processed += 1
        setattr(self, verdict.value, getattr(self, verdict.value) + 1)

    @property
    def outstanding(self) -> int:
        """Claimed keys not yet verified; lost if this process dies now."""
        return self.claimed - self.processed

    def summary(self) -> str:
        return " ".join(f"{k}={v}" for k, v in self.model_dump().items())

    @classmethod
    def merge(cls, parts: Iterable["RunStats"]) -> "RunStats":
        total = cls()
        for part in parts:
            for name, value in part.model_dump().items():
                setattr(total, name, getattr(total, name) + value)
        return total
