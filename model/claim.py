# model/claim.py
from enum import Enum
from pydantic import BaseModel


class ClaimStatus(str, Enum):
    claimed = "claimed"
    empty = "empty"
    conflict = "conflict"


class ClaimOutcome(BaseModel):
    """
    Result of one optimistic pop against the candidate index.
    `keys` is non-empty only when status is claimed, ascending by score.
    """

    status: ClaimStatus
    keys: list[str] = []

    @classmethod
    def claimed(cls, keys: list[str]) -> "ClaimOutcome":
        return cls(status=ClaimStatus.claimed, keys=list(keys))

    @classmethod
    def empty(cls) -> "ClaimOutcome":
        return cls(status=ClaimStatus.empty)

    @classmethod
    def conflict(cls) -> "ClaimOutcome":
        return cls(status=ClaimStatus.conflict)
