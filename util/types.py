# util/types.py
from typing import Literal, TypedDict


# Flow: what a worker process sends back to the launcher when it exits.
ReportKind = Literal["stats", "error"]


class RankReport(TypedDict, total=False):
    kind: ReportKind
    rank: int
    stats: dict
    message: str
