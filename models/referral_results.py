from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Hashable, Optional


class RejectionReason(str, Enum):
    SELF_REFERRAL = "self_referral"
    ALREADY_REFERRED = "already_referred"
    WOULD_CREATE_CYCLE = "would_create_cycle"


@dataclass(frozen=True)
class ReferralDecision:
    """
    Outcome of a single add_referral call.
    Truthy exactly when the edge was written to the graph.
    """
    referrer: Hashable
    candidate: Hashable
    accepted: bool
    reason: Optional[RejectionReason] = None
    existing_referrer: Optional[Hashable] = None

    def __bool__(self) -> bool:
        return self.accepted

    def to_dict(self) -> Dict[str, Any]:
        return {
            "referrer": self.referrer,
            "candidate": self.candidate,
            "accepted": self.accepted,
            "reason": self.reason.value if self.reason else None,
            "existing_referrer": self.existing_referrer,
        }


class ReferralError(ValueError):
    def __init__(self, reason: RejectionReason, message: str):
        super().__init__(message)
        self.reason = reason


class SearchStatus(str, Enum):
    FOUND = "found"
    UNREACHABLE = "unreachable"
    IMPOSSIBLE = "impossible"


@dataclass(frozen=True)
class SearchOutcome:
    """
    Tagged result of a target inversion search. ``value`` is only set
    when the search found an answer, so a large day count can never be
    mistaken for "never".
    """
    status: SearchStatus
    value: Optional[int] = None

    @classmethod
    def found(cls, value: int) -> "SearchOutcome":
        return cls(SearchStatus.FOUND, value)

    @classmethod
    def unreachable(cls) -> "SearchOutcome":
        return cls(SearchStatus.UNREACHABLE)

    @classmethod
    def impossible(cls) -> "SearchOutcome":
        return cls(SearchStatus.IMPOSSIBLE)

    @property
    def is_found(self) -> bool:
        return self.status is SearchStatus.FOUND

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status.value, "value": self.value}
