"""
Referral Response Envelope
==========================
Every facade call returns a ``ReferralResponse``. Its ``status`` says how the
request was resolved, not just whether code ran:

  - ``ok``           – the operation produced its answer.
  - ``refused``      – an insertion broke a graph rule; ``rejection_reason`` says which.
  - ``unreachable``  – a growth target cannot be met in the day range.
  - ``impossible``   – a hiring target cannot be met even at the maximum bonus.
  - ``error``        – the arguments were invalid.

Refusals and unreachable targets are answers the caller must surface to the
end user; only ``error`` means the request itself was wrong.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from models.referral_results import (
    ReferralDecision,
    RejectionReason,
    SearchOutcome,
    SearchStatus,
)


class ResponseStatus(str, Enum):
    OK = "ok"
    REFUSED = "refused"
    UNREACHABLE = "unreachable"
    IMPOSSIBLE = "impossible"
    ERROR = "error"


_SEARCH_STATUS = {
    SearchStatus.FOUND: ResponseStatus.OK,
    SearchStatus.UNREACHABLE: ResponseStatus.UNREACHABLE,
    SearchStatus.IMPOSSIBLE: ResponseStatus.IMPOSSIBLE,
}


def classify(result: Any) -> Tuple[ResponseStatus, Optional[RejectionReason]]:
    """Map an engine result onto the response status it should carry."""
    if isinstance(result, ReferralDecision):
        if result.accepted:
            return ResponseStatus.OK, None
        return ResponseStatus.REFUSED, result.reason
    if isinstance(result, SearchOutcome):
        return _SEARCH_STATUS[result.status], None
    return ResponseStatus.OK, None


@dataclass(frozen=True)
class ReferralResponse:
    operation: str
    algorithm_version: str
    status: ResponseStatus
    data: Any
    explanation: str
    audit_id: str
    rejection_reason: Optional[RejectionReason] = None
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat() + "Z")

    @property
    def ok(self) -> bool:
        return self.status is ResponseStatus.OK

    @property
    def refused(self) -> bool:
        return self.status is ResponseStatus.REFUSED

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "operation": self.operation,
            "algorithm_version": self.algorithm_version,
            "status": self.status.value,
            "data": self.data,
            "explanation": self.explanation,
            "audit_id": self.audit_id,
            "created_at": self.created_at,
        }
        if self.rejection_reason is not None:
            payload["rejection_reason"] = self.rejection_reason.value
        return payload
