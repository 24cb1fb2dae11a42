import logging
from typing import Hashable, Iterable, List, Tuple

from models.referral_graph import ReferralGraph
from models.referral_results import ReferralDecision, ReferralError, RejectionReason

logger = logging.getLogger(__name__)


class ReferralManager:
    """
    The only writer of a ReferralGraph. Every insertion is validated against
    the graph invariants first; a rejected insertion leaves the graph untouched.
    """
    def __init__(self, graph: ReferralGraph):
        self.graph = graph

    def add_referral(self, referrer: Hashable, candidate: Hashable) -> ReferralDecision:
        """
        Add edge referrer -> candidate. Checks run in order: self-referral,
        existing referrer, cycle. Nothing is written unless all three pass.
        A None identifier is an argument error, not a rejection.
        """
        if referrer is None or candidate is None:
            raise ValueError("referrer and candidate must both be identifiers, got None")
        if referrer == candidate:
            return self._reject(referrer, candidate, RejectionReason.SELF_REFERRAL)

        with self.graph.lock:
            existing = self.graph.referrer_of(candidate)
            if existing is not None:
                return self._reject(
                    referrer, candidate, RejectionReason.ALREADY_REFERRED, existing_referrer=existing
                )

            if self.would_create_cycle(referrer, candidate):
                return self._reject(referrer, candidate, RejectionReason.WOULD_CREATE_CYCLE)

            self.graph._record(referrer, candidate)

        logger.debug("Recorded referral %r -> %r", referrer, candidate)
        return ReferralDecision(referrer=referrer, candidate=candidate, accepted=True)

    def would_create_cycle(self, referrer: Hashable, candidate: Hashable) -> bool:
        # candidate -> ... -> referrer already exists, so referrer -> candidate closes a loop
        return self.graph.path_exists(candidate, referrer)

    def require_referral(self, referrer: Hashable, candidate: Hashable) -> ReferralDecision:
        """Same as add_referral but raises ReferralError on rejection."""
        decision = self.add_referral(referrer, candidate)
        if not decision:
            raise ReferralError(decision.reason, self.describe(decision))
        return decision

    def add_referrals(self, pairs: Iterable[Tuple[Hashable, Hashable]]) -> List[ReferralDecision]:
        return [self.add_referral(referrer, candidate) for referrer, candidate in pairs]

    def _reject(self, referrer, candidate, reason, existing_referrer=None) -> ReferralDecision:
        decision = ReferralDecision(
            referrer=referrer,
            candidate=candidate,
            accepted=False,
            reason=reason,
            existing_referrer=existing_referrer,
        )
        logger.warning("Rejected referral: %s", self.describe(decision))
        return decision

    @staticmethod
    def describe(decision: ReferralDecision) -> str:
        if decision.reason is RejectionReason.SELF_REFERRAL:
            return f"{decision.referrer!r} cannot refer themselves."
        if decision.reason is RejectionReason.ALREADY_REFERRED:
            return (
                f"Candidate {decision.candidate!r} has already been referred "
                f"by {decision.existing_referrer!r}."
            )
        if decision.reason is RejectionReason.WOULD_CREATE_CYCLE:
            return (
                f"Adding {decision.referrer!r} -> {decision.candidate!r} "
                f"would create a cycle in the network."
            )
        return f"{decision.referrer!r} -> {decision.candidate!r} accepted."
