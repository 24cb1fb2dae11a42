import logging
from typing import Hashable, Iterable, List, Set

from models.referral_graph import ReferralGraph
from .reachability_engine import ReachabilityEngine

logger = logging.getLogger(__name__)


class CoverageSelectionEngine:
    """
    Greedy maximum-coverage selection over referrer reach sets.
    Picks, round by round, the referrer adding the most not-yet-covered
    participants. This is the classic (1 - 1/e) approximation, not an exact optimum.
    """
    def __init__(self, graph: ReferralGraph):
        self.graph = graph
        self.reachability = ReachabilityEngine(graph)

    def unique_reach_expansion(self, k: int) -> List[Hashable]:
        if k <= 0:
            return []

        reach_sets = self.reachability.reach_map()
        # identifier order, first strictly-best candidate wins a tie
        remaining = sorted(reach_sets)
        covered: Set[Hashable] = set()
        selected: List[Hashable] = []

        while len(selected) < k and remaining:
            best_user = None
            best_gain = 0
            for user in remaining:
                gain = len(reach_sets[user] - covered)
                if gain > best_gain:
                    best_gain = gain
                    best_user = user

            if best_user is None:
                # nobody adds anything new
                break

            selected.append(best_user)
            covered |= reach_sets[best_user]
            remaining.remove(best_user)
            logger.debug("Selected %r adding %d new participants", best_user, best_gain)

        return selected

    def coverage_of(self, selection: Iterable[Hashable]) -> int:
        """Size of the union of reach sets of the given participants."""
        G = self.graph.snapshot()
        covered: Set[Hashable] = set()
        for user in selection:
            covered |= self.reachability.full_reach_set(user, G)
        return len(covered)
