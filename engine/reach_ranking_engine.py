from typing import Dict, Hashable, List

from models.referral_graph import ReferralGraph
from .reachability_engine import ReachabilityEngine


def rank_by_score(scores: Dict[Hashable, int], k: int) -> List[Hashable]:
    """Top k keys by score descending; equal scores fall back to identifier order."""
    if k <= 0:
        return []
    return sorted(scores, key=lambda user: (-scores[user], user))[:k]


class ReachRankingEngine:
    """
    Orders referrers by total downstream reach. Only participants who have
    referred someone are ranked; pure leaves are left out.
    """
    def __init__(self, graph: ReferralGraph):
        self.graph = graph
        self.reachability = ReachabilityEngine(graph)

    def reach_scores(self) -> Dict[Hashable, int]:
        return {user: len(reach) for user, reach in self.reachability.reach_map().items()}

    def top_referrers_by_reach(self, k: int) -> List[Hashable]:
        if k <= 0:
            return []
        return rank_by_score(self.reach_scores(), k)
