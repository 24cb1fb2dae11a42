from typing import Dict, Hashable, Optional, Set

import networkx as nx

from models.referral_graph import ReferralGraph


class ReachabilityEngine:
    """
    Breadth-first downstream traversal over the referral graph.
    Unknown participants have an empty reach, never an error.
    """
    def __init__(self, graph: ReferralGraph):
        self.graph = graph

    def full_reach_set(self, user: Hashable, G: Optional[nx.DiGraph] = None) -> Set[Hashable]:
        """Every participant strictly downstream of user, direct or indirect."""
        G = G if G is not None else self.graph.snapshot()
        if user not in G:
            return set()

        visited = {user}
        queue = [user]
        while queue:
            current = queue.pop(0)
            for referral in G.successors(current):
                if referral not in visited:
                    visited.add(referral)
                    queue.append(referral)

        visited.discard(user)
        return visited

    def total_reach(self, user: Hashable) -> int:
        return len(self.full_reach_set(user))

    def reach_map(self) -> Dict[Hashable, Set[Hashable]]:
        """Reach set of every referrer, computed against one consistent snapshot."""
        G = self.graph.snapshot()
        return {
            user: self.full_reach_set(user, G)
            for user, degree in G.out_degree()
            if degree > 0
        }
