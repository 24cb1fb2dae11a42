from typing import Dict, Hashable, List

import networkx as nx

from models.referral_graph import ReferralGraph
from .reach_ranking_engine import rank_by_score


class FlowCentralityEngine:
    """
    Identifies the network's brokers: participants lying on shortest directed
    referral paths between other participants.

    For every ordered (source, target, broker) triple of distinct participants,
    broker scores a point when dist(source, broker) + dist(broker, target) equals
    dist(source, target). Only the referral direction counts.

    Cost is O(V^3) in the worst case; intended for small to moderate networks.
    """
    def __init__(self, graph: ReferralGraph):
        self.graph = graph

    def centrality_scores(self) -> Dict[Hashable, int]:
        G = self.graph.snapshot()
        # BFS from every vertex; unreachable pairs are simply absent
        distances = dict(nx.all_pairs_shortest_path_length(G))
        scores = {user: 0 for user in G.nodes}

        for source, from_source in distances.items():
            for target, source_to_target in from_source.items():
                if target == source:
                    continue
                # a broker must be reachable from source to lie on the path
                for broker, source_to_broker in from_source.items():
                    if broker == source or broker == target:
                        continue
                    broker_to_target = distances[broker].get(target)
                    if broker_to_target is None:
                        continue
                    if source_to_broker + broker_to_target == source_to_target:
                        scores[broker] += 1
        return scores

    def flow_centrality(self, k: int) -> List[Hashable]:
        if k <= 0:
            return []
        return rank_by_score(self.centrality_scores(), k)
