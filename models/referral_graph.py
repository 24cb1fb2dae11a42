import threading
from typing import Dict, FrozenSet, Hashable, List, Optional, Set

import networkx as nx


class ReferralGraph:
    """
    Authoritative referrer -> candidate graph.

    Forward adjacency lives in a networkx DiGraph; the reverse index maps each
    candidate to its one referrer and is write-once. Nothing outside
    ReferralManager should call ``_record``.

    Invariants:
    - No self-referrals
    - Each candidate has at most one referrer, for its whole lifetime
    - Acyclic, so the graph is a forest of out-trees

    Participant identifiers must be hashable, not None, and mutually
    comparable: rankings break score ties by identifier order, so one graph
    should not mix identifier types (e.g. str and int).
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._referrer_index: Dict[Hashable, Hashable] = {}
        # Single global lock: writers hold it across check + write,
        # readers hold it while copying state out.
        self.lock = threading.RLock()

    def _record(self, referrer: Hashable, candidate: Hashable) -> None:
        if candidate in self._referrer_index:
            raise RuntimeError(f"{candidate!r} already has a referrer")
        self._graph.add_edge(referrer, candidate)
        self._referrer_index[candidate] = referrer

    def direct_referrals(self, participant: Hashable) -> FrozenSet[Hashable]:
        """Immediate candidates referred by participant; empty if unknown."""
        with self.lock:
            if participant not in self._graph:
                return frozenset()
            return frozenset(self._graph.successors(participant))

    def path_exists(self, source: Hashable, target: Hashable) -> bool:
        """
        Breadth-first search along referral edges from source, stopping as
        soon as target is dequeued.
        """
        with self.lock:
            if source not in self._graph:
                return False
            if source == target:
                return True
            for _, reached in nx.bfs_edges(self._graph, source):
                if reached == target:
                    return True
        return False

    def referrer_of(self, participant: Hashable) -> Optional[Hashable]:
        with self.lock:
            return self._referrer_index.get(participant)

    def ancestors(self, participant: Hashable) -> List[Hashable]:
        """Referrer chain walking up from participant, nearest first."""
        chain = []
        with self.lock:
            current = participant
            while current in self._referrer_index:
                current = self._referrer_index[current]
                chain.append(current)
        return chain

    def participants(self) -> Set[Hashable]:
        with self.lock:
            return set(self._graph.nodes)

    def referrers(self) -> Set[Hashable]:
        with self.lock:
            return {n for n, degree in self._graph.out_degree() if degree > 0}

    def has_participant(self, participant: Hashable) -> bool:
        with self.lock:
            return participant in self._graph

    def edge_count(self) -> int:
        with self.lock:
            return self._graph.number_of_edges()

    def snapshot(self) -> nx.DiGraph:
        """Detached copy of the forward adjacency for read-side algorithms."""
        with self.lock:
            return self._graph.copy()

    def __contains__(self, participant: Hashable) -> bool:
        return self.has_participant(participant)

    def __len__(self) -> int:
        with self.lock:
            return self._graph.number_of_nodes()

    def __repr__(self):
        return f"<ReferralGraph(participants={len(self)}, referrals={self.edge_count()})>"
