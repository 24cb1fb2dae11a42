"""
Algorithm versions per facade operation. The version string is written to
every audit row so a stored result can be traced to the exact traversal,
tie-break and search rules that produced it. Bump the version whenever
one of those rules changes.
"""

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class AlgorithmVersion:
    operation: str
    version: str
    description: str


_VERSIONS: Dict[str, AlgorithmVersion] = {
    v.operation: v
    for v in (
        AlgorithmVersion(
            "add_referral", "1.0.0",
            "Self, single-referrer and BFS cycle checks before a write-once edge insert.",
        ),
        AlgorithmVersion(
            "direct_referrals", "1.0.0",
            "Read-only copy of a participant's immediate referrals, identifier order.",
        ),
        AlgorithmVersion(
            "total_reach", "1.0.0",
            "Level-order BFS downstream count, excluding the start participant.",
        ),
        AlgorithmVersion(
            "top_referrers_by_reach", "1.0.0",
            "Referrers by total reach descending, identifier ascending on ties.",
        ),
        AlgorithmVersion(
            "unique_reach_expansion", "1.0.0",
            "Greedy maximum coverage, candidates scanned in identifier order, "
            "early stop on zero marginal gain.",
        ),
        AlgorithmVersion(
            "flow_centrality", "1.0.0",
            "All-pairs BFS distances, directed shortest-path broker counting, "
            "identifier ascending on ties.",
        ),
        AlgorithmVersion(
            "simulate_growth", "1.0.0",
            "Deterministic day-stepped expected growth with per-referrer capacity.",
        ),
        AlgorithmVersion(
            "days_to_target", "1.0.0",
            "Binary search over days with the growth simulator as a monotone oracle.",
        ),
        AlgorithmVersion(
            "min_bonus_for_target", "1.0.0",
            "Max-bonus feasibility check, binary search over integer bonus, "
            "rounded up to the bonus increment.",
        ),
    )
}


def current_version(operation: str) -> AlgorithmVersion:
    try:
        return _VERSIONS[operation]
    except KeyError:
        raise KeyError(f"No algorithm registered for operation '{operation}'") from None


def registered_operations() -> List[str]:
    return sorted(_VERSIONS)
