"""
Referral Analytics API Layer
=============================
Audited facade over the referral graph and growth engines.  **Every public
method**:

  1. Resolves the current algorithm version for the operation.
  2. Delegates to the appropriate engine.
  3. Classifies the engine result into a response status.
  4. Writes an AuditRecord before returning.

Public operations
~~~~~~~~~~~~~~~~~
  - ``add_referral``            – validated insertion of a referral edge.
  - ``direct_referrals``        – immediate referrals of a participant.
  - ``total_reach``             – downstream reach count.
  - ``top_referrers_by_reach``  – reach leaderboard.
  - ``unique_reach_expansion``  – greedy coverage selection.
  - ``flow_centrality``         – broker ranking.
  - ``simulate_growth``         – day-stepped cumulative growth curve.
  - ``days_to_target``          – time needed to reach a referral total.
  - ``min_bonus_for_target``    – smallest incentive reaching a hiring goal.

Rejected insertions come back as ``status="refused"`` with the rejection
reason; unmet targets as ``"unreachable"`` or ``"impossible"``.  Invalid
arguments come back as ``status="error"``.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from sqlalchemy.orm import Session

from config import AnalyticsConfig
from engine.coverage_selection_engine import CoverageSelectionEngine
from engine.flow_centrality_engine import FlowCentralityEngine
from engine.growth_simulation_engine import GrowthSimulationEngine
from engine.reach_ranking_engine import ReachRankingEngine, rank_by_score
from engine.reachability_engine import ReachabilityEngine
from engine.referral_manager import ReferralManager
from engine.target_inversion_engine import TargetInversionEngine
from models.referral_graph import ReferralGraph
from models.referral_results import RejectionReason

from api.audit_log import AuditLedger
from api.algorithm_registry import current_version
from api.response_envelope import ReferralResponse, ResponseStatus, classify

# (engine result, response data, explanation)
Computed = Tuple[Any, Any, str]


class ReferralAnalyticsAPI:
    """
    Unified API surface for referral graph analytics and growth planning.
    """

    def __init__(
        self,
        graph: ReferralGraph,
        session: Session,
        caller_identity: Optional[str] = None,
        config: Optional[AnalyticsConfig] = None,
    ):
        self.graph = graph
        self.session = session
        self.caller_identity = caller_identity
        self.config = config or AnalyticsConfig()

        # Wire up engines
        self._manager = ReferralManager(graph)
        self._reachability = ReachabilityEngine(graph)
        self._ranking = ReachRankingEngine(graph)
        self._coverage = CoverageSelectionEngine(graph)
        self._centrality = FlowCentralityEngine(graph)
        self._simulator = GrowthSimulationEngine(self.config.growth)
        self._inversion = TargetInversionEngine(self._simulator, self.config.search)
        self._audit = AuditLedger(session)

    # =====================================================================
    #  Graph mutation
    # =====================================================================
    def add_referral(self, referrer: Hashable, candidate: Hashable) -> ReferralResponse:
        def compute() -> Computed:
            decision = self._manager.add_referral(referrer, candidate)
            if decision:
                explanation = f"Referral {referrer!r} -> {candidate!r} recorded."
            else:
                explanation = (
                    f"Referral {referrer!r} -> {candidate!r} refused: "
                    f"{self._manager.describe(decision)}"
                )
            return decision, decision.to_dict(), explanation

        return self._run(
            "add_referral",
            {"referrer": referrer, "candidate": candidate},
            compute,
        )

    # =====================================================================
    #  Graph queries
    # =====================================================================
    def direct_referrals(self, participant: Hashable) -> ReferralResponse:
        def compute() -> Computed:
            referrals = sorted(self.graph.direct_referrals(participant))
            return (
                referrals,
                {"participant": participant, "direct_referrals": referrals},
                f"{participant!r} directly referred {len(referrals)} participant(s).",
            )

        return self._run("direct_referrals", {"participant": participant}, compute)

    def total_reach(self, participant: Hashable) -> ReferralResponse:
        def compute() -> Computed:
            reach = self._reachability.total_reach(participant)
            return (
                reach,
                {"participant": participant, "total_reach": reach},
                f"{participant!r} reaches {reach} participant(s) downstream, directly or indirectly.",
            )

        return self._run("total_reach", {"participant": participant}, compute)

    def top_referrers_by_reach(self, k: int) -> ReferralResponse:
        def compute() -> Computed:
            scores = self._ranking.reach_scores() if k > 0 else {}
            ranked = rank_by_score(scores, k)
            data = {"ranking": [{"participant": p, "total_reach": scores[p]} for p in ranked]}
            return ranked, data, (
                f"Top {len(ranked)} referrer(s) by total downstream reach; "
                f"equal reach is ordered by identifier."
            )

        return self._run("top_referrers_by_reach", {"k": k}, compute)

    def unique_reach_expansion(self, k: int) -> ReferralResponse:
        def compute() -> Computed:
            selected = self._coverage.unique_reach_expansion(k)
            covered = self._coverage.coverage_of(selected)
            data = {"selected": selected, "covered": covered}
            return selected, data, (
                f"Greedy coverage picked {len(selected)} referrer(s) jointly reaching "
                f"{covered} distinct participant(s)."
            )

        return self._run("unique_reach_expansion", {"k": k}, compute)

    def flow_centrality(self, k: int) -> ReferralResponse:
        def compute() -> Computed:
            scores = self._centrality.centrality_scores() if k > 0 else {}
            ranked = rank_by_score(scores, k)
            data = {"ranking": [{"participant": p, "score": scores[p]} for p in ranked]}
            return ranked, data, (
                f"Top {len(ranked)} broker(s) by count of shortest directed referral "
                f"paths passing through them."
            )

        return self._run("flow_centrality", {"k": k}, compute)

    # =====================================================================
    #  Growth model
    # =====================================================================
    def simulate_growth(self, p: float, days: int) -> ReferralResponse:
        def compute() -> Computed:
            series = self._simulator.simulate(p, days)
            return (
                series,
                {"p": p, "days": days, "cumulative_referrals": series},
                f"Simulated {days} day(s) at p={p}; cumulative referrals reach {series[-1]:.4f}.",
            )

        return self._run("simulate_growth", {"p": p, "days": days}, compute)

    def days_to_target(self, p: float, target: float) -> ReferralResponse:
        def compute() -> Computed:
            outcome = self._inversion.days_to_target(p, target)
            if outcome.is_found:
                explanation = f"A total of {target} referrals is reached after {outcome.value} day(s) at p={p}."
            elif p <= 0:
                explanation = (
                    f"A total of {target} referrals is unreachable: the referral probability "
                    f"is zero, so no new referrals are ever made."
                )
            else:
                explanation = (
                    f"A total of {target} referrals is unreachable at p={p} within "
                    f"{self.config.search.max_days} days."
                )
            return outcome, outcome.to_dict(), explanation

        return self._run("days_to_target", {"p": p, "target": target}, compute)

    def min_bonus_for_target(
        self,
        days: int,
        target_hires: float,
        adoption_prob: Callable[[int], float],
        eps: float = 1e-3,
    ) -> ReferralResponse:
        def compute() -> Computed:
            outcome = self._inversion.min_bonus_for_target(days, target_hires, adoption_prob, eps)
            if outcome.is_found:
                explanation = (
                    f"A bonus of {outcome.value} reaches {target_hires} hires within {days} day(s) "
                    f"(rounded up to a multiple of {self.config.search.bonus_increment})."
                )
            else:
                explanation = (
                    f"{target_hires} hires within {days} day(s) is impossible even at the "
                    f"maximum bonus of {self.config.search.max_bonus}."
                )
            return outcome, outcome.to_dict(), explanation

        request_payload = {
            "days": days,
            "target_hires": target_hires,
            "adoption_prob": getattr(adoption_prob, "__name__", repr(adoption_prob)),
            "eps": eps,
        }
        return self._run("min_bonus_for_target", request_payload, compute)

    # =====================================================================
    #  Audit
    # =====================================================================
    def query_audit_log(
        self,
        operation: Optional[str] = None,
        status: Optional[ResponseStatus] = None,
        since: Optional[datetime] = None,
        limit: int = 50,
    ) -> List[Dict[str, Any]]:
        entries = self._audit.entries(operation=operation, status=status, since=since, limit=limit)
        return [e.to_dict() for e in entries]

    def refusal_summary(self) -> Dict[str, int]:
        """Count of refused insertions per rejection reason, zero-filled."""
        counts = self._audit.refusal_counts()
        return {reason.value: counts.get(reason, 0) for reason in RejectionReason}

    def _run(
        self,
        op: str,
        request_payload: Dict[str, Any],
        compute: Callable[[], Computed],
    ) -> ReferralResponse:
        ver = current_version(op)
        t0 = time.perf_counter()
        try:
            result, data, explanation = compute()
        except Exception as exc:
            duration = (time.perf_counter() - t0) * 1000
            row = self._audit.record(
                operation=op,
                algorithm_version=ver.version,
                status=ResponseStatus.ERROR,
                request_payload=request_payload,
                response_payload=None,
                duration_ms=duration,
                caller_identity=self.caller_identity,
                error_detail=str(exc),
            )
            return ReferralResponse(
                operation=op,
                algorithm_version=ver.version,
                status=ResponseStatus.ERROR,
                data=None,
                explanation=str(exc),
                audit_id=row.id,
            )

        status, reason = classify(result)
        duration = (time.perf_counter() - t0) * 1000
        row = self._audit.record(
            operation=op,
            algorithm_version=ver.version,
            status=status,
            request_payload=request_payload,
            response_payload=data,
            duration_ms=duration,
            caller_identity=self.caller_identity,
            rejection_reason=reason,
        )
        return ReferralResponse(
            operation=op,
            algorithm_version=ver.version,
            status=status,
            data=data,
            explanation=explanation,
            audit_id=row.id,
            rejection_reason=reason,
        )
