from typing import List, Optional

from config import GrowthModelConfig


class GrowthSimulationEngine:
    """
    Deterministic day-stepped model of cumulative referral growth.

    Each day every active referrer produces ``p`` referrals (fractional
    participants are intended, this is an expected-value model, not Monte Carlo).
    New referrals become active referrers themselves. Referrers retire once the
    capacity consumed exceeds ``referral_capacity`` per active referrer.
    """
    def __init__(self, config: Optional[GrowthModelConfig] = None):
        self.config = config or GrowthModelConfig()

    def simulate(self, p: float, days: int) -> List[float]:
        """
        Returns days + 1 cumulative referral totals; index 0 is day 0 (always 0.0).
        """
        if days < 0:
            raise ValueError(f"days must be non-negative, got {days}")
        if not 0.0 <= p <= 1.0:
            raise ValueError(f"p must be a probability in [0, 1], got {p}")

        capacity = self.config.referral_capacity
        active_referrers = float(self.config.initial_referrers)
        total_referrals = 0.0
        used_capacity = 0.0

        cumulative = [total_referrals]
        for _ in range(days):
            new_referrals = active_referrers * p
            total_referrals += new_referrals
            used_capacity += new_referrals

            capacity_limit = active_referrers * capacity
            newly_inactive = 0.0
            if used_capacity > capacity_limit:
                newly_inactive = min((used_capacity - capacity_limit) / capacity, active_referrers)

            active_referrers = active_referrers + new_referrals - newly_inactive
            cumulative.append(total_referrals)

        return cumulative

    def final_total(self, p: float, days: int) -> float:
        return self.simulate(p, days)[-1]
