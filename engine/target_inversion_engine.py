import logging
from typing import Callable, Optional

from config import SearchBoundsConfig
from models.referral_results import SearchOutcome
from .growth_simulation_engine import GrowthSimulationEngine

logger = logging.getLogger(__name__)


class TargetInversionEngine:
    """
    Answers "how long" and "how much incentive" by binary searching the growth
    simulator, which is monotone in days for fixed p >= 0.
    """
    def __init__(
        self,
        simulator: Optional[GrowthSimulationEngine] = None,
        bounds: Optional[SearchBoundsConfig] = None,
    ):
        self.simulator = simulator or GrowthSimulationEngine()
        self.bounds = bounds or SearchBoundsConfig()

    def days_to_target(self, p: float, target: float) -> SearchOutcome:
        """Smallest day count whose cumulative total reaches target."""
        if target <= 0:
            return SearchOutcome.found(0)
        if p <= 0:
            return SearchOutcome.unreachable()

        low, high = 0, self.bounds.max_days
        if self.simulator.final_total(p, high) < target:
            logger.debug("Target %s not reached within %d days at p=%s", target, high, p)
            return SearchOutcome.unreachable()

        while low < high:
            mid = low + (high - low) // 2
            if self.simulator.final_total(p, mid) >= target:
                high = mid
            else:
                low = mid + 1

        logger.debug("Target %s reached on day %d at p=%s", target, low, p)
        return SearchOutcome.found(low)

    def min_bonus_for_target(
        self,
        days: int,
        target_hires: float,
        adoption_prob: Callable[[int], float],
        eps: float = 1e-3,
    ) -> SearchOutcome:
        """
        Minimum bonus whose induced probability reaches target_hires within days.

        adoption_prob is assumed monotone non-decreasing in bonus. Its outputs may
        stray from [0, 1] by at most eps and are clamped; anything further raises
        ValueError.

        The search itself finds the exact minimal integer bonus. The result is then
        rounded up to the next ``bonus_increment`` since bonuses are paid in those
        steps.
        """
        if target_hires <= 0:
            return SearchOutcome.found(0)

        def reaches_target(bonus: int) -> bool:
            p = self._probability(adoption_prob, bonus, eps)
            return self.simulator.final_total(p, days) >= target_hires

        low, high = 0, self.bounds.max_bonus
        if not reaches_target(high):
            logger.debug("Target %s impossible within %d days even at bonus %d", target_hires, days, high)
            return SearchOutcome.impossible()

        while low < high:
            mid = low + (high - low) // 2
            if reaches_target(mid):
                high = mid
            else:
                low = mid + 1

        increment = self.bounds.bonus_increment
        rounded = -(-low // increment) * increment
        logger.debug("Minimal bonus %d, rounded to %d", low, rounded)
        return SearchOutcome.found(rounded)

    @staticmethod
    def _probability(adoption_prob: Callable[[int], float], bonus: int, eps: float) -> float:
        p = float(adoption_prob(bonus))
        if p < -eps or p > 1.0 + eps:
            raise ValueError(f"adoption_prob({bonus}) returned {p}, outside [0, 1]")
        return min(max(p, 0.0), 1.0)
