import math

import pytest

from config import SearchBoundsConfig
from engine.growth_simulation_engine import GrowthSimulationEngine
from engine.target_inversion_engine import TargetInversionEngine
from models.referral_results import SearchOutcome, SearchStatus


@pytest.fixture
def simulator():
    return GrowthSimulationEngine()


@pytest.fixture
def inversion(simulator):
    return TargetInversionEngine(simulator)


class TestDaysToTarget:
    def test_zero_target(self, inversion):
        assert inversion.days_to_target(0.1, 0) == SearchOutcome.found(0)

    def test_zero_probability_is_unreachable(self, inversion):
        outcome = inversion.days_to_target(0.0, 100)
        assert outcome.status is SearchStatus.UNREACHABLE
        assert outcome.value is None

    def test_reachable_target(self, inversion, simulator):
        outcome = inversion.days_to_target(0.2, 50)
        # 20, 44, 72.8
        assert outcome == SearchOutcome.found(3)
        assert simulator.final_total(0.2, 3) >= 50
        assert simulator.final_total(0.2, 2) < 50

    @pytest.mark.parametrize("p, target", [(0.05, 1000), (0.2, 50), (0.5, 12345), (1.0, 1), (0.01, 7.5)])
    def test_smallest_sufficient_day(self, inversion, simulator, p, target):
        outcome = inversion.days_to_target(p, target)
        assert outcome.is_found
        days = outcome.value
        assert simulator.final_total(p, days) >= target
        if days > 0:
            assert simulator.final_total(p, days - 1) < target

    def test_unreachable_within_day_bound(self, simulator):
        inversion = TargetInversionEngine(simulator, SearchBoundsConfig(max_days=100))
        outcome = inversion.days_to_target(0.001, 1_000_000)
        assert outcome.status is SearchStatus.UNREACHABLE


class TestMinBonusForTarget:
    def test_zero_target(self, inversion):
        outcome = inversion.min_bonus_for_target(30, 0, lambda bonus: 0.01 * (bonus / 100.0), 0.001)
        assert outcome == SearchOutcome.found(0)

    def test_impossible_target(self, inversion):
        outcome = inversion.min_bonus_for_target(30, 100, lambda bonus: 0.0, 0.001)
        assert outcome.status is SearchStatus.IMPOSSIBLE
        assert outcome.value is None

    def test_reachable_target(self, inversion, simulator):
        def linear_prob(bonus):
            return min(0.5, 0.01 * (bonus / 100.0))

        outcome = inversion.min_bonus_for_target(30, 200, linear_prob, 0.001)
        assert outcome.is_found
        bonus = outcome.value
        assert bonus % 10 == 0
        # exact minimum is 373, paid in steps of 10
        assert bonus == 380
        assert simulator.final_total(linear_prob(bonus), 30) >= 200
        assert simulator.final_total(linear_prob(bonus - 10), 30) < 200

    def test_rounds_up_to_increment(self, inversion):
        def step_prob(bonus):
            return 0.2 if bonus >= 123 else 0.0

        assert inversion.min_bonus_for_target(3, 50, step_prob) == SearchOutcome.found(130)

    def test_exact_multiple_is_kept(self, inversion):
        def step_prob(bonus):
            return 0.2 if bonus >= 120 else 0.0

        assert inversion.min_bonus_for_target(3, 50, step_prob) == SearchOutcome.found(120)

    def test_custom_increment(self, simulator):
        inversion = TargetInversionEngine(simulator, SearchBoundsConfig(bonus_increment=25))

        def step_prob(bonus):
            return 0.2 if bonus >= 123 else 0.0

        assert inversion.min_bonus_for_target(3, 50, step_prob).value == 125

    def test_probability_outside_tolerance_rejected(self, inversion):
        with pytest.raises(ValueError):
            inversion.min_bonus_for_target(30, 100, lambda bonus: 1.5, 0.001)

    def test_probability_within_tolerance_is_clamped(self, inversion):
        outcome = inversion.min_bonus_for_target(1, 100, lambda bonus: 1.0005, 0.001)
        assert outcome == SearchOutcome.found(0)

    def test_integration_with_sigmoid_adoption(self, inversion, simulator):
        def sigmoid_prob(bonus):
            x = bonus / 100.0
            return 0.5 / (1 + math.exp(-0.5 * (x - 5))) + 0.01

        target_hires, timeframe = 500, 60
        outcome = inversion.min_bonus_for_target(timeframe, target_hires, sigmoid_prob, 0.001)
        assert outcome.is_found
        assert outcome.value % 10 == 0

        final_prob = sigmoid_prob(outcome.value)
        assert simulator.final_total(final_prob, timeframe) >= target_hires

        days_needed = inversion.days_to_target(final_prob, target_hires)
        assert days_needed.is_found
        assert days_needed.value <= timeframe
