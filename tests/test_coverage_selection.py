import pytest

from engine.coverage_selection_engine import CoverageSelectionEngine
from engine.referral_manager import ReferralManager
from models.referral_graph import ReferralGraph


@pytest.fixture
def graph():
    return ReferralGraph()


@pytest.fixture
def manager(graph):
    return ReferralManager(graph)


@pytest.fixture
def selector(graph):
    return CoverageSelectionEngine(graph)


def test_two_disjoint_trees_select_both_roots(manager, selector):
    for candidate in ["Bob", "Carol", "Dan"]:
        manager.add_referral("Alice", candidate)
    for candidate in ["Eve", "Frank", "Grace"]:
        manager.add_referral("David", candidate)

    assert selector.unique_reach_expansion(2) == ["Alice", "David"]
    assert selector.coverage_of(["Alice", "David"]) == 6


def test_stops_when_nothing_new(manager, selector):
    manager.add_referral("A", "B")
    manager.add_referral("B", "C")
    # B's reach is inside A's
    assert selector.unique_reach_expansion(3) == ["A"]


def test_prefers_marginal_gain_over_raw_reach(manager, selector):
    # R reaches 4; T reaches 3, all under R; S reaches 3 disjoint from R
    manager.add_referral("R", "T")
    for candidate in ["t1", "t2", "t3"]:
        manager.add_referral("T", candidate)
    manager.add_referral("S", "s1")
    manager.add_referral("S", "s2")
    manager.add_referral("S", "s3")

    assert selector.unique_reach_expansion(3) == ["R", "S"]


def test_tie_goes_to_smaller_identifier(manager, selector):
    manager.add_referral("m", "m1")
    manager.add_referral("b", "b1")
    assert selector.unique_reach_expansion(1) == ["b"]


@pytest.mark.parametrize("k", [0, -3])
def test_non_positive_k_is_empty(manager, selector, k):
    manager.add_referral("A", "B")
    assert selector.unique_reach_expansion(k) == []


def test_each_pick_adds_new_coverage(manager, selector):
    pairs = [("a", "b"), ("b", "c"), ("a", "d"), ("x", "y"), ("y", "z"), ("q", "r"), ("d", "e")]
    for referrer, candidate in pairs:
        manager.add_referral(referrer, candidate)

    picked = selector.unique_reach_expansion(10)
    coverage = [selector.coverage_of(picked[:i]) for i in range(len(picked) + 1)]
    assert all(later > earlier for earlier, later in zip(coverage, coverage[1:]))
    assert picked == ["a", "x", "q"]
