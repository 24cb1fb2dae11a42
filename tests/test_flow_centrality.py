import pytest

from engine.flow_centrality_engine import FlowCentralityEngine
from engine.referral_manager import ReferralManager
from models.referral_graph import ReferralGraph


@pytest.fixture
def graph():
    return ReferralGraph()


@pytest.fixture
def manager(graph):
    return ReferralManager(graph)


@pytest.fixture
def centrality(graph):
    return FlowCentralityEngine(graph)


def _chain(manager, names):
    for referrer, candidate in zip(names, names[1:]):
        manager.add_referral(referrer, candidate)


def test_simple_chain(manager, centrality):
    _chain(manager, ["A", "B", "C", "D"])
    assert centrality.centrality_scores() == {"A": 0, "B": 2, "C": 2, "D": 0}
    assert centrality.flow_centrality(4) == ["B", "C", "A", "D"]


def test_middle_node_highest(manager, centrality):
    _chain(manager, ["A", "B", "C", "D", "E"])
    assert centrality.flow_centrality(1) == ["C"]
    assert centrality.centrality_scores()["C"] == 4


def test_includes_leaves(manager, centrality):
    for candidate in ["B", "C", "D", "E"]:
        manager.add_referral("A", candidate)
    result = centrality.flow_centrality(5)
    assert result == ["A", "B", "C", "D", "E"]
    assert set(centrality.centrality_scores().values()) == {0}


def test_score_is_ancestors_times_descendants_in_a_forest(graph, manager, centrality):
    pairs = [("r", "a"), ("r", "b"), ("a", "c"), ("a", "d"), ("c", "e"), ("x", "y"), ("y", "z")]
    for referrer, candidate in pairs:
        manager.add_referral(referrer, candidate)

    scores = centrality.centrality_scores()
    for user in graph.participants():
        ancestors = len(graph.ancestors(user))
        downstream = _count_downstream(graph, user)
        assert scores[user] == ancestors * downstream


def _count_downstream(graph, user):
    seen, stack = set(), list(graph.direct_referrals(user))
    while stack:
        node = stack.pop()
        seen.add(node)
        stack.extend(graph.direct_referrals(node))
    return len(seen)


@pytest.mark.parametrize("k", [0, -1])
def test_non_positive_k_is_empty(manager, centrality, k):
    _chain(manager, ["A", "B", "C"])
    assert centrality.flow_centrality(k) == []


def test_empty_network(centrality):
    assert centrality.flow_centrality(5) == []
