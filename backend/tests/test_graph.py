"""PrerequisiteGraph construction and query tests, no I/O."""
import itertools

import pytest

from masterygate.domain.graph.errors import CycleDetected, DanglingEdge, DuplicateConcept
from masterygate.domain.graph.graph import PrerequisiteGraph
from masterygate.domain.graph.models import Concept


def _concepts(*ids):
    return [Concept(id=cid, position=i) for i, cid in enumerate(ids)]


def _assert_respects_edges(order, edges):
    index = {cid: i for i, cid in enumerate(order)}
    for prereq, dependent in edges:
        assert index[prereq] < index[dependent], f"{prereq} must precede {dependent}"


# ------------------------------------------------------------------
# build + topological order
# ------------------------------------------------------------------
ACYCLIC_EDGE_SETS = [
    [],
    [("a", "b"), ("b", "c")],
    [("a", "c"), ("b", "c"), ("c", "d"), ("a", "d")],
    [("d", "a"), ("c", "b"), ("b", "a"), ("e", "d")],
    [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("d", "e")],
]


@pytest.mark.parametrize("edges", ACYCLIC_EDGE_SETS)
def test_topological_order_yields_every_concept_once_before_its_dependents(edges):
    graph = PrerequisiteGraph.build(_concepts("a", "b", "c", "d", "e"), edges)
    order = list(graph.topological_order())
    assert sorted(order) == ["a", "b", "c", "d", "e"]
    _assert_respects_edges(order, edges)


def test_topological_order_is_lazy_and_restartable():
    graph = PrerequisiteGraph.build(_concepts("a", "b", "c"), [("a", "b"), ("b", "c")])
    it = graph.topological_order()
    assert next(it) == "a"
    assert list(graph.topological_order()) == ["a", "b", "c"]
    assert list(it) == ["b", "c"]


def test_topological_order_breaks_ties_by_position():
    concepts = [Concept(id="z", position=0), Concept(id="m", position=1), Concept(id="a", position=2)]
    graph = PrerequisiteGraph.build(concepts)
    assert list(graph.topological_order()) == ["z", "m", "a"]


def test_concept_prerequisites_and_explicit_edges_are_merged():
    concepts = [
        Concept(id="a"),
        Concept(id="b", prerequisites=("a",)),
        Concept(id="c", prerequisites=("a",)),
    ]
    graph = PrerequisiteGraph.build(concepts, [("b", "c"), ("a", "b")])
    assert graph.prerequisites_of("c") == {"a", "b"}
    assert graph.prerequisites_of("b") == {"a"}
    assert graph.dependents_of("a") == {"b", "c"}


# ------------------------------------------------------------------
# build failures
# ------------------------------------------------------------------
def test_two_node_cycle_is_rejected():
    with pytest.raises(CycleDetected) as exc:
        PrerequisiteGraph.build(_concepts("a", "b"), [("a", "b"), ("b", "a")])
    assert set(exc.value.concept_ids) == {"a", "b"}


def test_self_prerequisite_is_rejected():
    with pytest.raises(CycleDetected) as exc:
        PrerequisiteGraph.build([Concept(id="a", prerequisites=("a",))])
    assert exc.value.concept_ids == ("a",)


def test_cycle_report_excludes_acyclic_parts():
    edges = [("x", "a"), ("a", "b"), ("b", "c"), ("c", "a"), ("c", "d")]
    with pytest.raises(CycleDetected) as exc:
        PrerequisiteGraph.build(_concepts("x", "a", "b", "c", "d"), edges)
    assert set(exc.value.concept_ids) == {"a", "b", "c"}


@pytest.mark.parametrize("n", [3, 4, 6])
def test_any_ring_is_rejected_and_reported_along_its_edges(n):
    ids = [f"c{i}" for i in range(n)]
    edges = [(ids[i], ids[(i + 1) % n]) for i in range(n)]
    with pytest.raises(CycleDetected) as exc:
        PrerequisiteGraph.build(_concepts(*ids), edges)
    reported = exc.value.concept_ids
    assert sorted(reported) == sorted(ids)
    for i, cid in enumerate(reported):
        assert (cid, reported[(i + 1) % n]) in edges


def test_ties_after_a_shared_prerequisite_go_to_the_lower_position():
    concepts = [
        Concept(id="root", position=0),
        Concept(id="late", position=3, prerequisites=("root",)),
        Concept(id="early", position=1, prerequisites=("root",)),
        Concept(id="free", position=2),
    ]
    graph = PrerequisiteGraph.build(concepts)
    assert list(graph.topological_order()) == ["root", "early", "free", "late"]


def test_edge_to_unknown_concept_is_rejected():
    with pytest.raises(DanglingEdge) as exc:
        PrerequisiteGraph.build([Concept(id="a", prerequisites=("ghost",))])
    assert exc.value.missing_id == "ghost"
    assert exc.value.dependent_id == "a"


def test_edge_from_known_to_unknown_dependent_is_rejected():
    with pytest.raises(DanglingEdge) as exc:
        PrerequisiteGraph.build(_concepts("a"), [("a", "nowhere")])
    assert exc.value.missing_id == "nowhere"


def test_duplicate_concept_ids_are_rejected():
    with pytest.raises(DuplicateConcept):
        PrerequisiteGraph.build([Concept(id="a"), Concept(id="a")])


# ------------------------------------------------------------------
# queries
# ------------------------------------------------------------------
@pytest.fixture
def chain():
    return PrerequisiteGraph.build(_concepts("a", "b", "c"), [("a", "b"), ("b", "c")])


def test_prerequisites_of_is_direct_only(chain):
    assert chain.prerequisites_of("c") == {"b"}
    assert chain.prerequisites_of("a") == frozenset()
    assert chain.prerequisites_of("unknown") == frozenset()


def test_root_is_always_attemptable(chain):
    assert chain.can_attempt("a", {}, 70) is True


@pytest.mark.parametrize("mastery_map, expected", [
    ({}, False),
    ({"a": None}, False),
    ({"a": 69.9}, False),
    ({"a": 70}, True),
    ({"a": 100}, True),
])
def test_can_attempt_compares_prerequisite_mastery_with_threshold(chain, mastery_map, expected):
    assert chain.can_attempt("b", mastery_map, 70) is expected


def test_can_attempt_does_not_recheck_ancestors(chain):
    assert chain.can_attempt("c", {"b": 80}, 70) is True
    assert chain.can_attempt("c", {"a": 100, "b": 50}, 70) is False


def test_can_attempt_requires_every_direct_prerequisite():
    graph = PrerequisiteGraph.build(_concepts("a", "b", "c"), [("a", "c"), ("b", "c")])
    masteries = [None, 50, 70, 90]
    for ma, mb in itertools.product(masteries, masteries):
        expected = (ma or 0) >= 70 and (mb or 0) >= 70
        assert graph.can_attempt("c", {"a": ma, "b": mb}, 70) is expected


def test_can_attempt_unknown_concept_is_false_not_an_error(chain):
    assert chain.can_attempt("missing", {"a": 100}, 70) is False
