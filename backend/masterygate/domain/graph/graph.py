"""Prerequisite graph for one course, built once at course load and read-only afterwards."""
from __future__ import annotations
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

import networkx as nx

from masterygate.domain.graph.errors import CycleDetected, DanglingEdge, DuplicateConcept
from masterygate.domain.graph.models import Concept

MasteryMap = Mapping[str, Optional[float]]


class PrerequisiteGraph:
    """
    Directed acyclic graph over concept ids. Edges point prerequisite → dependent.

    Instances are only produced by build(), which validates the whole edge set,
    so every query method can assume a well-formed DAG. The networkx graph is
    only used during build; queries read frozen adjacency maps, so one
    instance can be shared by any number of concurrent requests.
    """

    def __init__(
        self,
        concepts: Mapping[str, Concept],
        prerequisites: Mapping[str, FrozenSet[str]],
        dependents: Mapping[str, FrozenSet[str]],
        order: Tuple[str, ...],
    ):
        self._concepts = MappingProxyType(dict(concepts))
        self._prerequisites = MappingProxyType(dict(prerequisites))
        self._dependents = MappingProxyType(dict(dependents))
        self._order = order

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def build(
        cls,
        concepts: Iterable[Concept],
        edges: Iterable[Tuple[str, str]] = (),
    ) -> "PrerequisiteGraph":
        """
        Build the graph from concepts and (prerequisite, dependent) edges.
        Each concept's own prerequisite list contributes edges as well.

        Raises DuplicateConcept, DanglingEdge or CycleDetected.
        """
        by_id: Dict[str, Concept] = {}
        for concept in concepts:
            if concept.id in by_id:
                raise DuplicateConcept(concept.id)
            by_id[concept.id] = concept

        all_edges: List[Tuple[str, str]] = list(edges)
        for concept in by_id.values():
            all_edges.extend((prereq_id, concept.id) for prereq_id in concept.prerequisites)

        graph = nx.DiGraph()
        graph.add_nodes_from(by_id)
        for prereq_id, dependent_id in all_edges:
            for endpoint in (prereq_id, dependent_id):
                if endpoint not in by_id:
                    raise DanglingEdge(prereq_id, dependent_id, endpoint)
            graph.add_edge(prereq_id, dependent_id)

        return cls(
            concepts=by_id,
            prerequisites={cid: frozenset(graph.predecessors(cid)) for cid in by_id},
            dependents={cid: frozenset(graph.successors(cid)) for cid in by_id},
            order=_topological_order(graph, by_id),
        )

    # ------------------------------------------------------------------
    # Queries (never raise)
    # ------------------------------------------------------------------
    def __contains__(self, concept_id: object) -> bool:
        return concept_id in self._concepts

    def __len__(self) -> int:
        return len(self._concepts)

    def concept(self, concept_id: str) -> Optional[Concept]:
        return self._concepts.get(concept_id)

    def concept_ids(self) -> FrozenSet[str]:
        return frozenset(self._concepts)

    def prerequisites_of(self, concept_id: str) -> FrozenSet[str]:
        """Direct prerequisites only; empty for a root or an unknown id."""
        return self._prerequisites.get(concept_id, frozenset())

    def dependents_of(self, concept_id: str) -> FrozenSet[str]:
        """Concepts that list concept_id as a direct prerequisite."""
        return self._dependents.get(concept_id, frozenset())

    def can_attempt(self, concept_id: str, mastery_map: MasteryMap, threshold: float) -> bool:
        """
        True iff every direct prerequisite has mastery >= threshold.

        Ancestors further up the chain are not re-checked: mastering them was
        already required to unlock the direct prerequisite. Missing entries
        and unset (None) mastery count as 0.
        """
        if concept_id not in self._concepts:
            return False
        for prereq_id in self._prerequisites[concept_id]:
            score = mastery_map.get(prereq_id)
            if (score if score is not None else 0.0) < threshold:
                return False
        return True

    def topological_order(self) -> Iterator[str]:
        """Fresh iterator over every concept id, prerequisites first."""
        for concept_id in self._order:
            yield concept_id


def _topological_order(graph: nx.DiGraph, concepts: Mapping[str, Concept]) -> Tuple[str, ...]:
    """Prerequisites first; ties go to the lower course position, then the id."""
    try:
        return tuple(nx.lexicographical_topological_sort(
            graph, key=lambda cid: (concepts[cid].position, cid),
        ))
    except nx.NetworkXUnfeasible:
        cycle = nx.find_cycle(graph)
        raise CycleDetected([prereq_id for prereq_id, _ in cycle]) from None
