# File: featureforge/graph.py
"""
featureforge - Dependency Graph
================================
Static "feature A requires feature B" edges plus the reverse (dependents)
index derived from them.

Both indexes are built once in ``DependencyGraph.__init__`` and exposed as
read-only mappings.  Construction also runs a white/grey/black colouring DFS
over the edges and raises ``DependencyCycleError`` if a feature requires
itself, so cycles surface at startup rather than during resolution.

Transitive closures are not precomputed; the walks below are breadth-first
with a visited set and assume no depth bound.
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import Deque, Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from featureforge.errors import DependencyCycleError
from featureforge.models import FeatureKey

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge.graph")

_EMPTY: FrozenSet[FeatureKey] = frozenset()
_FEATURE_ORDER: Dict[FeatureKey, int] = {key: i for i, key in enumerate(FeatureKey)}

# DFS colours
_WHITE, _GREY, _BLACK = 0, 1, 2


# ---------------------------------------------------------------------------
# Cycle detection
# ---------------------------------------------------------------------------


def find_cycle(edges: Mapping[FeatureKey, Iterable[FeatureKey]]) -> Optional[List[FeatureKey]]:
    """
    Return one dependency cycle as a path ``[a, b, ..., a]``, or ``None``.

    Iterative DFS with node colouring: a grey node reached again is a back
    edge.  Nodes are visited in catalog order so the reported cycle is stable.

    Complexity: O(V + E).
    """
    colour: Dict[FeatureKey, int] = {}
    adjacency: Dict[FeatureKey, Tuple[FeatureKey, ...]] = {
        node: tuple(sorted(set(targets), key=_catalog_index))
        for node, targets in edges.items()
    }

    for start in sorted(adjacency, key=_catalog_index):
        if colour.get(start, _WHITE) != _WHITE:
            continue

        path: List[FeatureKey] = [start]
        colour[start] = _GREY
        # Each frame: (node, index of next neighbour to explore)
        stack: List[Tuple[FeatureKey, int]] = [(start, 0)]

        while stack:
            node, idx = stack[-1]
            neighbours: Tuple[FeatureKey, ...] = adjacency.get(node, ())

            if idx >= len(neighbours):
                stack.pop()
                path.pop()
                colour[node] = _BLACK
                continue

            stack[-1] = (node, idx + 1)
            nxt: FeatureKey = neighbours[idx]
            state: int = colour.get(nxt, _WHITE)

            if state == _GREY:
                return path[path.index(nxt):] + [nxt]
            if state == _WHITE:
                colour[nxt] = _GREY
                path.append(nxt)
                stack.append((nxt, 0))

    return None


def _catalog_index(feature: FeatureKey) -> int:
    return _FEATURE_ORDER[feature]


# ---------------------------------------------------------------------------
# DependencyGraph
# ---------------------------------------------------------------------------


class DependencyGraph:
    """
    Forward and reverse dependency indexes over ``FeatureKey``.

    Args:
        edges: feature -> features it requires.  Self-edges and cycles raise
            ``DependencyCycleError``.
    """

    __slots__ = ("_requires", "_required_by")

    def __init__(self, edges: Mapping[FeatureKey, Iterable[FeatureKey]]) -> None:
        forward: Dict[FeatureKey, FrozenSet[FeatureKey]] = {
            FeatureKey(node): frozenset(FeatureKey(t) for t in targets)
            for node, targets in edges.items()
        }

        cycle: Optional[List[FeatureKey]] = find_cycle(forward)
        if cycle is not None:
            raise DependencyCycleError([f.value for f in cycle])

        reverse: Dict[FeatureKey, Set[FeatureKey]] = {}
        for node, targets in forward.items():
            for target in targets:
                reverse.setdefault(target, set()).add(node)

        self._requires: Mapping[FeatureKey, FrozenSet[FeatureKey]] = MappingProxyType(
            {k: v for k, v in forward.items() if v}
        )
        self._required_by: Mapping[FeatureKey, FrozenSet[FeatureKey]] = MappingProxyType(
            {k: frozenset(v) for k, v in reverse.items()}
        )

        logger.debug(
            "DependencyGraph built: %d feature(s) with requirements, %d edge(s).",
            len(self._requires),
            sum(len(v) for v in self._requires.values()),
        )

    # -- Direct lookups -----------------------------------------------------

    def dependencies_of(self, feature: FeatureKey) -> FrozenSet[FeatureKey]:
        """Features ``feature`` directly requires."""
        return self._requires.get(feature, _EMPTY)

    def dependents_of(self, feature: FeatureKey) -> FrozenSet[FeatureKey]:
        """Features that directly require ``feature``."""
        return self._required_by.get(feature, _EMPTY)

    @property
    def edges(self) -> Mapping[FeatureKey, FrozenSet[FeatureKey]]:
        return self._requires

    @property
    def reverse_edges(self) -> Mapping[FeatureKey, FrozenSet[FeatureKey]]:
        return self._required_by

    # -- Transitive walks ---------------------------------------------------

    def transitive_dependencies(self, feature: FeatureKey) -> Tuple[FeatureKey, ...]:
        """Everything ``feature`` needs, nearest first."""
        return self._walk(feature, self.dependencies_of)

    def transitive_dependents(self, feature: FeatureKey) -> Tuple[FeatureKey, ...]:
        """Everything that stops being valid if ``feature`` is turned off."""
        return self._walk(feature, self.dependents_of)

    @staticmethod
    def _walk(start: FeatureKey, step) -> Tuple[FeatureKey, ...]:
        seen: Set[FeatureKey] = {start}
        order: List[FeatureKey] = []
        queue: Deque[FeatureKey] = deque([start])
        while queue:
            node: FeatureKey = queue.popleft()
            for nxt in sorted(step(node), key=_catalog_index):
                if nxt in seen:
                    continue
                seen.add(nxt)
                order.append(nxt)
                queue.append(nxt)
        return tuple(order)

    def topological_order(self) -> Tuple[FeatureKey, ...]:
        """All feature keys, every dependency before its dependents (Kahn)."""
        in_degree: Dict[FeatureKey, int] = {
            key: len(self.dependencies_of(key)) for key in FeatureKey
        }
        ready: Deque[FeatureKey] = deque(k for k in FeatureKey if in_degree[k] == 0)
        order: List[FeatureKey] = []
        while ready:
            node: FeatureKey = ready.popleft()
            order.append(node)
            for dependent in sorted(self.dependents_of(node), key=_catalog_index):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    ready.append(dependent)
        return tuple(order)

    def __repr__(self) -> str:
        return f"<DependencyGraph edges={sum(len(v) for v in self._requires.values())}>"


__all__: List[str] = [
    "DependencyGraph",
    "find_cycle",
]
