"""Dependency-respecting application order for one batch.

The planner collapses strongly connected components (true reference cycles)
into single nodes and orders the condensed graph so that every dependency is
applied no later than its dependents. Cycles are not an error: members of one
component are emitted contiguously, in first-seen order.

Tarjan's algorithm already emits components in reverse topological order of
the condensation. With edges pointing from dependent to dependency that is
exactly dependencies-first, so no separate sort of the condensed graph is
needed. The traversal is iterative to stay clear of the recursion limit on
whole-site exports.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .graph import DependencyGraph

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ImportPlan:
    """Ordered identities plus the components they were grouped into."""

    order: tuple[str, ...]
    components: tuple[tuple[str, ...], ...]
    cycles: tuple[tuple[str, ...], ...] = ()

    def position(self, identity: str) -> int:
        return self.order.index(identity)

    def __iter__(self) -> Iterator[str]:
        return iter(self.order)

    def __len__(self) -> int:
        return len(self.order)


def plan_import(graph: DependencyGraph) -> ImportPlan:
    """Compute the application order for ``graph``."""

    components = strongly_connected_components(graph)
    cycles = tuple(
        component
        for component in components
        if len(component) > 1 or component[0] in graph.edges_of(component[0])
    )
    for cycle in cycles:
        log.info("Reference cycle between %s records: %s", len(cycle), ", ".join(cycle))

    order = tuple(identity for component in components for identity in component)
    return ImportPlan(order=order, components=tuple(components), cycles=cycles)


def strongly_connected_components(graph: DependencyGraph) -> list[tuple[str, ...]]:
    """Return the components of ``graph``, dependencies first.

    Roots and edges are visited in insertion order and component members are
    sorted by first-seen position, so identical input yields identical output.
    """

    first_seen = {identity: position for position, identity in enumerate(graph.identities)}
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    components: list[tuple[str, ...]] = []
    counter = 0

    for root in graph.identities:
        if root in index_of:
            continue

        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)
        work: list[tuple[str, Iterator[str]]] = [(root, iter(graph.edges_of(root)))]

        while work:
            node, neighbors = work[-1]
            descended = False
            for neighbor in neighbors:
                if neighbor not in index_of:
                    index_of[neighbor] = lowlink[neighbor] = counter
                    counter += 1
                    stack.append(neighbor)
                    on_stack.add(neighbor)
                    work.append((neighbor, iter(graph.edges_of(neighbor))))
                    descended = True
                    break
                if neighbor in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[neighbor])
            if descended:
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                members: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    members.append(member)
                    if member == node:
                        break
                components.append(tuple(sorted(members, key=first_seen.__getitem__)))

    return components
