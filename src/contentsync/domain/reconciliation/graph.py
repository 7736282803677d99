"""Dependency graph over record identities.

An edge ``A -> B`` means "A references B, so B must be applied before A".
The graph is an arena: a vertex table keyed by identity, each vertex holding
its outgoing edges. It is built once per batch and frozen before planning.

Edges are kept in insertion order (dict keys) rather than in hash order so
that every traversal, and therefore every plan, is reproducible across
processes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .index import RecordIndex

log = logging.getLogger(__name__)


class FrozenGraphError(RuntimeError):
    """Raised when a frozen graph is mutated."""


@dataclass(eq=False, slots=True)
class Vertex:
    """One identity in the graph together with the identities it depends on."""

    identity: str
    _edges: dict[str, None] = field(default_factory=dict["str", "None"], repr=False)

    @property
    def edges(self) -> tuple[str, ...]:
        return tuple(self._edges)

    def depends_on(self, identity: str) -> bool:
        return identity in self._edges


@dataclass(slots=True)
class DependencyGraph:
    _vertices: dict[str, Vertex] = field(default_factory=dict["str", "Vertex"], repr=False)
    _frozen: bool = field(default=False, repr=False)

    @classmethod
    def from_index(cls, index: RecordIndex) -> DependencyGraph:
        """Build the graph of one batch.

        Every indexed identity becomes a vertex. References to identities
        outside the batch cannot be scheduled and are dropped.
        """

        graph = cls()
        for descriptor in index:
            graph.add_vertex(descriptor.identity)

        dropped = 0
        for descriptor in index:
            for reference in descriptor.references:
                if reference not in graph:
                    dropped += 1
                    log.debug(
                        "Dropping external reference %s -> %s",
                        descriptor.identity,
                        reference,
                    )
                    continue
                graph.add_edge(descriptor.identity, reference)

        if dropped:
            log.debug("Dropped %s references to records outside the batch", dropped)
        graph.freeze()
        return graph

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def vertices(self) -> tuple[Vertex, ...]:
        return tuple(self._vertices.values())

    @property
    def identities(self) -> tuple[str, ...]:
        return tuple(self._vertices)

    def add_vertex(self, identity: str) -> Vertex:
        vertex = self._vertices.get(identity)
        if vertex is None:
            self._assert_mutable()
            vertex = Vertex(identity)
            self._vertices[identity] = vertex
        return vertex

    def add_edge(self, source: str, target: str) -> None:
        """Record that ``source`` depends on ``target``."""

        self._assert_mutable()
        self.add_vertex(target)
        self.add_vertex(source)._edges[target] = None  # noqa: SLF001

    def vertex_for(self, identity: str) -> Vertex | None:
        return self._vertices.get(identity)

    def edges_of(self, identity: str) -> tuple[str, ...]:
        vertex = self._vertices.get(identity)
        return vertex.edges if vertex is not None else ()

    def edge_count(self) -> int:
        return sum(len(vertex.edges) for vertex in self._vertices.values())

    def iter_edges(self) -> Iterator[tuple[str, str]]:
        for vertex in self._vertices.values():
            for target in vertex.edges:
                yield vertex.identity, target

    def freeze(self) -> None:
        self._frozen = True

    def __contains__(self, identity: object) -> bool:
        return identity in self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    def _assert_mutable(self) -> None:
        if self._frozen:
            raise FrozenGraphError("Dependency graph is frozen and cannot be modified")
