"""Two-phase dependency graph for configuration options.

This module provides the DependencyGraph class, which stores options as
vertices in an index-addressed arena. Each vertex keeps links to the options
it depends on (parents) and the options depending on it (children).

The graph is built in two phases. While Building, options may be inserted in
any order; a dependency that has not been inserted yet is kept as an
outstanding forward reference and patched once the named option arrives.
seal() then checks that every reference was resolved and that there are no
cycles, after which the graph only answers traversal queries.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

import structlog

from conftool.errors import (
    CycleDetectedError,
    DuplicateDependencyError,
    DuplicateNodeError,
    GraphStateError,
    IncompleteGraphError,
    SelfDependencyError,
    UnknownNodeError,
)

logger = structlog.get_logger(__name__)


class GraphState(Enum):
    """Lifecycle state of a DependencyGraph."""

    BUILDING = "building"
    SEALED = "sealed"


@dataclass
class _Vertex:
    """Arena entry for a single option.

    A parent link is either the arena index of the dependency or, while the
    graph is building, the dependency's name if it has not been inserted yet.
    """

    name: str
    parents: list[int | str] = field(default_factory=list)
    children: list[int] = field(default_factory=list)


def _find_duplicates(values: list[str]) -> list[str]:
    seen: set[str] = set()
    duplicates: list[str] = []
    for value in values:
        if value in seen and value not in duplicates:
            duplicates.append(value)
        seen.add(value)
    return duplicates


class DependencyGraph:
    """Directed "depends-on" graph with an explicit Building/Sealed lifecycle.

    Insertion is only allowed while building; traversal queries are only
    allowed once sealed. A sealed graph is never mutated again.

    Thread-safety:
        A building graph must not be shared between threads. A sealed graph
        is read-only and may be queried concurrently.

    Example:
        >>> graph = DependencyGraph()
        >>> graph.insert("CONFIG_NET", ["CONFIG_BASE"])  # Forward reference
        >>> graph.insert("CONFIG_BASE", [])
        >>> graph.seal()
        >>> graph.dependencies_of("CONFIG_NET")
        ['CONFIG_BASE']
        >>> graph.dependent_vertices("CONFIG_BASE")
        ['CONFIG_NET']
    """

    def __init__(self) -> None:
        """Initialize an empty graph in the Building state."""
        self._vertices: list[_Vertex] = []
        self._index: dict[str, int] = {}
        # Outstanding forward references: name -> [(vertex index, parent slot)]
        self._pending: dict[str, list[tuple[int, int]]] = {}
        self._state = GraphState.BUILDING

        logger.debug("dependency_graph_initialized")

    @property
    def state(self) -> GraphState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_sealed(self) -> bool:
        """Check if seal() has completed successfully."""
        return self._state is GraphState.SEALED

    @property
    def nodes(self) -> list[str]:
        """Option names in insertion order."""
        return [vertex.name for vertex in self._vertices]

    def __contains__(self, node: object) -> bool:
        return node in self._index

    def __len__(self) -> int:
        return len(self._vertices)

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes)

    def _require_state(self, expected: GraphState, action: str) -> None:
        if self._state is not expected:
            error_msg = f"Cannot {action} a graph that is {self._state.value}"
            logger.error("graph_state_violation", action=action, state=self._state.value)
            raise GraphStateError(error_msg)

    def insert(self, node: str, dependencies: Iterable[str]) -> None:
        """Insert an option together with its direct dependencies.

        Dependencies do not have to exist yet. Any that are missing are
        recorded as outstanding references and must be inserted before
        seal() is called. Options inserted earlier that referenced ``node``
        are linked to it now.

        Args:
            node: Name of the option to insert
            dependencies: Names of the options ``node`` depends on, in
                declaration order. Must not contain duplicates or ``node``.

        Raises:
            GraphStateError: If the graph is already sealed
            DuplicateNodeError: If ``node`` was inserted before
            SelfDependencyError: If ``node`` appears in its own dependencies
            DuplicateDependencyError: If a dependency is listed twice
        """
        self._require_state(GraphState.BUILDING, "insert into")

        depends = list(dependencies)
        if node in self._index:
            raise DuplicateNodeError(node)
        if node in depends:
            raise SelfDependencyError(node)
        duplicates = _find_duplicates(depends)
        if duplicates:
            raise DuplicateDependencyError(node, duplicates)

        idx = len(self._vertices)
        vertex = _Vertex(node)

        for slot, dep in enumerate(depends):
            parent_idx = self._index.get(dep)
            if parent_idx is None:
                vertex.parents.append(dep)
                self._pending.setdefault(dep, []).append((idx, slot))
            else:
                vertex.parents.append(parent_idx)
                self._vertices[parent_idx].children.append(idx)

        # Resolve references made to this option before it existed
        for child_idx, slot in self._pending.pop(node, []):
            self._vertices[child_idx].parents[slot] = idx
            vertex.children.append(child_idx)

        self._vertices.append(vertex)
        self._index[node] = idx

        logger.debug(
            "option_inserted",
            option=node,
            dependencies=depends,
            dependency_count=len(depends),
            resolved_dependents=len(vertex.children),
        )

    def seal(self) -> None:
        """Complete construction and enable traversal queries.

        Raises:
            GraphStateError: If the graph is already sealed
            IncompleteGraphError: If any dependency was never inserted
            CycleDetectedError: If the dependencies form a cycle

        Note:
            On failure the graph stays in the Building state. It describes an
            inconsistent catalog and should be discarded.
        """
        self._require_state(GraphState.BUILDING, "seal")

        if self._pending:
            missing = {
                name: [self._vertices[child_idx].name for child_idx, _ in links]
                for name, links in self._pending.items()
            }
            logger.debug("graph_incomplete", missing=sorted(missing))
            raise IncompleteGraphError(missing)

        cycle = self._detect_cycle()
        if cycle:
            logger.debug("cycle_detected_in_graph", cycle=cycle)
            raise CycleDetectedError(cycle)

        self._state = GraphState.SEALED
        logger.info("dependency_graph_sealed", **self.get_stats())

    def _detect_cycle(self) -> list[str] | None:
        """Find a cycle in the parent links using DFS.

        Returns:
            The cycle as a list of option names whose first and last entries
            are equal, or None if the graph is acyclic
        """
        visited: set[int] = set()

        for start in range(len(self._vertices)):
            if start in visited:
                continue

            visited.add(start)
            path = [start]
            rec_stack = {start}
            iterators = [iter(self._vertices[start].parents)]

            while iterators:
                for parent in iterators[-1]:
                    if parent in rec_stack:
                        cycle_start_idx = path.index(parent)
                        return [self._vertices[i].name for i in [*path[cycle_start_idx:], parent]]
                    if parent not in visited:
                        visited.add(parent)
                        rec_stack.add(parent)
                        path.append(parent)
                        iterators.append(iter(self._vertices[parent].parents))
                        break
                else:
                    # Backtrack
                    iterators.pop()
                    rec_stack.discard(path.pop())

        return None

    def _traverse(self, node: str, direction: str) -> list[str]:
        self._require_state(GraphState.SEALED, "query")

        start = self._index.get(node)
        if start is None:
            raise UnknownNodeError(node)

        visited = {start}
        found: list[int] = []
        to_traverse = [start]

        while to_traverse:
            vertex = self._vertices[to_traverse.pop()]
            links = vertex.parents if direction == "parents" else vertex.children
            unseen = [idx for idx in links if idx not in visited]
            found.extend(unseen)
            to_traverse.extend(unseen)
            visited.update(unseen)

        return [self._vertices[idx].name for idx in found]

    def dependencies_of(self, node: str) -> list[str]:
        """Return every option ``node`` depends on, directly or indirectly.

        Args:
            node: Name of the option to query

        Returns:
            Dependency names in traversal order, each reported once. Empty if
            the option has no dependencies.

        Raises:
            GraphStateError: If the graph has not been sealed
            UnknownNodeError: If ``node`` is not in the graph
        """
        deps = self._traverse(node, "parents")
        logger.debug("dependencies_resolved", option=node, count=len(deps))
        return deps

    def dependent_vertices(self, node: str) -> list[str]:
        """Return every option that depends on ``node``, directly or indirectly.

        Args:
            node: Name of the option to query

        Returns:
            Dependent option names in traversal order, each reported once

        Raises:
            GraphStateError: If the graph has not been sealed
            UnknownNodeError: If ``node`` is not in the graph
        """
        dependents = self._traverse(node, "children")
        logger.debug("dependents_resolved", option=node, count=len(dependents))
        return dependents

    def get_stats(self) -> dict[str, int | bool]:
        """Get statistics about the graph.

        Returns:
            Dictionary with:
                - total_options: Number of inserted options
                - total_dependencies: Number of declared dependency links
                - outstanding_references: Links not resolved yet
                - is_sealed: Whether seal() has completed
        """
        return {
            "total_options": len(self._vertices),
            "total_dependencies": sum(len(vertex.parents) for vertex in self._vertices),
            "outstanding_references": sum(len(links) for links in self._pending.values()),
            "is_sealed": self.is_sealed,
        }
