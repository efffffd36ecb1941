"""Dependency resolution into an installation order.

This module holds the core ordering logic of the planner. It builds a graph of
the explicit ``depends-on`` edges between the selected dependencies, performs a
topological sort that breaks ties by ``(weight, name)``, and binds every
dependency to the namespace it is installed into.

The order is fully determined by the collection and the configuration, so
resolving the same input twice yields the same topology.
"""

import heapq
import logging
from collections import defaultdict
from typing import Iterable, Iterator

from chartplan.collection import Collection
from chartplan.config import Config
from chartplan.domain import Dependency
from chartplan.errors import CircularDependencyError, DependencyNotFoundError
from chartplan.topology import Topology

__all__ = ["Resolver"]

logger = logging.getLogger(__name__)


class _DependencyGraph:
    """
    Internal helper to represent and traverse a directed acyclic graph of dependencies.

    Each node is a dependency name, and each edge points from a dependency to the
    dependencies that must be installed after it. Nodes that become ready at the
    same time are released in ``(weight, name)`` order.
    """

    def __init__(self, dependencies: Iterable[Dependency]):
        self._nodes: dict[str, Dependency] = {}
        self._predecessors: dict[str, set[str]] = {}
        self._successors: dict[str, set[str]] = defaultdict(set)
        for dependency in dependencies:
            self._nodes[dependency.name] = dependency
            self._predecessors[dependency.name] = set()

    def add_dependencies(self, dependee: str, dependencies: Iterable[str]):
        """
        Register the dependencies that must be installed before a dependee.

        Args:
            dependee: The dependency name whose predecessors are being registered.
            dependencies: Names of the dependencies installed before the dependee.

        Raises:
            DependencyNotFoundError: If a predecessor is not part of the graph.
        """
        for dependency_name in dependencies:
            if dependency_name not in self._nodes:
                raise DependencyNotFoundError(
                    f"dependency {dependency_name!r} required by {dependee!r} "
                    "is not found or its product is not enabled"
                )
            self._predecessors[dependee].add(dependency_name)
            self._successors[dependency_name].add(dependee)

    def traverse(self) -> Iterator[Dependency]:
        """
        Perform a topological traversal of the dependency graph.

        Yields:
            Dependencies in an order where all predecessors of each node are
            yielded before the node itself.

        Raises:
            CircularDependencyError: If the remaining nodes form a cycle.
        """
        remaining = {name: set(predecessors) for name, predecessors in self._predecessors.items()}
        ready = [
            self._nodes[name].sort_key
            for name, predecessors in remaining.items()
            if len(predecessors) == 0
        ]
        heapq.heapify(ready)

        while len(ready) > 0:
            _, next_name = heapq.heappop(ready)
            yield self._nodes[next_name]

            del remaining[next_name]
            for dependee in self._successors[next_name]:
                predecessors = remaining[dependee]
                predecessors.discard(next_name)
                if len(predecessors) == 0:
                    heapq.heappush(ready, self._nodes[dependee].sort_key)

        if len(remaining) > 0:
            raise CircularDependencyError(_find_cycle(remaining))


def _find_cycle(remaining: dict[str, set[str]]) -> list[str]:
    """Follow unresolved predecessors from the smallest remaining name until one repeats.

    The result reads in depends-on order: ``["a", "b", "a"]`` is a depending on b,
    which depends on a.

    Every remaining node has at least one remaining predecessor, so the walk
    always closes a loop.
    """
    path: list[str] = []
    visited: dict[str, int] = {}
    current = min(remaining)
    while current not in visited:
        visited[current] = len(path)
        path.append(current)
        current = min(remaining[current])
    cycle = path[visited[current]:]
    return cycle + [cycle[0]]


class Resolver:
    """Resolve a collection into a :class:`~chartplan.topology.Topology`.

    The collection is expected to be filtered already; every ``depends-on``
    edge must point to a dependency within it.
    """

    def __init__(self, config: Config, collection: Collection):
        self._config = config
        self._collection = collection

    def resolve(self) -> Topology:
        """Order the collection and assign namespaces.

        Returns:
            A frozen topology holding every dependency of the collection exactly once.

        Raises:
            DependencyNotFoundError: If an edge names a missing or disabled dependency.
            CircularDependencyError: If the dependencies form a cycle.
            ProductNotFoundError: If a product namespace is requested for an unknown product.
            InvalidConfigError: If a requested product namespace is not configured.
        """
        graph = _DependencyGraph(self._collection)
        for dependency in self._collection:
            graph.add_dependencies(dependency.name, dependency.depends_on)

        topology = Topology()
        for dependency in graph.traverse():
            resolved = dependency.with_namespace(self._namespace_for(dependency))
            logger.debug(
                f"Resolved {resolved.name!r} (weight {resolved.weight}) "
                f"into namespace {resolved.namespace!r}"
            )
            topology.append(resolved)
        return topology.freeze()

    def _namespace_for(self, dependency: Dependency) -> str:
        if dependency.use_product_namespace:
            return self._config.product_namespace(dependency.namespace_product)
        return self._config.namespace
