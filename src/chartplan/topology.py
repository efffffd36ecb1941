"""The resolved installation plan."""

from typing import Callable, Iterator

from chartplan.domain import Dependency
from chartplan.errors import DependencyNotFoundError, ResolverError

__all__ = ["Topology"]


class Topology:
    """Dependencies in installation order, each bound to its resolved namespace.

    A topology is created empty by the resolver, appended to in resolution
    order and frozen once resolution succeeds; after that it is read-only.
    """

    def __init__(self):
        self._dependencies: list[Dependency] = []
        self._index: dict[str, int] = {}
        self._frozen = False

    def append(self, dependency: Dependency):
        if self._frozen:
            raise ResolverError("topology is frozen, dependencies can't be appended")
        if dependency.name in self._index:
            raise ResolverError(f"dependency {dependency.name!r} is already in the topology")
        self._index[dependency.name] = len(self._dependencies)
        self._dependencies.append(dependency)

    def freeze(self) -> "Topology":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def dependencies(self) -> tuple[Dependency, ...]:
        """Return the dependencies in installation order."""
        return tuple(self._dependencies)

    def names(self) -> list[str]:
        return [dependency.name for dependency in self._dependencies]

    def get_dependency(self, name: str) -> Dependency:
        """Look up a dependency by name.

        Raises:
            DependencyNotFoundError: If the dependency is not part of the topology.
        """
        try:
            return self._dependencies[self._index[name]]
        except KeyError:
            raise DependencyNotFoundError(f"dependency {name!r} not found in topology") from None

    def position(self, name: str) -> int:
        """Return the zero-based installation position of a dependency."""
        self.get_dependency(name)
        return self._index[name]

    def walk(self, fn: Callable[[str, Dependency], None]):
        """Call ``fn(name, dependency)`` for each dependency in installation order.

        Exceptions raised by ``fn`` stop the walk and propagate to the caller.
        """
        for dependency in self._dependencies:
            fn(dependency.name, dependency)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._dependencies)

    def __len__(self) -> int:
        return len(self._dependencies)

    def __contains__(self, name: str) -> bool:
        return name in self._index
