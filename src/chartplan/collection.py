"""The validated set of dependencies discovered from a chart source.

A :class:`Collection` keeps dependencies in discovery order and indexes them by
name and by the integrations they provide. It is built once from raw chart
records and filtered per planning pass by the products enabled in the
configuration.
"""

import logging
from typing import Iterable, Iterator, Optional

from chartplan.annotations import AnnotationKeys, parse_dependency
from chartplan.domain import ChartRecord, Dependency
from chartplan.errors import DependencyNotFoundError, InvalidCollectionError

__all__ = ["Collection", "make_collection"]

logger = logging.getLogger(__name__)


class Collection:
    """An ordered set of uniquely named dependencies.

    Attributes:
        dependencies_by_name: Mapping from dependency names to dependencies,
            in insertion order.
    """

    def __init__(self, dependencies: Iterable[Dependency]):
        self.dependencies_by_name: dict[str, Dependency] = _dependencies_by_unique_name(
            dependencies
        )
        self._products_by_integration: dict[str, str] = {}
        for dependency in self.dependencies_by_name.values():
            if dependency.product_name is None:
                continue
            for integration in dependency.integrations_provided:
                self._products_by_integration.setdefault(integration, dependency.product_name)

    def get_product_name_for_integration(self, integration_name: str) -> str:
        """Return the product providing the integration, or an empty string.

        Example:
            >>> collection.get_product_name_for_integration("acs")
            'Advanced Cluster Security'
        """
        return self._products_by_integration.get(integration_name, "")

    def get_dependency(self, name: str) -> Dependency:
        try:
            return self.dependencies_by_name[name]
        except KeyError:
            raise DependencyNotFoundError(f"dependency {name!r} not found") from None

    def product_names(self) -> list[str]:
        """Names of all products declared by the dependencies, in discovery order."""
        names: dict[str, None] = {}
        for dependency in self:
            if dependency.product_name is not None:
                names.setdefault(dependency.product_name, None)
        return list(names)

    def filter(self, enabled_product_names: Iterable[str]) -> "Collection":
        """Select the dependencies whose product is enabled.

        Dependencies without a product are infrastructure shared by every
        product, and are always selected.

        Args:
            enabled_product_names: Names of the enabled products.

        Returns:
            A new collection holding the selected dependencies, in the same order.
        """
        enabled = set(enabled_product_names)
        selected = [
            dependency
            for dependency in self
            if dependency.product_name is None or dependency.product_name in enabled
        ]
        logger.debug(
            f"Selected {len(selected)} of {len(self)} dependencies for products {sorted(enabled)}"
        )
        return Collection(selected)

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self.dependencies_by_name.values())

    def __len__(self) -> int:
        return len(self.dependencies_by_name)

    def __contains__(self, name: str) -> bool:
        return name in self.dependencies_by_name

    def __getitem__(self, name: str) -> Dependency:
        return self.get_dependency(name)


def make_collection(
    records: Iterable[ChartRecord], keys: AnnotationKeys
) -> Collection:
    """Parse raw chart records into a :class:`Collection`.

    Raises:
        InvalidCollectionError: If any record is malformed or two records share a name.
    """
    dependencies = [parse_dependency(record, keys) for record in records]
    collection = Collection(dependencies)
    logger.debug(f"Loaded {len(collection)} dependencies: {list(collection.dependencies_by_name)}")
    return collection


def _dependencies_by_unique_name(
    dependencies: Iterable[Dependency],
) -> dict[str, Dependency]:
    dependencies_by_name: dict[str, Dependency] = {}
    for dependency in dependencies:
        existing: Optional[Dependency] = dependencies_by_name.get(dependency.name)
        if existing is not None:
            raise InvalidCollectionError(
                f"Duplicate dependency name {dependency.name!r} "
                f"(products {existing.product_name!r} and {dependency.product_name!r})"
            )
        dependencies_by_name[dependency.name] = dependency
    return dependencies_by_name
