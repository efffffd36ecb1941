"""Domain models used throughout the planner."""

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class ChartRecord:
    """A raw installable unit, as yielded by a chart source.

    Attributes:
        name: The chart name.
        namespace: Namespace hint from the source, usually empty.
        annotations: Flat mapping of annotation keys to string values.
    """

    name: str
    namespace: str = ""
    annotations: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Dependency:
    """An installable unit with its annotations parsed into typed fields.

    Attributes:
        name: Unique name of the unit.
        namespace: Target namespace; empty until the resolver assigns one.
        product_name: Product the unit belongs to, or None for product-agnostic units.
        depends_on: Names of the units that must be installed before this one.
        weight: Tie-break among otherwise unordered units, lower sorts earlier.
        use_product_namespace: Whether the unit is installed in a product's namespace.
        namespace_product: The product whose namespace is used, when
            ``use_product_namespace`` is set. Defaults to ``product_name``.
        integrations_provided: Integration names this unit makes available.
        integrations_required: Boolean expression over integration names, may be empty.
    """

    name: str
    namespace: str = ""
    product_name: Optional[str] = None
    depends_on: tuple[str, ...] = ()
    weight: int = 0
    use_product_namespace: bool = False
    namespace_product: Optional[str] = None
    integrations_provided: tuple[str, ...] = ()
    integrations_required: str = ""

    @property
    def sort_key(self) -> tuple[int, str]:
        return self.weight, self.name

    def with_namespace(self, namespace: str) -> "Dependency":
        """Return a copy of this dependency bound to the given namespace."""
        return replace(self, namespace=namespace)
