"""Exceptions raised while planning an installation.

Every failure of a planning pass is terminal: the builder never recovers from
one of these, it hands the first error back to the caller unmodified.
"""

from typing import Optional

__all__ = [
    "ResolverError",
    "InvalidCollectionError",
    "DependencyNotFoundError",
    "CircularDependencyError",
    "InvalidConfigError",
    "ProductNotFoundError",
    "IntegrationError",
    "InvalidExpressionError",
    "UnknownIntegrationError",
    "MissingIntegrationsError",
    "PrerequisiteIntegrationError",
    "ConfiguredIntegrationError",
]


class ResolverError(Exception):
    """Base class for all planning errors."""

    pass


class InvalidCollectionError(ResolverError):
    """Raised when a chart's identity or annotations are malformed, or a name is duplicated."""

    pass


class DependencyNotFoundError(ResolverError):
    """Raised when an edge or a lookup references a missing or disabled dependency."""

    pass


class CircularDependencyError(ResolverError):
    """Raised when the dependency graph is not acyclic.

    Attributes:
        cycle: Names of the dependencies forming the cycle, with the first name
            repeated at the end (``["a", "b", "a"]``).
    """

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"circular dependency: {' -> '.join(cycle)}")


class InvalidConfigError(ResolverError):
    """Raised when the installer configuration is malformed or incomplete."""

    pass


class ProductNotFoundError(ResolverError):
    """Raised when a product is not declared in the installer configuration."""

    pass


class IntegrationError(ResolverError):
    """Base class for errors found while inspecting integrations.

    Attributes:
        dependency: Name of the dependency being inspected, when known.
        product: Product the dependency belongs to, when known.
        integration: Offending integration name(s), when known.
        expression: The requirement expression text, when relevant.
    """

    def __init__(
        self,
        message: str,
        *,
        dependency: Optional[str] = None,
        product: Optional[str] = None,
        integration: Optional[str] = None,
        expression: Optional[str] = None,
    ):
        self.message = message
        self.dependency = dependency
        self.product = product
        self.integration = integration
        self.expression = expression
        super().__init__(self._describe())

    def with_context(self, **context) -> "IntegrationError":
        """Return a copy of this error of the same class, with extra context filled in."""
        fields = {
            "dependency": self.dependency,
            "product": self.product,
            "integration": self.integration,
            "expression": self.expression,
        }
        fields.update({k: v for k, v in context.items() if v is not None})
        return type(self)(self.message, **fields)

    def _describe(self) -> str:
        details = []
        if self.integration:
            details.append(f"integration {self.integration!r}")
        if self.dependency:
            details.append(f"in {self.dependency!r} dependency")
        if self.product:
            details.append(f"({self.product!r} product)")
        if self.expression:
            details.append(f"using expression {self.expression!r}")
        if not details:
            return self.message
        return f"{self.message}: {' '.join(details)}"


class InvalidExpressionError(IntegrationError):
    """Raised when a requirement expression can't be parsed."""

    pass


class UnknownIntegrationError(IntegrationError):
    """Raised when an integration name is not part of the registered catalog."""

    pass


class MissingIntegrationsError(IntegrationError):
    """Raised when a requirement is unmet and nothing in the plan provides it."""

    pass


class PrerequisiteIntegrationError(IntegrationError):
    """Raised when a requirement is unmet but a later dependency provides it."""

    pass


class ConfiguredIntegrationError(IntegrationError):
    """Raised when a dependency would overwrite an integration that is already configured."""

    pass
