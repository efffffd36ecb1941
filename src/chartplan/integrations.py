"""Inspection of the integrations required and provided by a topology.

Integrations are external services (a container registry, a source forge, a
security scanner...) a dependency either needs to find already configured, or
configures itself once installed. The inspector walks a topology in
installation order, keeping the configured state of every integration, and
asserts that each requirement is satisfied by the environment or by an earlier
dependency, and that no integration is provided twice.
"""

import logging
from abc import ABC, abstractmethod
from functools import reduce
from typing import Iterable, Mapping, Optional

from chartplan.config import Config
from chartplan.domain import Dependency
from chartplan.errors import (
    ConfiguredIntegrationError,
    IntegrationError,
    MissingIntegrationsError,
    PrerequisiteIntegrationError,
    UnknownIntegrationError,
)
from chartplan.expression import ExpressionEvaluator
from chartplan.topology import Topology

__all__ = [
    "IntegrationSource",
    "StaticIntegrationSource",
    "IntegrationsInspector",
    "configured_state",
]

logger = logging.getLogger(__name__)


class IntegrationSource(ABC):
    """The catalog of integrations, and which of them exist in the environment."""

    @abstractmethod
    def integration_names(self) -> list[str]:
        """Return every valid integration name."""

    @abstractmethod
    def configured_integrations(self, config: Config) -> list[str]:
        """Return the names of the integrations already configured in the environment."""


class StaticIntegrationSource(IntegrationSource):
    """An integration source backed by fixed lists.

    Example:
        >>> source = StaticIntegrationSource(["acs", "quay", "github"], configured=["github"])
    """

    def __init__(self, names: Iterable[str], configured: Iterable[str] = ()):
        self._names = list(dict.fromkeys(names))
        self._configured = list(configured)

    def integration_names(self) -> list[str]:
        return list(self._names)

    def configured_integrations(self, config: Config) -> list[str]:
        return list(self._configured)


def configured_state(names: Iterable[str], configured: Iterable[str]) -> dict[str, bool]:
    """Seed the configured state: configured integrations are true, every other name false."""
    state = {name: True for name in configured}
    for name in names:
        state.setdefault(name, False)
    return state


class IntegrationsInspector:
    """Walks a topology, folding each dependency into the configured state.

    Args:
        state: Initial configured state, see :func:`configured_state`. Not modified.
        evaluator: Evaluator compiled against the integration catalog.
    """

    def __init__(self, state: Mapping[str, bool], evaluator: ExpressionEvaluator):
        self._state = dict(state)
        self._evaluator = evaluator

    def inspect(self, topology: Topology) -> dict[str, bool]:
        """Check every dependency of the topology, in installation order.

        Returns:
            The configured state once the whole topology is installed.

        Raises:
            InvalidExpressionError: If a requirement expression is malformed.
            UnknownIntegrationError: If an unregistered integration is referenced or provided.
            MissingIntegrationsError: If a requirement is not met by anything in the plan.
            PrerequisiteIntegrationError: If a requirement is met only by a later dependency.
            ConfiguredIntegrationError: If a dependency provides an already configured integration.
        """
        providers = _providers_by_integration(topology)
        return reduce(
            lambda state, entry: self._step(providers, state, *entry),
            enumerate(topology),
            dict(self._state),
        )

    def _step(
        self,
        providers: dict[str, tuple[int, Dependency]],
        state: dict[str, bool],
        position: int,
        dependency: Dependency,
    ) -> dict[str, bool]:
        if dependency.integrations_required:
            self._check_required(providers, state, position, dependency)

        updated = dict(state)
        for provided in dependency.integrations_provided:
            if provided not in self._evaluator.names:
                raise UnknownIntegrationError(
                    "unknown integration",
                    integration=provided,
                    dependency=dependency.name,
                    product=dependency.product_name,
                )
            if updated.get(provided, False):
                raise ConfiguredIntegrationError(
                    "integration is already configured and can't be overwritten",
                    integration=provided,
                    dependency=dependency.name,
                    product=dependency.product_name,
                )
            logger.debug(f"Integration {provided!r} is provided by {dependency.name!r}")
            updated[provided] = True
        return updated

    def _check_required(
        self,
        providers: dict[str, tuple[int, Dependency]],
        state: dict[str, bool],
        position: int,
        dependency: Dependency,
    ):
        expression = dependency.integrations_required
        try:
            if self._evaluator.evaluate(expression, state):
                return
            referenced = self._evaluator.names_in(expression)
        except IntegrationError as err:
            raise err.with_context(
                dependency=dependency.name, product=dependency.product_name
            ) from err

        unmet = [name for name in referenced if not state.get(name, False)]
        if not unmet:
            raise MissingIntegrationsError(
                "requirement is false while these integrations are configured",
                integration=", ".join(referenced),
                dependency=dependency.name,
                product=dependency.product_name,
                expression=expression,
            )
        for name in unmet:
            provider = _later_provider(providers, name, position)
            if provider is not None:
                raise PrerequisiteIntegrationError(
                    f"required integration is only provided later by {provider.name!r}",
                    integration=name,
                    dependency=dependency.name,
                    product=dependency.product_name,
                    expression=expression,
                )
        raise MissingIntegrationsError(
            "required integrations are missing",
            integration=", ".join(unmet),
            dependency=dependency.name,
            product=dependency.product_name,
            expression=expression,
        )


def _providers_by_integration(topology: Topology) -> dict[str, tuple[int, Dependency]]:
    providers: dict[str, tuple[int, Dependency]] = {}
    for position, dependency in enumerate(topology):
        for provided in dependency.integrations_provided:
            providers.setdefault(provided, (position, dependency))
    return providers


def _later_provider(
    providers: dict[str, tuple[int, Dependency]], name: str, position: int
) -> Optional[Dependency]:
    if name not in providers:
        return None
    provider_position, provider = providers[name]
    return provider if provider_position > position else None
