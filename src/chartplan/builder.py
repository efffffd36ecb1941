"""High level entry point for planning an installation."""

import logging
import threading
from typing import Optional

from chartplan.annotations import AnnotationKeys
from chartplan.chart_source import ChartSource
from chartplan.collection import Collection, make_collection
from chartplan.config import Config
from chartplan.expression import ExpressionEvaluator
from chartplan.integrations import IntegrationSource, IntegrationsInspector, configured_state
from chartplan.resolver import Resolver
from chartplan.topology import Topology

__all__ = ["TopologyBuilder"]

logger = logging.getLogger(__name__)


class TopologyBuilder:
    """Build validated topologies from a chart source and an integration source.

    This is the single entry point used by status reporting, deployment and
    automation; they all observe the same validated order.

    Example:
        >>> builder = TopologyBuilder(
        ...     DirectoryChartSource("installer"),
        ...     StaticIntegrationSource(["acs", "quay"]),
        ... )
        >>> topology = builder.build(Config.from_file("installer/config.yaml"))
        >>> [d.name for d in topology.dependencies()]
    """

    def __init__(
        self,
        chart_source: ChartSource,
        integration_source: IntegrationSource,
        keys: Optional[AnnotationKeys] = None,
    ):
        self._chart_source = chart_source
        self._integration_source = integration_source
        self._keys = keys or AnnotationKeys.for_app("tssc")
        self._collection: Optional[Collection] = None
        self._lock = threading.Lock()

    def collection(self) -> Collection:
        """Return the collection of every chart, loading it on first use."""
        with self._lock:
            if self._collection is None:
                self._collection = make_collection(self._chart_source.charts(), self._keys)
            return self._collection

    def build(self, config: Config) -> Topology:
        """Resolve and validate the installation plan for a configuration.

        Args:
            config: The installer configuration, selecting products and namespaces.

        Returns:
            The frozen topology, in installation order.

        Raises:
            ResolverError: The first error met by any planning stage; no
                partial topology is returned.
        """
        collection = self.collection().filter(config.enabled_product_names())
        topology = Resolver(config, collection).resolve()

        names = self._integration_source.integration_names()
        state = configured_state(names, self._integration_source.configured_integrations(config))
        IntegrationsInspector(state, ExpressionEvaluator(names)).inspect(topology)

        logger.info(f"Installation plan ({len(topology)} dependencies): {topology.names()}")
        return topology
