"""Installation planning for multi-product chart collections.

Chartplan turns a set of installable charts, each annotated with the product it
belongs to, the charts it depends on and the integrations it requires or
provides, into one validated installation plan. Planning is a pure, in-memory
stage: it never touches the cluster, it either returns a topology or raises a
precise error.

Key Features:
    - Typed parsing of chart annotations, once, when the collection is built
    - Deterministic topological ordering with weight and name tie-breaks
    - Product enablement and per-product namespaces read from configuration
    - Boolean integration requirements checked in installation order

Basic Usage:
    >>> from chartplan.builder import TopologyBuilder
    >>> from chartplan.chart_source import DirectoryChartSource
    >>> from chartplan.config import Config
    >>> from chartplan.integrations import StaticIntegrationSource
    >>>
    >>> builder = TopologyBuilder(
    ...     DirectoryChartSource("installer"),
    ...     StaticIntegrationSource(["acs", "github", "quay"], configured=["github"]),
    ... )
    >>> topology = builder.build(Config.from_file("installer/config.yaml"))
    >>> for dependency in topology:
    ...     print(dependency.name, dependency.namespace)

The package consists of several modules:
    - annotations: Annotation keys and parsing into dependencies
    - domain: Core domain models (ChartRecord, Dependency)
    - collection: The validated set of dependencies
    - resolver: Topological ordering and namespace assignment
    - topology: The resolved installation plan
    - expression: Integration requirement expressions
    - integrations: Integration sources and the topology inspector
    - builder: The planning entry point
    - chart_source: Chart discovery
    - config: Installer configuration
    - errors: Planning exceptions
"""
