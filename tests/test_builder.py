from dataclasses import replace

import pytest

from chartplan.builder import TopologyBuilder
from chartplan.chart_source import ChartSource, DirectoryChartSource, StaticChartSource
from chartplan.config import Config
from chartplan.errors import (
    CircularDependencyError,
    DependencyNotFoundError,
    MissingIntegrationsError,
)
from chartplan.integrations import StaticIntegrationSource


class CountingChartSource(ChartSource):
    def __init__(self, records):
        self.records = records
        self.calls = 0

    def charts(self):
        self.calls += 1
        return list(self.records)


@pytest.fixture
def charts(make_chart):
    return [
        make_chart("tssc-openshift", weight="-100"),
        make_chart("tssc-subscriptions", depends_on="tssc-openshift"),
        make_chart(
            "tssc-acs",
            product="Advanced Cluster Security",
            depends_on="tssc-openshift",
            use_product_namespace="true",
            provides="acs",
        ),
        make_chart(
            "tssc-acs-test",
            depends_on="tssc-acs",
            weight="100",
            use_product_namespace="Advanced Cluster Security",
        ),
        make_chart(
            "tssc-tpa",
            product="Trusted Profile Analyzer",
            depends_on="tssc-openshift",
            use_product_namespace="true",
            provides="trustification",
        ),
        make_chart(
            "tssc-dh",
            product="Developer Hub",
            depends_on="tssc-openshift, tssc-acs",
            use_product_namespace="true",
            requires="acs && (github || gitlab)",
        ),
    ]


@pytest.fixture
def integrations(integration_names):
    return StaticIntegrationSource(integration_names, configured=["github"])


def test_build(charts, integrations, config):
    builder = TopologyBuilder(StaticChartSource(charts), integrations)

    topology = builder.build(config)

    assert [(d.name, d.namespace) for d in topology.dependencies()] == [
        ("tssc-openshift", "tssc"),
        ("tssc-acs", "tssc-acs"),
        ("tssc-dh", "tssc-dh"),
        ("tssc-subscriptions", "tssc"),
        ("tssc-acs-test", "tssc-acs"),
    ]
    assert topology.frozen


def test_build_is_idempotent(charts, integrations, config):
    builder = TopologyBuilder(StaticChartSource(charts), integrations)

    first = builder.build(config)
    second = builder.build(config)

    assert first.dependencies() == second.dependencies()
    assert first is not second


def test_collection_is_loaded_once(charts, integrations, config):
    source = CountingChartSource(charts)
    builder = TopologyBuilder(source, integrations)

    builder.build(config)
    builder.build(config)

    assert source.calls == 1
    assert builder.collection().get_product_name_for_integration("trustification") == (
        "Trusted Profile Analyzer"
    )


def test_enabling_a_product_adds_its_dependencies(charts, integrations, config):
    products = tuple(replace(p, enabled=True) for p in config.products)
    builder = TopologyBuilder(StaticChartSource(charts), integrations)

    topology = builder.build(replace(config, products=products))

    assert topology.get_dependency("tssc-tpa").namespace == "tssc-tpa"


def test_missing_integration_aborts_the_build(charts, integration_names, config):
    builder = TopologyBuilder(StaticChartSource(charts), StaticIntegrationSource(integration_names))

    with pytest.raises(MissingIntegrationsError, match="'github, gitlab'"):
        builder.build(config)


def test_disabling_a_depended_on_product_aborts_the_build(charts, integrations, config):
    products = tuple(
        replace(p, enabled=False) if p.name == "Advanced Cluster Security" else p
        for p in config.products
    )
    builder = TopologyBuilder(StaticChartSource(charts), integrations)

    with pytest.raises(DependencyNotFoundError, match="'tssc-acs'"):
        builder.build(replace(config, products=products))


def test_cycle_aborts_the_build(make_chart, integrations, config):
    source = StaticChartSource([make_chart("a", depends_on="b"), make_chart("b", depends_on="a")])

    with pytest.raises(CircularDependencyError):
        TopologyBuilder(source, integrations).build(config)


def test_build_from_directory(tmp_path, keys, integrations):
    for name, annotations in {
        "tssc-openshift": {},
        "tssc-acs": {
            keys.product_name: "Advanced Cluster Security",
            keys.depends_on: "tssc-openshift",
            keys.integrations_provided: "acs",
            keys.use_product_namespace: "true",
        },
        "tssc-dh": {
            keys.product_name: "Developer Hub",
            keys.depends_on: "tssc-openshift, tssc-acs",
            keys.integrations_required: "acs",
        },
    }.items():
        chart_dir = tmp_path / "charts" / name
        chart_dir.mkdir(parents=True)
        lines = [f"name: {name}", "annotations:"] + [
            f'  {key}: "{value}"' for key, value in annotations.items()
        ]
        (chart_dir / "Chart.yaml").write_text("\n".join(lines) + "\n")
    (tmp_path / "config.yaml").write_text(
        """\
tssc:
  namespace: installer
  settings: {}
  products:
    - name: Advanced Cluster Security
      enabled: true
      namespace: tssc-acs
    - name: Developer Hub
      enabled: true
      namespace: tssc-dh
"""
    )

    builder = TopologyBuilder(DirectoryChartSource(tmp_path), integrations, keys)
    topology = builder.build(Config.from_file(tmp_path / "config.yaml"))

    assert [(d.name, d.namespace) for d in topology] == [
        ("tssc-openshift", "installer"),
        ("tssc-acs", "tssc-acs"),
        ("tssc-dh", "installer"),
    ]
