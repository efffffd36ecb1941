from typing import Optional

import pytest

from chartplan.annotations import AnnotationKeys
from chartplan.config import Config, Product
from chartplan.domain import ChartRecord

INTEGRATIONS = [
    "acs",
    "artifactory",
    "azure",
    "bitbucket",
    "github",
    "gitlab",
    "jenkins",
    "nexus",
    "quay",
    "trustification",
]


@pytest.fixture
def keys() -> AnnotationKeys:
    return AnnotationKeys.for_app("tssc")


@pytest.fixture
def integration_names() -> list[str]:
    return list(INTEGRATIONS)


@pytest.fixture
def make_chart(keys):
    def make(
        name: str,
        product: Optional[str] = None,
        depends_on: str = "",
        weight: Optional[str] = None,
        use_product_namespace: Optional[str] = None,
        provides: str = "",
        requires: str = "",
    ) -> ChartRecord:
        annotations = {}
        if product is not None:
            annotations[keys.product_name] = product
        if depends_on:
            annotations[keys.depends_on] = depends_on
        if weight is not None:
            annotations[keys.weight] = weight
        if use_product_namespace is not None:
            annotations[keys.use_product_namespace] = use_product_namespace
        if provides:
            annotations[keys.integrations_provided] = provides
        if requires:
            annotations[keys.integrations_required] = requires
        return ChartRecord(name, annotations=annotations)

    return make


@pytest.fixture
def config() -> Config:
    return Config(
        namespace="tssc",
        settings={},
        products=(
            Product("Advanced Cluster Security", enabled=True, namespace="tssc-acs"),
            Product("Developer Hub", enabled=True, namespace="tssc-dh"),
            Product("Trusted Profile Analyzer", enabled=False, namespace="tssc-tpa"),
            Product("Konflux", enabled=True),
        ),
    )
