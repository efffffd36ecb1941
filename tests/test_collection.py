import pytest

from chartplan.collection import Collection, make_collection
from chartplan.errors import DependencyNotFoundError, InvalidCollectionError


@pytest.fixture
def collection(make_chart, keys) -> Collection:
    return make_collection(
        [
            make_chart("tssc-openshift"),
            make_chart("tssc-acs", product="Advanced Cluster Security", provides="acs"),
            make_chart("tssc-dh", product="Developer Hub", depends_on="tssc-acs"),
            make_chart("tssc-tpa", product="Trusted Profile Analyzer", provides="trustification"),
        ],
        keys,
    )


def test_preserves_discovery_order(collection):
    assert [d.name for d in collection] == ["tssc-openshift", "tssc-acs", "tssc-dh", "tssc-tpa"]
    assert len(collection) == 4


def test_duplicate_names_raise(make_chart, keys):
    with pytest.raises(InvalidCollectionError, match="Duplicate dependency name 'a'"):
        make_collection([make_chart("a"), make_chart("b"), make_chart("a", product="X")], keys)


def test_malformed_record_raises(make_chart, keys):
    with pytest.raises(InvalidCollectionError):
        make_collection([make_chart("a", weight="heavy")], keys)


def test_product_name_for_integration(collection):
    assert collection.get_product_name_for_integration("acs") == "Advanced Cluster Security"
    assert collection.get_product_name_for_integration("trustification") == "Trusted Profile Analyzer"
    assert collection.get_product_name_for_integration("quay") == ""


def test_integration_of_product_agnostic_dependency_has_no_product(make_chart, keys):
    collection = make_collection([make_chart("tssc-infrastructure", provides="nexus")], keys)
    assert collection.get_product_name_for_integration("nexus") == ""


def test_lookup(collection):
    assert "tssc-dh" in collection
    assert collection["tssc-dh"].product_name == "Developer Hub"
    with pytest.raises(DependencyNotFoundError, match="'missing'"):
        collection.get_dependency("missing")


def test_product_names(collection):
    assert collection.product_names() == [
        "Advanced Cluster Security",
        "Developer Hub",
        "Trusted Profile Analyzer",
    ]


def test_filter_keeps_enabled_products_and_product_agnostic_dependencies(collection):
    filtered = collection.filter(["Advanced Cluster Security", "Developer Hub"])

    assert [d.name for d in filtered] == ["tssc-openshift", "tssc-acs", "tssc-dh"]
    assert len(collection) == 4


def test_filter_with_nothing_enabled(collection):
    assert [d.name for d in collection.filter([])] == ["tssc-openshift"]
