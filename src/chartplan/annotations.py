"""Annotation keys and the parsing of raw chart annotations into dependencies.

Charts describe their place in the installation through annotations keyed by a
reverse repository URI prefix, for instance::

    annotations:
      tssc.redhat-appstudio.github.com/product-name: "Developer Hub"
      tssc.redhat-appstudio.github.com/depends-on: "tssc-openshift, tssc-acs"
      tssc.redhat-appstudio.github.com/weight: "10"
      tssc.redhat-appstudio.github.com/use-product-namespace: "true"
      tssc.redhat-appstudio.github.com/integrations-provided: "acs"
      tssc.redhat-appstudio.github.com/integrations-required: "acs && (github || gitlab)"

Parsing happens once, when the collection is built, so the resolver and the
inspector only ever see typed :class:`~chartplan.domain.Dependency` objects.
"""

import re
from dataclasses import dataclass
from typing import Optional

from chartplan.domain import ChartRecord, Dependency
from chartplan.errors import InvalidCollectionError

__all__ = ["AnnotationKeys", "parse_dependency", "parse_list"]

SUFFIX_PRODUCT_NAME = "product-name"
SUFFIX_DEPENDS_ON = "depends-on"
SUFFIX_WEIGHT = "weight"
SUFFIX_USE_PRODUCT_NAMESPACE = "use-product-namespace"
SUFFIX_INTEGRATIONS_PROVIDED = "integrations-provided"
SUFFIX_INTEGRATIONS_REQUIRED = "integrations-required"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]([-A-Za-z0-9_.]*[A-Za-z0-9])?$")
_WEIGHT_PATTERN = re.compile(r"^[+-]?\d+$")
_TRUE_VALUES = {"true", "yes", "1"}
_FALSE_VALUES = {"false", "no", "0", ""}


@dataclass(frozen=True)
class AnnotationKeys:
    """The set of annotation keys understood by the planner.

    Attributes:
        prefix: Reverse repository URI shared by all keys, e.g.
            ``tssc.redhat-appstudio.github.com``.
    """

    prefix: str

    @staticmethod
    def for_app(
        name: str, org: str = "redhat-appstudio", domain: str = "github.com"
    ) -> "AnnotationKeys":
        """Build the key set for an application.

        Example:
            >>> AnnotationKeys.for_app("tssc").depends_on
            'tssc.redhat-appstudio.github.com/depends-on'
        """
        return AnnotationKeys(f"{name}.{org}.{domain}")

    def _key(self, suffix: str) -> str:
        return f"{self.prefix}/{suffix}"

    @property
    def product_name(self) -> str:
        return self._key(SUFFIX_PRODUCT_NAME)

    @property
    def depends_on(self) -> str:
        return self._key(SUFFIX_DEPENDS_ON)

    @property
    def weight(self) -> str:
        return self._key(SUFFIX_WEIGHT)

    @property
    def use_product_namespace(self) -> str:
        return self._key(SUFFIX_USE_PRODUCT_NAMESPACE)

    @property
    def integrations_provided(self) -> str:
        return self._key(SUFFIX_INTEGRATIONS_PROVIDED)

    @property
    def integrations_required(self) -> str:
        return self._key(SUFFIX_INTEGRATIONS_REQUIRED)


def parse_list(value: str) -> tuple[str, ...]:
    """Split a comma separated annotation value into an ordered set of names.

    Example:
        >>> parse_list(" a, b,,a ")
        ('a', 'b')
    """
    seen = {}
    for item in value.split(","):
        item = item.strip()
        if item:
            seen.setdefault(item, None)
    return tuple(seen)


def parse_dependency(record: ChartRecord, keys: AnnotationKeys) -> Dependency:
    """Parse a raw chart record into a :class:`Dependency`.

    Args:
        record: The chart as yielded by the chart source.
        keys: Annotation keys to read.

    Returns:
        The typed dependency, with an unresolved namespace.

    Raises:
        InvalidCollectionError: If the name is malformed, the weight is not an
            integer, or a product namespace is requested without a product.
    """
    name = record.name
    if not isinstance(name, str) or not _NAME_PATTERN.match(name):
        raise InvalidCollectionError(f"invalid chart name {name!r}")

    annotations = record.annotations
    product_name = annotations.get(keys.product_name, "").strip() or None

    use_product_namespace, namespace_product = _parse_product_namespace(
        name, annotations.get(keys.use_product_namespace, ""), product_name
    )

    depends_on = parse_list(annotations.get(keys.depends_on, ""))
    for dependency_name in depends_on:
        if not _NAME_PATTERN.match(dependency_name):
            raise InvalidCollectionError(
                f"invalid name {dependency_name!r} in {keys.depends_on!r} of {name!r}"
            )

    return Dependency(
        name=name,
        namespace=record.namespace or "",
        product_name=product_name,
        depends_on=depends_on,
        weight=_parse_weight(name, annotations.get(keys.weight, "")),
        use_product_namespace=use_product_namespace,
        namespace_product=namespace_product,
        integrations_provided=parse_list(annotations.get(keys.integrations_provided, "")),
        integrations_required=annotations.get(keys.integrations_required, "").strip(),
    )


def _parse_weight(name: str, value: str) -> int:
    value = value.strip()
    if not value:
        return 0
    if not _WEIGHT_PATTERN.match(value):
        raise InvalidCollectionError(f"invalid weight {value!r} in {name!r}, must be an integer")
    return int(value)


def _parse_product_namespace(
    name: str, value: str, product_name: Optional[str]
) -> tuple[bool, Optional[str]]:
    """Interpret the use-product-namespace annotation.

    A boolean selects the chart's own product. Any other value names the
    product whose namespace the chart shares.
    """
    value = value.strip()
    if value.lower() in _FALSE_VALUES:
        return False, None
    if value.lower() in _TRUE_VALUES:
        if product_name is None:
            raise InvalidCollectionError(
                f"{name!r} uses a product namespace but doesn't declare a product name"
            )
        return True, product_name
    return True, value
