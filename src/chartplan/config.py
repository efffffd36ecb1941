"""Installer configuration, loaded from YAML.

The planner reads three things from the configuration: the installer's default
namespace, which products are enabled, and each product's namespace. The
document is rooted at the application name::

    tssc:
      namespace: tssc
      settings:
        crc: false
      products:
        - name: Advanced Cluster Security
          enabled: true
          namespace: tssc-acs
          properties: {}
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from chartplan.errors import InvalidConfigError, ProductNotFoundError

__all__ = ["Config", "Product", "DEFAULT_ROOT_KEY"]

DEFAULT_ROOT_KEY = "tssc"


@dataclass(frozen=True)
class Product:
    """A product entry of the configuration.

    Attributes:
        name: Product name, matched against the charts' product-name annotation.
        enabled: Whether the product's charts are part of the installation.
        namespace: Namespace used by charts sharing the product namespace.
        properties: Arbitrary product settings, passed through untouched.
    """

    name: str
    enabled: bool = False
    namespace: Optional[str] = None
    properties: dict[str, Any] = field(default_factory=dict)

    def validate(self):
        if not self.name:
            raise InvalidConfigError("invalid configuration: product without a name")
        if not isinstance(self.enabled, bool):
            raise InvalidConfigError(
                f"invalid configuration: enabled of product {self.name!r} must be a boolean"
            )
        if self.namespace is not None and not isinstance(self.namespace, str):
            raise InvalidConfigError(
                f"invalid configuration: namespace of product {self.name!r} must be a string"
            )


@dataclass(frozen=True)
class Config:
    """Root configuration for the installer.

    Attributes:
        namespace: The installer's namespace, default target of every chart.
        settings: Installer-wide settings.
        products: Product entries, in declaration order.
    """

    namespace: str
    settings: dict[str, Any] = field(default_factory=dict)
    products: tuple[Product, ...] = ()

    @staticmethod
    def from_yaml(payload: Union[str, bytes], root_key: str = DEFAULT_ROOT_KEY) -> "Config":
        """Load and validate a configuration from a YAML payload.

        Raises:
            InvalidConfigError: If the payload is empty, malformed or incomplete.
        """
        if not payload or not payload.strip():
            raise InvalidConfigError("empty configuration")
        try:
            document = yaml.safe_load(payload)
        except yaml.YAMLError as err:
            raise InvalidConfigError(f"failed to unmarshal configuration: {err}") from err

        if not isinstance(document, dict):
            raise InvalidConfigError("invalid configuration: root must be a mapping")
        if root_key not in document:
            raise InvalidConfigError(f"invalid configuration: missing {root_key!r} key")
        section = document[root_key]
        if not isinstance(section, dict):
            raise InvalidConfigError(f"invalid configuration: {root_key!r} must be a mapping")

        config = Config(
            namespace=section.get("namespace") or "",
            settings=section.get("settings"),
            products=tuple(_make_product(entry) for entry in section.get("products") or []),
        )
        config.validate()
        return config

    @staticmethod
    def from_file(path: Union[str, Path], root_key: str = DEFAULT_ROOT_KEY) -> "Config":
        try:
            payload = Path(path).read_text(encoding="utf-8")
        except OSError as err:
            raise InvalidConfigError(f"can't read configuration {str(path)!r}: {err}") from err
        return Config.from_yaml(payload, root_key)

    def validate(self):
        """Check the configuration for missing or conflicting fields.

        Raises:
            InvalidConfigError: On the first problem found.
        """
        if not self.namespace:
            raise InvalidConfigError("invalid configuration: missing namespace")
        if not isinstance(self.settings, dict):
            raise InvalidConfigError("invalid configuration: missing settings")

        seen = set()
        for product in self.products:
            product.validate()
            if product.name in seen:
                raise InvalidConfigError(
                    f"invalid configuration: duplicate product {product.name!r}"
                )
            seen.add(product.name)

    def get_product(self, name: str) -> Product:
        for product in self.products:
            if product.name == name:
                return product
        raise ProductNotFoundError(f"product {name!r} not found")

    def enabled_products(self) -> list[Product]:
        return [product for product in self.products if product.enabled]

    def enabled_product_names(self) -> list[str]:
        return [product.name for product in self.enabled_products()]

    def product_namespace(self, name: str) -> str:
        """Return the namespace configured for a product.

        Raises:
            ProductNotFoundError: If the product is not configured.
            InvalidConfigError: If the product has no namespace.
        """
        product = self.get_product(name)
        if not product.namespace:
            raise InvalidConfigError(f"product {name!r} doesn't declare a namespace")
        return product.namespace


def _make_product(entry: Any) -> Product:
    if not isinstance(entry, dict):
        raise InvalidConfigError(f"invalid configuration: product entry {entry!r} must be a mapping")
    properties = entry.get("properties") or {}
    if not isinstance(properties, dict):
        raise InvalidConfigError(
            f"invalid configuration: properties of product {entry.get('name')!r} must be a mapping"
        )
    return Product(
        name=entry.get("name") or "",
        enabled=entry.get("enabled", False),
        namespace=entry.get("namespace"),
        properties=properties,
    )
