"""
Attribute catalog for the filter builder.

The catalog is static configuration: it enumerates the selectable visitor
attributes, their declared types and the operators legal for each. It is
audited when it is built, so the operator vocabulary can never collide with
the connector keywords used by the wire format.
"""

import functools
import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from segment_filters.core.errors import CatalogError
from segment_filters.domain.enums import (
    OPERATORS_BY_TYPE,
    WIRE_CONNECTORS,
    AttributeType,
    Operator,
)

if TYPE_CHECKING:
    from segment_filters.core.config import Settings

logger = logging.getLogger(__name__)


class AttributeDefinition(BaseModel):
    """One selectable attribute."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, max_length=255, examples=["country"])
    label: str = Field(..., min_length=1, max_length=255, examples=["Country"])
    type: AttributeType = Field(default=AttributeType.STRING, examples=[AttributeType.ENUM])
    operators: tuple[Operator, ...] = Field(
        default=(),
        description="Legal operators; defaults to the operators of the declared type",
    )
    placeholder: str | None = None
    group: str | None = Field(default=None, examples=["location"])

    @field_validator("operators", mode="before")
    @classmethod
    def resolve_operators(cls, v: Any) -> tuple[Operator, ...]:
        """Resolve operator names (aliases included) and audit connector collisions."""
        if v is None:
            return ()
        if isinstance(v, str):
            v = [v]
        resolved = []
        for name in v:
            if isinstance(name, str) and name.strip().lower() in WIRE_CONNECTORS:
                raise ValueError(f"Operator name '{name}' collides with a connector keyword")
            operator = Operator.parse(name)
            if operator is None:
                raise ValueError(f"Unknown operator '{name}'")
            resolved.append(operator)
        return tuple(resolved)

    @model_validator(mode="before")
    @classmethod
    def default_operators(cls, data: Any) -> Any:
        """Fill ``operators`` from the declared type when none are given."""
        if isinstance(data, Mapping) and not data.get("operators"):
            try:
                attribute_type = AttributeType(data.get("type", AttributeType.STRING))
            except ValueError:
                # Reported by the ``type`` field itself
                return data
            return {**data, "operators": OPERATORS_BY_TYPE[attribute_type]}
        return data


class AttributeCatalog:
    """
    Ordered, read-only collection of attribute definitions keyed by ``key``.

    Example:
        >>> catalog = AttributeCatalog.from_definitions(
        ...     [{"key": "device", "label": "Device", "type": "enum"}]
        ... )
        >>> catalog.default_operator("device")
        <Operator.IS: 'is'>
    """

    def __init__(self, definitions: Iterable[AttributeDefinition]) -> None:
        self._attributes: dict[str, AttributeDefinition] = {}
        for definition in definitions:
            if definition.key in self._attributes:
                raise CatalogError(
                    f"Duplicate attribute key '{definition.key}'",
                    details={"key": definition.key},
                )
            self._attributes[definition.key] = definition

    @classmethod
    def from_definitions(
        cls, definitions: Iterable[AttributeDefinition | Mapping[str, Any]]
    ) -> "AttributeCatalog":
        """
        Build a catalog from models or plain dicts.

        Raises:
            CatalogError: If any definition is invalid
        """
        parsed = []
        for index, definition in enumerate(definitions):
            if isinstance(definition, AttributeDefinition):
                parsed.append(definition)
                continue
            try:
                parsed.append(AttributeDefinition.model_validate(definition))
            except ValidationError as e:
                raise CatalogError(
                    f"Invalid attribute definition at index {index}",
                    details={"index": index, "errors": e.errors(include_url=False)},
                ) from e
        return cls(parsed)

    @classmethod
    def from_json(cls, text: str) -> "AttributeCatalog":
        """Build a catalog from a JSON array of definitions."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogError(
                "Attribute catalog is not valid JSON", details={"error": str(e)}
            ) from e
        if not isinstance(data, list):
            raise CatalogError(
                "Attribute catalog must be a JSON array", details={"type": type(data).__name__}
            )
        return cls.from_definitions(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "AttributeCatalog":
        catalog = cls.from_json(Path(path).read_text(encoding="utf-8"))
        logger.info("Loaded attribute catalog from %s: %d attributes", path, len(catalog))
        return catalog

    def __contains__(self, key: object) -> bool:
        return key in self._attributes

    def __iter__(self) -> Iterator[AttributeDefinition]:
        return iter(self._attributes.values())

    def __len__(self) -> int:
        return len(self._attributes)

    def get(self, key: str) -> AttributeDefinition | None:
        return self._attributes.get(key)

    def operators_for(self, key: str) -> tuple[Operator, ...]:
        """Legal operators for an attribute; string operators for unknown keys."""
        definition = self._attributes.get(key)
        if definition is None:
            return OPERATORS_BY_TYPE[AttributeType.STRING]
        return definition.operators

    def default_operator(self, key: str) -> Operator:
        """Operator a condition starts with after its attribute is chosen."""
        operators = self.operators_for(key)
        return operators[0] if operators else Operator.IS

    def label_for(self, key: str) -> str:
        definition = self._attributes.get(key)
        return definition.label if definition else key


# Visitor attributes available for filtering
DEFAULT_ATTRIBUTES: tuple[dict[str, Any], ...] = (
    # Location
    {"key": "country", "label": "Country", "type": "enum", "group": "location"},
    {"key": "region", "label": "Region", "type": "enum", "group": "location"},
    {"key": "city", "label": "City", "type": "enum", "group": "location"},
    # Pages
    {"key": "page", "label": "Page", "type": "string", "group": "page"},
    {"key": "entry_page", "label": "Entry Page", "type": "string", "group": "page"},
    {"key": "exit_page", "label": "Exit Page", "type": "string", "group": "page"},
    {"key": "hostname", "label": "Hostname", "type": "string", "group": "page"},
    # Sources
    {"key": "source", "label": "Traffic Source", "type": "string", "group": "source"},
    {"key": "referrer", "label": "Referrer", "type": "string", "group": "source"},
    {"key": "channel", "label": "Traffic Channel", "type": "enum", "group": "source"},
    {"key": "utm_medium", "label": "UTM Medium", "type": "string", "group": "utm"},
    {"key": "utm_source", "label": "UTM Source", "type": "string", "group": "utm"},
    {"key": "utm_campaign", "label": "UTM Campaign", "type": "string", "group": "utm"},
    {"key": "utm_term", "label": "UTM Term", "type": "string", "group": "utm"},
    {"key": "utm_content", "label": "UTM Content", "type": "string", "group": "utm"},
    # Devices
    {"key": "browser", "label": "Browser", "type": "enum", "group": "device"},
    {"key": "browser_version", "label": "Browser Version", "type": "string", "group": "device"},
    {"key": "os", "label": "Operating System", "type": "enum", "group": "device"},
    {"key": "os_version", "label": "OS Version", "type": "string", "group": "device"},
    {"key": "device", "label": "Device", "type": "enum", "group": "device"},
    {"key": "screen_size", "label": "Screen Size", "type": "enum", "group": "device"},
    # Behaviour
    {"key": "goal", "label": "Goal", "type": "enum", "group": "goal"},
    {"key": "pageviews", "label": "Pageviews", "type": "number", "group": "behaviour"},
    {"key": "events", "label": "Events", "type": "number", "group": "behaviour"},
    {
        "key": "visit_duration",
        "label": "Visit Duration (seconds)",
        "type": "number",
        "group": "behaviour",
    },
    {"key": "is_bounce", "label": "Is Bounce", "type": "boolean", "group": "behaviour"},
)

DEFAULT_CATALOG = AttributeCatalog.from_definitions(DEFAULT_ATTRIBUTES)


def load_catalog(config: "Settings | None" = None) -> AttributeCatalog:
    """
    Return the configured catalog.

    Args:
        config: Settings to read; defaults to the process settings

    Returns:
        The catalog from ``catalog_file`` when set, else ``DEFAULT_CATALOG``
    """
    if config is None:
        from segment_filters.core.config import settings as config

    if config.catalog_file:
        return _catalog_from_path(config.catalog_file)
    return DEFAULT_CATALOG


@functools.lru_cache(maxsize=8)
def _catalog_from_path(path: str) -> AttributeCatalog:
    return AttributeCatalog.from_file(path)
