"""
Schema Registry
Single source of truth for which components and props are whitelisted.
"""

from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from ..core.config import Settings, get_settings
from ..core.errors import NotFoundError
from ..core.logging_config import get_logger
from .catalog import CATALOG
from .schemas import ComponentSchema

logger = get_logger(__name__)


class SchemaRegistry:
    """
    Immutable kind -> schema lookup.

    Resolved once at construction; lookups never load anything at runtime.
    """

    def __init__(self, schemas: Optional[Iterable[ComponentSchema]] = None) -> None:
        resolved: dict[str, ComponentSchema] = {}
        for schema in CATALOG if schemas is None else schemas:
            if schema.name in resolved:
                raise ValueError(f"Duplicate component schema: {schema.name}")
            resolved[schema.name] = schema
        self._schemas: Mapping[str, ComponentSchema] = MappingProxyType(resolved)
        logger.debug("schema_registry_loaded", components=len(resolved))

    def get(self, kind: str) -> Optional[ComponentSchema]:
        return self._schemas.get(kind)

    def require(self, kind: str) -> ComponentSchema:
        """Get schema or raise NotFoundError."""
        schema = self._schemas.get(kind)
        if schema is None:
            raise NotFoundError(f"Unknown component: {kind}")
        return schema

    def is_whitelisted(self, kind: str) -> bool:
        return kind in self._schemas

    def kinds(self) -> tuple[str, ...]:
        return tuple(self._schemas)

    def list_schemas(self) -> list[ComponentSchema]:
        return list(self._schemas.values())

    def __contains__(self, kind: object) -> bool:
        return kind in self._schemas

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __len__(self) -> int:
        return len(self._schemas)


class Manifest:
    """
    Import and attribute whitelist for emitted markup.

    Derived from a registry so the plan validator and the structural
    validator can never disagree about what is allowed.
    """

    def __init__(self, registry: SchemaRegistry, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        self.ui_library_module = settings.ui_library_module
        self.allowed_imports: frozenset[str] = frozenset(settings.allowed_imports)
        self.components: frozenset[str] = frozenset(registry.kinds())
        self.attributes: Mapping[str, frozenset[str]] = MappingProxyType(
            {schema.name: frozenset(schema.prop_names) for schema in registry.list_schemas()}
        )

    def allows_import(self, source: str) -> bool:
        return source in self.allowed_imports

    def allows_component(self, tag: str) -> bool:
        return tag in self.components

    def allows_attribute(self, tag: str, attribute: str) -> bool:
        return attribute in self.attributes.get(tag, frozenset())
