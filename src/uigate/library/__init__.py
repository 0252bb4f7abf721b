"""Component library: schemas, registry, manifest and plan validation."""

from .catalog import CATALOG
from .registry import Manifest, SchemaRegistry
from .schemas import ComponentSchema, PropKind, PropSpec, StructuralConstraints
from .validator import PlanValidator

__all__ = [
    "CATALOG",
    "Manifest",
    "SchemaRegistry",
    "ComponentSchema",
    "PropKind",
    "PropSpec",
    "StructuralConstraints",
    "PlanValidator",
]
