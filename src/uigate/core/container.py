"""Dependency Injection Container."""

from typing import Optional

from injector import Injector, Module, provider, singleton

from .config import Settings, get_settings
from .logging_config import configure_logging
from ..library.registry import SchemaRegistry
from ..monitoring.metrics import MetricsCollector, metrics_collector
from ..pipeline.orchestrator import Orchestrator
from ..versioning.store import VersionStore


class CoreModule(Module):
    """Core dependencies."""

    def __init__(self, settings: Optional[Settings] = None, metrics: Optional[MetricsCollector] = None) -> None:
        self.settings = settings
        self.metrics = metrics

    @singleton
    @provider
    def provide_settings(self) -> Settings:
        """Provide settings singleton."""
        return self.settings or get_settings()

    @singleton
    @provider
    def provide_metrics(self) -> MetricsCollector:
        """Provide the process-wide metrics collector unless one was given."""
        return self.metrics or metrics_collector

    @singleton
    @provider
    def provide_schema_registry(self) -> SchemaRegistry:
        """Provide the component schema registry."""
        return SchemaRegistry()

    @singleton
    @provider
    def provide_version_store(self, settings: Settings) -> VersionStore:
        """Provide the version history, sized from settings."""
        return VersionStore(capacity=settings.version_capacity)

    @singleton
    @provider
    def provide_orchestrator(
        self,
        registry: SchemaRegistry,
        store: VersionStore,
        settings: Settings,
        metrics: MetricsCollector,
    ) -> Orchestrator:
        """Provide the pipeline with its injected store."""
        return Orchestrator(registry=registry, store=store, settings=settings, metrics=metrics)


def create_container(settings: Optional[Settings] = None, metrics: Optional[MetricsCollector] = None) -> Injector:
    """Create configured injector; logging follows the same settings."""
    container = Injector([CoreModule(settings, metrics)])
    configure_logging(container.get(Settings))
    return container
