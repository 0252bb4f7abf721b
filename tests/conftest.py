"""Pytest configuration and fixtures."""

import os

import pytest
from prometheus_client import CollectorRegistry

from uigate.core.config import Settings
from uigate.core.container import create_container
from uigate.library import Manifest, PlanValidator, SchemaRegistry
from uigate.markup import CodeEmitter
from uigate.models import (
    ComponentNode,
    Explanation,
    GenerationPlan,
    IntentType,
    VersionDraft,
    VersionMetadata,
)
from uigate.monitoring import MetricsCollector
from uigate.pipeline import Orchestrator
from uigate.safety import SecurityScanner, StructuralValidator
from uigate.versioning import DiffEngine, VersionStore


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["UIGATE_LOG_LEVEL"] = "DEBUG"


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings, independent of any .env on disk."""
    return Settings(_env_file=None)


@pytest.fixture
def metrics():
    """Metrics collector on a private registry."""
    return MetricsCollector(CollectorRegistry())


@pytest.fixture
def di_container(settings, metrics):
    """Dependency injection container for testing."""
    return create_container(settings, metrics)


# ============================================================================
# Library Fixtures
# ============================================================================

@pytest.fixture
def registry():
    return SchemaRegistry()


@pytest.fixture
def manifest(registry, settings):
    return Manifest(registry, settings)


@pytest.fixture
def plan_validator(registry, settings):
    return PlanValidator(registry, settings)


@pytest.fixture
def emitter(registry, settings):
    return CodeEmitter(registry, settings)


@pytest.fixture
def scanner():
    return SecurityScanner()


@pytest.fixture
def structural(manifest):
    return StructuralValidator(manifest)


@pytest.fixture
def diff_engine():
    return DiffEngine()


# ============================================================================
# Pipeline Fixtures
# ============================================================================

@pytest.fixture
def store():
    return VersionStore(capacity=50)


@pytest.fixture
def orchestrator(registry, store, settings, metrics):
    """Orchestrator wired to a fresh store and private metrics."""
    return Orchestrator(registry=registry, store=store, settings=settings, metrics=metrics)


# ============================================================================
# Data Fixtures
# ============================================================================

LOGIN_MESSAGE = "Create a login form with email and password fields"


@pytest.fixture
def login_message():
    return LOGIN_MESSAGE


@pytest.fixture
def sample_plan():
    """A valid plan mapping with nesting and literal text."""
    return {
        "intent": "create",
        "components": [
            {"id": "header_1", "kind": "Header", "props": {"title": "Dashboard", "showNav": True}},
            {
                "id": "card_1",
                "kind": "Card",
                "props": {"title": "Content"},
                "children": [
                    {"id": "input_1", "kind": "Input", "props": {"label": "Email", "type": "email"}},
                    {"id": "button_1", "kind": "Button", "props": {"children": "Submit", "variant": "primary"}},
                ],
            },
        ],
        "layout": {"direction": "vertical", "spacing": "md"},
        "description": "Dashboard",
    }


SAMPLE_CODE = """\
import React from 'react';
import { Button, Card, Header, Input, Stack } from 'my-ui-library';

export default function GeneratedUI() {
  return (
    <Stack direction="vertical" spacing="md">
      <Header title="Dashboard" showNav={true} />
      <Card title="Content">
        <Input label="Email" type="email" />
        <Button variant="primary">Submit</Button>
      </Card>
    </Stack>
  );
}
"""


@pytest.fixture
def sample_code():
    """Markup the emitter produces for ``sample_plan``."""
    return SAMPLE_CODE


@pytest.fixture
def make_draft():
    """Factory for minimal version drafts."""

    def _make(message: str = "Create a card", code: str = "<Card />") -> VersionDraft:
        return VersionDraft(
            user_message=message,
            plan=GenerationPlan(components=[ComponentNode(id="card_1", kind="Card")]),
            generated_code=code,
            explanation=Explanation.fallback(),
            timestamp=0,
            metadata=VersionMetadata(intent=IntentType.CREATE, component_count=1, line_count=code.count("\n") + 1),
        )

    return _make
