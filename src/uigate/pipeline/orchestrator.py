"""
Generation Orchestrator
Runs a request through every gate and persists only fully accepted results.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Union

from returns.result import Failure, Result, Success

from ..agents.explainer import default_explanation, explain
from ..agents.intent import IntentClassifier, validate_requirements
from ..agents.planner import PlanGenerator, count_components, estimate_complexity
from ..core.config import Settings, get_settings
from ..core.errors import (
    ErrorKind,
    NotFoundError,
    PlanValidationError,
    SecurityViolationError,
    StructuralViolationError,
    UIGateError,
)
from ..core.hash import hash_string
from ..core.json import ensure_serializable
from ..core.logging_config import LogContext, get_logger
from ..core.tracing import trace_operation
from ..core.validate import build_request, sanitize_input
from ..library.registry import Manifest, SchemaRegistry
from ..library.schemas import ComponentSchema
from ..library.validator import PlanValidator
from ..markup.analyzer import MarkupAnalysis, MarkupAnalyzer
from ..markup.emitter import CodeEmitter
from ..models.plan import GenerationPlan, IntentType
from ..models.version import Explanation, GenerationResponse, Version, VersionDraft, VersionMetadata
from ..models.violations import ValidationResult, Violation
from ..monitoring.metrics import MetricsCollector, metrics_collector
from ..safety.scanner import SecurityScanner, summarize
from ..safety.structural import StructuralValidator
from ..versioning.diff import DiffEngine
from ..versioning.store import VersionStore
from .stages import GenerationOutcome, PipelineStage, PipelineState, Rejection, to_response

logger = get_logger(__name__)

ROLLBACK_PREFIX = "[ROLLBACK] "

Explainer = Callable[[str, GenerationPlan, str], Explanation]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class _Run:
    """Mutable bookkeeping for one request."""

    stage: PipelineStage = PipelineStage.REQUEST
    trail: list[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])
    intent: str = "unknown"

    def advance(self, state: PipelineState) -> None:
        self.trail.append(state)


class Orchestrator:
    """
    Generation pipeline entry point.

    Validation failures come back as ``Failure(Rejection)`` and leave the
    store untouched; the store is written exactly once per accepted request.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        store: VersionStore,
        settings: Optional[Settings] = None,
        metrics: Optional[MetricsCollector] = None,
        explainer: Explainer = explain,
    ) -> None:
        self.settings = settings or get_settings()
        self.registry = registry
        self.store = store
        self.metrics = metrics or metrics_collector
        self.explainer = explainer

        self.manifest = Manifest(registry, self.settings)
        self.classifier = IntentClassifier()
        self.planner = PlanGenerator()
        self.plan_validator = PlanValidator(registry, self.settings)
        self.emitter = CodeEmitter(registry, self.settings)
        self.scanner = SecurityScanner()
        self.structural = StructuralValidator(self.manifest)
        self.diff_engine = DiffEngine(self.settings.diff_preview_limit)
        self.analyzer = MarkupAnalyzer(self.structural, self.scanner)

    # Generation

    def generate(self, message: Any, previous_version_id: Optional[str] = None) -> Result[GenerationOutcome, Rejection]:
        """
        Run the full pipeline for one request.

        Args:
            message: Request text
            previous_version_id: Version the request refers to, if any

        Returns:
            Success(GenerationOutcome) or Failure(Rejection)
        """
        run = _Run()
        started = time.perf_counter()
        fingerprint = hash_string(message, truncate=12) if isinstance(message, str) else "invalid"

        with LogContext(request=fingerprint):
            logger.info("generation_received", has_previous=previous_version_id is not None)
            try:
                outcome = self._run(message, previous_version_id, run)
            except UIGateError as e:
                return Failure(self._reject(run, e.kind, e.message, e.violations, started))
            except Exception as e:
                logger.exception("generation_internal_error", stage=run.stage.value, error=str(e))
                self.metrics.record_error(type(e).__name__, run.stage.value)
                return Failure(self._reject(run, ErrorKind.INTERNAL, "Internal error while generating UI", [], started))

        self.metrics.record_generation("success", run.intent, time.perf_counter() - started)
        logger.info("generation_completed", version_id=outcome.version.id, intent=run.intent)
        return Success(outcome)

    def _run(self, message: Any, previous_version_id: Optional[str], run: _Run) -> GenerationOutcome:
        settings = self.settings

        request = build_request(message, previous_version_id, max_length=settings.max_message_length)
        sanitized = sanitize_input(request.message, settings.sanitize_max_length)

        run.stage = PipelineStage.INTENT
        classification = self.classifier.classify(sanitized, request.previous_version_id)
        intent = classification.intent
        run.intent = intent.value
        run.advance(PipelineState.INTENT_CLASSIFIED)

        # a short-circuited classification is reported with its findings before any requirement check
        if classification.signature is not None:
            run.stage = PipelineStage.SECURITY
            findings = self.scanner.scan_input(request.message)
            if findings:
                raise SecurityViolationError(summarize(findings), findings)
            run.stage = PipelineStage.INTENT

        validate_requirements(intent, request, self.store.exists, settings)

        run.stage = PipelineStage.PLANNING
        plan = self.planner.plan(sanitized, intent)
        run.advance(PipelineState.PLAN_GENERATED)

        run.stage = PipelineStage.PLAN_VALIDATION
        validation = self.plan_validator.validate(plan)
        if not validation.valid:
            raise PlanValidationError("Plan failed schema validation", validation.violations)
        run.advance(PipelineState.PLAN_VALIDATED)

        run.stage = PipelineStage.EMISSION
        with trace_operation("code_emission", components=count_components(plan.components)):
            code = self.emitter.emit(plan)
        run.advance(PipelineState.CODE_EMITTED)

        # the raw request is scanned, not the sanitized text
        run.stage = PipelineStage.SECURITY
        security = self.scanner.check(request.message, code)
        if not security.safe:
            raise SecurityViolationError(summarize(security.violations), security.violations)

        run.stage = PipelineStage.STRUCTURAL
        structural = self.structural.validate(code)
        if not structural.valid:
            raise StructuralViolationError(summarize(structural.violations), structural.violations)
        run.advance(PipelineState.SECURITY_CHECKED)

        explanation = self._explain(sanitized, plan, code)
        run.advance(PipelineState.EXPLAINED)

        diff = None
        incremental = None
        previous = self.store.get(request.previous_version_id) if request.previous_version_id else None
        if previous is not None:
            diff = self.diff_engine.diff(previous.generated_code, code)
            incremental = self.diff_engine.patch(previous.generated_code, code).incremental
            run.advance(PipelineState.DIFFED)

        run.stage = PipelineStage.SERIALIZATION
        complexity = estimate_complexity(plan)
        draft = VersionDraft(
            user_message=request.message,
            plan=plan,
            generated_code=code,
            explanation=explanation,
            diff_from_previous=diff,
            timestamp=_now_ms(),
            metadata=VersionMetadata(
                intent=intent,
                component_count=complexity.component_count,
                line_count=len(code.splitlines()),
                complexity=complexity.complexity,
                incremental_patch=incremental,
            ),
        )
        ensure_serializable(draft)

        run.stage = PipelineStage.PERSISTENCE
        with trace_operation("persist_version"):
            version = self.store.append(draft)
        self.metrics.set_stored_versions(len(self.store))
        run.advance(PipelineState.PERSISTED)

        run.advance(PipelineState.RESPONDED)
        return GenerationOutcome(
            version=version,
            intent_confidence=classification.confidence,
            intent_reasoning=classification.reasoning,
            complexity=complexity.complexity,
            trail=list(run.trail),
        )

    def _explain(self, message: str, plan: GenerationPlan, code: str) -> Explanation:
        try:
            return self.explainer(message, plan, code)
        except Exception as e:
            logger.warning("explanation_failed", error=str(e), exc_info=True)
            return default_explanation()

    def _reject(
        self,
        run: _Run,
        kind: ErrorKind,
        message: str,
        violations: list[Violation],
        started: float,
    ) -> Rejection:
        run.advance(PipelineState.REJECTED)
        rejection = Rejection(
            stage=run.stage,
            kind=kind,
            message=message,
            violations=violations,
            trail=list(run.trail),
        )
        self.metrics.record_rejection(run.stage.value, kind.value, (v.category.value for v in violations))
        self.metrics.record_generation("rejected", run.intent, time.perf_counter() - started)
        logger.info(
            "generation_rejected",
            stage=run.stage.value,
            kind=kind.value,
            violations=len(violations),
        )
        return rejection

    # Rollback

    def rollback(self, version_id: str) -> Result[Version, Rejection]:
        """
        Re-persist a stored version as a new rollback version.

        Plan, code and explanation are copied unchanged; generation and
        validation are skipped because the source already passed them.
        """
        trail = [PipelineState.RECEIVED]
        source = self.store.get(version_id)
        if source is None:
            trail.append(PipelineState.REJECTED)
            self.metrics.record_rollback("not_found")
            logger.info("rollback_rejected", version_id=version_id)
            return Failure(
                Rejection(
                    stage=PipelineStage.LOOKUP,
                    kind=ErrorKind.NOT_FOUND,
                    message=f"Version not found: {version_id}",
                    trail=trail,
                )
            )

        try:
            draft = VersionDraft(
                user_message=f"{ROLLBACK_PREFIX}{source.user_message}",
                plan=source.plan,
                generated_code=source.generated_code,
                explanation=source.explanation,
                diff_from_previous=None,
                timestamp=_now_ms(),
                metadata=VersionMetadata(
                    intent=IntentType.ROLLBACK,
                    component_count=source.metadata.component_count,
                    line_count=source.metadata.line_count,
                    complexity=source.metadata.complexity,
                ),
            )
            ensure_serializable(draft)
            with trace_operation("rollback", source=version_id):
                version = self.store.append(draft)
        except UIGateError as e:
            trail.append(PipelineState.REJECTED)
            self.metrics.record_rollback("rejected")
            return Failure(Rejection(stage=PipelineStage.SERIALIZATION, kind=e.kind, message=e.message, trail=trail))
        except Exception as e:
            logger.exception("rollback_internal_error", version_id=version_id, error=str(e))
            self.metrics.record_error(type(e).__name__, "rollback")
            trail.append(PipelineState.REJECTED)
            return Failure(
                Rejection(stage=PipelineStage.PERSISTENCE, kind=ErrorKind.INTERNAL, message="Internal error during rollback", trail=trail)
            )

        self.metrics.record_rollback("success")
        self.metrics.set_stored_versions(len(self.store))
        logger.info("rollback_completed", source=version_id, version_id=version.id)
        return Success(version)

    # Queries

    def validate_plan(self, plan: Union[GenerationPlan, Mapping[str, Any]]) -> ValidationResult:
        return self.plan_validator.validate(plan)

    def analyze_markup(self, code: str) -> MarkupAnalysis:
        return self.analyzer.analyze(code)

    def list_versions(self, limit: Optional[int] = None) -> list[Version]:
        return self.store.list(limit if limit is not None else self.settings.default_history_limit)

    def get_version(self, version_id: str) -> Version:
        version = self.store.get(version_id)
        if version is None:
            raise NotFoundError(f"Version not found: {version_id}")
        return version

    def list_component_schemas(self) -> list[ComponentSchema]:
        return self.registry.list_schemas()

    def get_component_schema(self, kind: str) -> ComponentSchema:
        return self.registry.require(kind)

    def to_response(self, version: Version) -> GenerationResponse:
        return to_response(version)

    def clear_history(self) -> None:
        """Operator action: drop every stored version."""
        self.store.clear()
        self.metrics.set_stored_versions(0)
