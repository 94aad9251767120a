"""
OpenTelemetry helpers for the weather MCP server.

Two concerns live here:
- SSE session correlation: the session id minted by the session registry is
  placed in OpenTelemetry baggage for the lifetime of the stream, so every
  span produced while serving that client carries it.
- Tool spans: ``create_span`` / ``record_workflow_step`` back the ``@traced``
  decorator applied to each tool.

Only the OpenTelemetry API is required. Without an SDK configured (e.g. via
``opentelemetry-instrument``) the tracer is a no-op.

Environment Variables:
    AGENT_OBSERVABILITY_ENABLED: Turn spans and baggage on/off (default: true)
    OTEL_SERVICE_NAME: Instrumentation scope name (default: weather-mcp)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Optional

from loguru import logger
from opentelemetry import baggage, trace
from opentelemetry.context import attach, detach
from opentelemetry.trace import SpanKind, Status, StatusCode

SESSION_BAGGAGE_KEY = "session.id"


class ObservabilityManager:
    """Span and baggage bookkeeping for tool calls and SSE sessions."""

    def __init__(
        self,
        service_name: str = "weather-mcp",
        enabled: bool = True,
    ) -> None:
        self.service_name = service_name
        self.enabled = enabled
        self._tracer = None

        if self.enabled:
            self._tracer = trace.get_tracer(
                instrumenting_module_name=service_name,
                tracer_provider=trace.get_tracer_provider(),
            )
            logger.info(f"Observability initialized for service: {service_name}")
        else:
            logger.info("Observability disabled")

    # ------------------------------------------------------------------
    # Session context
    # ------------------------------------------------------------------

    @contextmanager
    def session_context(self, session_id: str):
        """Attach ``session_id`` as baggage for the duration of the block."""
        if not self.enabled:
            yield
            return

        token = attach(baggage.set_baggage(SESSION_BAGGAGE_KEY, session_id))
        logger.debug(f"Session {session_id} attached to observability context")
        try:
            yield
        finally:
            detach(token)

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------

    @contextmanager
    def create_span(
        self,
        name: str,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: Optional[dict] = None,
    ):
        """
        Open a span around the block; exceptions are recorded and re-raised.

        Args:
            name: Span name (e.g. "mcp.tool.get_forecast").
            kind: SpanKind (defaults to INTERNAL).
            attributes: Attributes set on the span at creation.
        """
        if not self.enabled or self._tracer is None:
            yield None
            return

        span_attributes = dict(attributes or {})
        session_id = baggage.get_baggage(SESSION_BAGGAGE_KEY)
        if session_id:
            span_attributes["mcp.session.id"] = str(session_id)

        with self._tracer.start_as_current_span(
            name=name,
            kind=kind,
            attributes=span_attributes,
        ) as span:
            try:
                yield span
            except Exception as e:
                span.set_status(Status(StatusCode.ERROR, str(e)))
                span.record_exception(e)
                raise

    def record_workflow_step(
        self,
        step_name: str,
        step_type: str,
        duration_ms: Optional[float] = None,
        success: bool = True,
        metadata: Optional[dict] = None,
    ) -> None:
        """Attach a step-completion event to the current span."""
        if not self.enabled:
            return

        attributes: dict = {
            "workflow.step.name": step_name,
            "workflow.step.type": step_type,
            "workflow.step.success": success,
        }
        if duration_ms is not None:
            attributes["workflow.step.duration_ms"] = duration_ms
        for key, value in (metadata or {}).items():
            attributes[f"workflow.step.{key}"] = str(value)

        trace.get_current_span().add_event(f"workflow.{step_name}", attributes=attributes)


# ------------------------------------------------------------------
# Singleton
# ------------------------------------------------------------------

_observability_manager: ObservabilityManager | None = None


def get_observability_manager() -> ObservabilityManager:
    """Return the global ObservabilityManager (lazy-init from settings)."""
    global _observability_manager

    if _observability_manager is None:
        from weather_mcp.config import settings

        _observability_manager = ObservabilityManager(
            service_name=settings.OTEL_SERVICE_NAME,
            enabled=settings.AGENT_OBSERVABILITY_ENABLED,
        )

    return _observability_manager


def initialize_observability(
    service_name: str = "weather-mcp",
    enabled: bool = True,
) -> ObservabilityManager:
    """Replace the global observability manager at startup."""
    global _observability_manager

    _observability_manager = ObservabilityManager(
        service_name=service_name,
        enabled=enabled,
    )
    return _observability_manager
