"""
``@traced`` runs an async tool body inside an OpenTelemetry span.

Tool arguments become ``mcp.tool.arg.<name>`` span attributes, and every call
is recorded as a workflow step with its duration and outcome.

    @weather_mcp.tool(name="get-alerts", ...)
    @traced("mcp.tool.get_alerts")
    async def get_alerts(state: StateCode) -> ToolResult:
        ...
"""

import functools
import inspect
import time
from typing import Any, Callable

from loguru import logger

from weather_mcp.infrastructure.observability import get_observability_manager


def _tool_attributes(tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    attributes: dict[str, Any] = {"mcp.tool.name": tool_name}
    attributes.update({f"mcp.tool.arg.{name}": str(value) for name, value in arguments.items()})
    return attributes


def traced(span_name: str) -> Callable:
    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            observability = get_observability_manager()
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()

            started = time.monotonic()
            error: Exception | None = None
            with observability.create_span(
                name=span_name, attributes=_tool_attributes(func.__name__, bound.arguments)
            ):
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    error = e
                    raise
                finally:
                    elapsed_ms = round((time.monotonic() - started) * 1000, 2)
                    observability.record_workflow_step(
                        step_name=func.__name__,
                        step_type="tool",
                        duration_ms=elapsed_ms,
                        success=error is None,
                        metadata={"error": str(error)} if error else None,
                    )
                    if error:
                        logger.error(f"{span_name} failed after {elapsed_ms}ms: {error}")
                    else:
                        logger.debug(f"{span_name} took {elapsed_ms}ms")

        return wrapper

    return decorator
