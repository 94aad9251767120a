"""
Tool input validation middleware.

Runs ``validate_tool_input`` on every ``tools/call`` before the tool body is
reached, so malformed arguments never trigger an upstream request.
"""

from fastmcp.exceptions import ToolError
from fastmcp.server.middleware import CallNext, Middleware, MiddlewareContext
from fastmcp.tools.tool import ToolResult
from loguru import logger
from pydantic import BaseModel

from weather_mcp.schemas.tools import InvalidInput, validate_tool_input


class ToolInputValidationMiddleware(Middleware):
    def __init__(self, inputs: dict[str, type[BaseModel]]) -> None:
        self._inputs = inputs

    async def on_call_tool(self, context: MiddlewareContext, call_next: CallNext) -> ToolResult:
        name = context.message.name
        model = self._inputs.get(name)
        if model is not None:
            outcome = validate_tool_input(model, context.message.arguments)
            if isinstance(outcome, InvalidInput):
                logger.warning(f"Rejected {name} call: {outcome.violations}")
                raise ToolError(
                    f"Invalid arguments for tool {name}: " + "; ".join(outcome.violations)
                )
        return await call_next(context)
