"""Container entrypoint for the weather MCP server."""

import uvicorn

from weather_mcp.app import create_app
from weather_mcp.config import settings
from weather_mcp.infrastructure.log_config import configure_logging

configure_logging(settings.LOG_LEVEL)
app = create_app(settings)


def run() -> None:
    # log_config=None keeps uvicorn from replacing the loguru intercept
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
