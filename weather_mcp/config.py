from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Entra ID (required, the process refuses to start without them) ---
    ROLE_NAME: str = Field(
        min_length=1,
        description="App role every caller of /sse and /messages must hold.",
    )
    TENANT_ID: str = Field(
        min_length=1,
        description="Entra ID tenant that issues the bearer tokens.",
    )
    CLIENT_ID: str = Field(
        min_length=1,
        description="Application (client) ID used to build the accepted audiences.",
    )
    JWKS_REQUESTS_PER_MINUTE: int = Field(
        default=5,
        ge=1,
        description="Upper bound on signing-key refetches per rolling minute.",
    )
    JWKS_CACHE_MAX_AGE_SECONDS: float = Field(
        default=600.0,
        gt=0,
        description="How long a fetched signing-key set is trusted before it is refetched.",
    )

    # --- HTTP server ---
    HOST: str = Field(default="0.0.0.0", description="Interface uvicorn binds to.")
    PORT: int = Field(default=3001, description="TCP port uvicorn listens on.")

    # --- National Weather Service API ---
    NWS_API_BASE: str = Field(
        default="https://api.weather.gov",
        description="Base URL of the NWS API.",
    )
    NWS_USER_AGENT: str = Field(
        default="weather-app/1.0",
        description="User-Agent header the NWS API requires on every request.",
    )

    # --- Logging / observability ---
    LOG_LEVEL: str = Field(default="INFO", description="Minimum loguru level.")
    OTEL_SERVICE_NAME: str = Field(
        default="weather-mcp",
        description="Service name reported on OpenTelemetry spans.",
    )
    AGENT_OBSERVABILITY_ENABLED: bool = Field(
        default=True,
        description="Emit OpenTelemetry spans for tool calls and SSE sessions.",
    )


settings = Settings()
