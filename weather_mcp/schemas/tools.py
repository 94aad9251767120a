"""Typed input records for the weather tools and their validation."""

from dataclasses import dataclass, field
from typing import Annotated, Any, Generic, TypeVar

from pydantic import BaseModel, Field, ValidationError

StateCode = Annotated[
    str,
    Field(min_length=2, max_length=2, description="Two-letter state code (e.g. CA, NY)"),
]
Latitude = Annotated[float, Field(ge=-90, le=90, description="Latitude of the location")]
Longitude = Annotated[float, Field(ge=-180, le=180, description="Longitude of the location")]


class AlertsInput(BaseModel):
    state: StateCode


class ForecastInput(BaseModel):
    latitude: Latitude
    longitude: Longitude


InputT = TypeVar("InputT", bound=BaseModel)


@dataclass(frozen=True)
class ValidInput(Generic[InputT]):
    value: InputT


@dataclass(frozen=True)
class InvalidInput:
    violations: list[str] = field(default_factory=list)


def validate_tool_input(
    model: type[InputT], arguments: dict[str, Any] | None
) -> ValidInput[InputT] | InvalidInput:
    """Check tool arguments against their input record without raising."""
    try:
        return ValidInput(model.model_validate(arguments or {}))
    except ValidationError as e:
        violations = []
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "arguments"
            violations.append(f"{location}: {error['msg']}")
        return InvalidInput(violations)
