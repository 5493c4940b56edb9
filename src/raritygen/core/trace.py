from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TraceStep(BaseModel):
    """Single attempt in the generation trace."""

    model_config = ConfigDict(frozen=True)

    step: str = Field(description="Step identifier, e.g., 'attempt_3'")
    choice: str = Field(description="Human-readable description of the outcome")
    value: Any = Field(description="Details of the attempt (serializable)")


class GenerationTrace(BaseModel):
    """Complete trace of one item's attempts. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    steps: tuple[TraceStep, ...] = Field(
        default=(), description="Ordered attempts"
    )
