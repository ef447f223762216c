"""
Parameter Set - weights and scheduling configuration.

The parameter set is loaded once at process start and never mutated.
Changing it means building a new set (and a new Scheduler); stored cards
keep their stability/difficulty and the new weights apply prospectively.

Configuration sources, highest precedence first:
1. Environment variables (a .env file is honoured)
   - BRIGHTCARDS_WEIGHTS: comma-separated list of 17 floats
   - BRIGHTCARDS_DESIRED_RETENTION
   - BRIGHTCARDS_MAXIMUM_INTERVAL
   - BRIGHTCARDS_ENABLE_FUZZING ("true"/"false")
2. JSON file given as `path` or BRIGHTCARDS_PARAMETERS_FILE
3. Built-in defaults from constants.py
"""

from __future__ import annotations

import json
import math
import os
from datetime import timedelta
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from brightcards.fsrs.constants import (
    DEFAULT_DESIRED_RETENTION,
    DEFAULT_FUZZ_FACTOR,
    DEFAULT_LEARNING_STEPS,
    DEFAULT_MAXIMUM_INTERVAL,
    DEFAULT_MINIMUM_INTERVAL,
    DEFAULT_RELEARNING_STEPS,
    DEFAULT_WEIGHTS,
    MAXIMUM_INTERVAL_LIMIT,
    WEIGHT_BOUNDS,
    WEIGHT_COUNT,
)
from brightcards.fsrs.errors import InvalidParameters


class ParameterSet(BaseModel):
    """Immutable weights plus retention, interval bounds and ladder steps."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    weights: tuple[float, ...] = Field(
        default=DEFAULT_WEIGHTS,
        description="Memory model weights w0..w16",
    )
    desired_retention: float = Field(
        default=DEFAULT_DESIRED_RETENTION, gt=0.0, lt=1.0, allow_inf_nan=False,
        description="Recall probability at which a card becomes due",
    )
    minimum_interval: float = Field(
        default=DEFAULT_MINIMUM_INTERVAL, gt=0.0, le=MAXIMUM_INTERVAL_LIMIT, allow_inf_nan=False,
        description="Shortest review interval in days",
    )
    maximum_interval: float = Field(
        default=DEFAULT_MAXIMUM_INTERVAL, gt=0.0, le=MAXIMUM_INTERVAL_LIMIT, allow_inf_nan=False,
        description="Longest review interval in days",
    )
    learning_steps: tuple[timedelta, ...] = Field(
        default=DEFAULT_LEARNING_STEPS, min_length=1,
    )
    relearning_steps: tuple[timedelta, ...] = Field(
        default=DEFAULT_RELEARNING_STEPS, min_length=1,
    )
    enable_fuzzing: bool = True
    fuzz_factor: float = Field(
        default=DEFAULT_FUZZ_FACTOR, ge=0.0, le=0.5, allow_inf_nan=False,
    )

    @field_validator("weights")
    @classmethod
    def _check_weights(cls, weights: tuple[float, ...]) -> tuple[float, ...]:
        if len(weights) != WEIGHT_COUNT:
            raise ValueError(f"expected {WEIGHT_COUNT} weights, got {len(weights)}")
        for index, (value, (low, high)) in enumerate(zip(weights, WEIGHT_BOUNDS)):
            if not math.isfinite(value):
                raise ValueError(f"w{index} is not finite")
            if not low <= value <= high:
                raise ValueError(f"w{index}={value} outside [{low}, {high}]")
        return weights

    @field_validator("learning_steps", "relearning_steps")
    @classmethod
    def _check_steps(cls, steps: tuple[timedelta, ...]) -> tuple[timedelta, ...]:
        if any(step <= timedelta(0) for step in steps):
            raise ValueError("ladder steps must be positive durations")
        if any(step > timedelta(days=MAXIMUM_INTERVAL_LIMIT) for step in steps):
            raise ValueError(f"ladder steps must not exceed {MAXIMUM_INTERVAL_LIMIT:g} days")
        return steps

    @model_validator(mode="after")
    def _check_interval_bounds(self) -> "ParameterSet":
        if self.maximum_interval < self.minimum_interval:
            raise ValueError("maximum_interval must be >= minimum_interval")
        return self


def build_parameters(**overrides: Any) -> ParameterSet:
    """
    Build a validated ParameterSet from keyword overrides.

    Raises:
        InvalidParameters: if any value fails validation
    """
    try:
        return ParameterSet(**overrides)
    except ValidationError as e:
        raise InvalidParameters(str(e)) from e


def _read_parameters_file(path: Path) -> dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise InvalidParameters(f"Cannot read parameters file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvalidParameters(f"{path}: {e}") from e
    if not isinstance(data, dict):
        raise InvalidParameters(f"{path}: expected a JSON object")
    return data


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as e:
        raise InvalidParameters(f"{name}={raw!r} is not a number") from e


def _env_overrides() -> dict[str, Any]:
    """Collect parameter overrides from BRIGHTCARDS_* environment variables."""
    overrides: dict[str, Any] = {}

    raw_weights = os.getenv("BRIGHTCARDS_WEIGHTS")
    if raw_weights:
        overrides["weights"] = tuple(
            _parse_float("BRIGHTCARDS_WEIGHTS", part)
            for part in raw_weights.split(",")
            if part.strip()
        )

    raw_retention = os.getenv("BRIGHTCARDS_DESIRED_RETENTION")
    if raw_retention:
        overrides["desired_retention"] = _parse_float("BRIGHTCARDS_DESIRED_RETENTION", raw_retention)

    raw_max = os.getenv("BRIGHTCARDS_MAXIMUM_INTERVAL")
    if raw_max:
        overrides["maximum_interval"] = _parse_float("BRIGHTCARDS_MAXIMUM_INTERVAL", raw_max)

    raw_fuzz = os.getenv("BRIGHTCARDS_ENABLE_FUZZING")
    if raw_fuzz:
        overrides["enable_fuzzing"] = raw_fuzz.lower() == "true"

    return overrides


def load_parameters(path: Optional[Path] = None) -> ParameterSet:
    """
    Load the parameter set from file and environment.

    Args:
        path: Optional JSON file; falls back to BRIGHTCARDS_PARAMETERS_FILE

    Returns:
        Validated ParameterSet
    """
    load_dotenv()

    values: dict[str, Any] = {}
    file_path = path or os.getenv("BRIGHTCARDS_PARAMETERS_FILE")
    if file_path:
        values.update(_read_parameters_file(Path(file_path)))

    values.update(_env_overrides())
    return build_parameters(**values)
