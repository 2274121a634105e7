"""Typed failures raised by the solvers.

Every failure carries a frozen payload record so that callers can report the
numbers that led to it. Structural input problems (negative volume, unknown
process) stay plain ``ValueError``; ``SolveError`` covers the numerical path.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any


@dataclass(frozen=True)
class InputPayload:
    raw: Any
    parsed: float


@dataclass(frozen=True)
class BracketPayload:
    reason: str  # non_finite|out_of_bracket|hit_bound|empty|above_ceiling
    A_lo: float
    A_hi: float
    t_lo: float
    t_hi: float
    expansions: int
    target: float
    bound_hit: str | None = None  # lower|upper
    residual: float | None = None


@dataclass(frozen=True)
class IntegralPayload:
    process: str
    lower: float
    upper: float
    margin: float
    P_start: float
    P_final: float
    P_ref: float
    gamma: float
    evaluations: int


@dataclass(frozen=True)
class ConvergencePayload:
    reason: str
    A_lo: float
    A_hi: float
    iterations: int
    target: float


@dataclass(frozen=True)
class ResidualPayload:
    target: float
    t_forward: float
    residual: float
    epsilon: float
    tolerance: float
    A_lo: float
    A_hi: float
    choking_ratio: float
    ratio_type: str  # Pdown/Pup|Pv/Ps
    residual_original: float
    residual_refined: float
    D: float
    model: str = "orifice"


def _json_safe(value):
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    return value


class SolveError(Exception):
    kind = "solve"

    def __init__(self, message: str, payload, suggestions: tuple[str, ...] = ()):
        super().__init__(message)
        self.message = message
        self.payload = payload
        self.suggestions = tuple(suggestions)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "message": self.message,
            "payload": {k: _json_safe(v) for k, v in asdict(self.payload).items()},
            "suggestions": list(self.suggestions),
        }


class InputError(SolveError):
    kind = "input"


class BracketingError(SolveError):
    kind = "bracketing"


class IntegralError(SolveError):
    kind = "integral"


class ConvergenceError(SolveError):
    kind = "convergence"


class ResidualError(SolveError):
    kind = "residual"


def parse_target(raw) -> float:
    """Coerce a raw target value to float; anything unparseable becomes NaN."""
    if isinstance(raw, bool) or raw is None:
        return math.nan
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def validate_positive(raw, name: str = "target time") -> float:
    parsed = parse_target(raw)
    if not math.isfinite(parsed) or parsed <= 0.0:
        raise InputError(
            f"{name} must be a finite number > 0, got {raw!r}",
            InputPayload(raw=raw, parsed=parsed),
            suggestions=(f"provide a positive {name} in SI units",),
        )
    return parsed
