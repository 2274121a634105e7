from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

from .constants import CD_DEFAULT, EPSILON_DEFAULT, EPSILON_MAX, EPSILON_MIN
from .gases import GasProperties
from .geometry import assert_pos

PROCESSES = ("blowdown", "filling")
SOLVE_FOR = ("diameter_from_time", "time_from_diameter")
MODELS = ("orifice", "capillary")


@dataclass(frozen=True)
class ProcessInputs:
    process: str  # blowdown|filling
    solve_for: str  # diameter_from_time|time_from_diameter
    V: float
    P1: float
    P2: float
    T: float
    L: float
    gas: GasProperties
    Cd: float = CD_DEFAULT
    epsilon: float = EPSILON_DEFAULT
    Ps: float | None = None
    D: float | None = None
    t_target: object = None
    model: str | None = None  # forces orifice|capillary

    def validate(self) -> None:
        if self.process not in PROCESSES:
            raise ValueError(f"process must be one of {PROCESSES}, got {self.process!r}")
        if self.solve_for not in SOLVE_FOR:
            raise ValueError(f"solve_for must be one of {SOLVE_FOR}, got {self.solve_for!r}")
        if self.model is not None and self.model not in MODELS:
            raise ValueError(f"model must be one of {MODELS}, got {self.model!r}")
        for name in ["V", "P1", "P2", "T", "L", "Cd"]:
            assert_pos(name, getattr(self, name))
        if not math.isfinite(self.epsilon) or self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be > 0, got {self.epsilon}")
        if self.process == "blowdown":
            if not (self.P1 > self.P2):
                raise ValueError("blowdown requires P1 > P2")
        else:
            if self.Ps is None or not (self.Ps > self.P2 > self.P1 > 0.0):
                raise ValueError("filling requires Ps > P2 > P1 > 0")

    @property
    def eps(self) -> float:
        return min(max(self.epsilon, EPSILON_MIN), EPSILON_MAX)

    @property
    def P_final(self) -> float:
        """Pressure at which the transfer counts as complete."""
        if self.process == "blowdown":
            return self.P2 * (1.0 + self.eps)
        return self.P2 * (1.0 - self.eps)

    @property
    def P_ref(self) -> float:
        return self.P2 if self.process == "blowdown" else float(self.Ps)

    @property
    def ratio_type(self) -> str:
        return "Pdown/Pup" if self.process == "blowdown" else "Pv/Ps"

    @property
    def choking_ratio(self) -> float:
        if self.process == "blowdown":
            return self.P2 / self.P1
        return self.P1 / float(self.Ps)

    @property
    def transferred_mass(self) -> float:
        return self.V * abs(self.P1 - self.P_final) / (self.gas.R * self.T)


@dataclass
class SolveResult:
    D: float
    t: float
    verdict: str
    model: str
    forward_time: float
    residual: float
    capillary: object | None = None
    orifice: object | None = None
    warnings: list[str] = field(default_factory=list)
    rationale: str = ""
    D_capillary: float | None = None
    D_orifice: float | None = None
    t_capillary: float | None = None
    t_orifice: float | None = None
    sampling: object | None = None

    def to_dict(self) -> dict:
        out = {
            "D": self.D,
            "t": self.t,
            "verdict": self.verdict,
            "model": self.model,
            "forward_time": self.forward_time,
            "residual": self.residual,
            "warnings": list(self.warnings),
            "rationale": self.rationale,
            "D_capillary": self.D_capillary,
            "D_orifice": self.D_orifice,
            "t_capillary": self.t_capillary,
            "t_orifice": self.t_orifice,
            "capillary": asdict(self.capillary) if self.capillary is not None else None,
            "orifice": asdict(self.orifice) if self.orifice is not None else None,
            "sampling": self.sampling.to_dict() if self.sampling is not None else None,
        }
        return out
