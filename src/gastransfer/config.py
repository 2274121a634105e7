from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path

from .cases import MODELS, PROCESSES, SOLVE_FOR, ProcessInputs
from .gases import GASES, GasProperties, get_gas


@dataclass
class CaseFile:
    process: str = "blowdown"
    solve_for: str = "diameter_from_time"
    model: str = ""  # empty = automatic selection

    # gas: table key, or custom properties when gas_M_kg_mol > 0
    gas: str = "air"
    gas_M_kg_mol: float = 0.0
    gas_gamma: float = 0.0
    gas_mu_Pa_s: float = 0.0

    V_m3: float = 2.0e-7
    P1_Pa: float = 1.2e6
    P2_Pa: float = 1.0e3
    Ps_Pa: float = 0.0  # filling only
    T_K: float = 288.15
    L_m: float = 0.002
    Cd: float = 0.62
    epsilon: float = 0.01

    t_target_s: float = 175.0
    D_m: float = 0.0

    output_case_name: str = "case"

    def validate(self) -> None:
        if self.process not in PROCESSES:
            raise ValueError("process is invalid")
        if self.solve_for not in SOLVE_FOR:
            raise ValueError("solve_for is invalid")
        if self.model and self.model not in MODELS:
            raise ValueError("model must be orifice|capillary or empty")
        if self.gas_M_kg_mol <= 0.0 and self.gas not in GASES:
            try:
                get_gas(self.gas)
            except KeyError as exc:
                raise ValueError(f"gas is invalid: {self.gas!r}") from exc
        for name in ["V_m3", "P1_Pa", "P2_Pa", "T_K", "L_m", "Cd", "epsilon"]:
            if getattr(self, name) <= 0.0:
                raise ValueError(f"{name} must be > 0")
        if self.process == "filling" and self.Ps_Pa <= 0.0:
            raise ValueError("Ps_Pa must be > 0 for filling")

    def gas_properties(self) -> GasProperties:
        if self.gas_M_kg_mol > 0.0:
            return GasProperties.from_molar_mass(
                self.gas, self.gas_M_kg_mol, self.gas_gamma, self.gas_mu_Pa_s
            )
        return get_gas(self.gas)

    def to_process_inputs(self) -> ProcessInputs:
        """Build solver inputs; the target time and diameter are passed through unvalidated."""
        self.validate()
        return ProcessInputs(
            process=self.process,
            solve_for=self.solve_for,
            V=self.V_m3,
            P1=self.P1_Pa,
            P2=self.P2_Pa,
            T=self.T_K,
            L=self.L_m,
            gas=self.gas_properties(),
            Cd=self.Cd,
            epsilon=self.epsilon,
            Ps=self.Ps_Pa if self.process == "filling" else None,
            D=self.D_m or None,
            t_target=self.t_target_s,
            model=self.model or None,
        )

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, indent=2)

    @classmethod
    def from_json(cls, payload: str) -> CaseFile:
        return cls(**json.loads(payload))

    def save_json(self, path: str | Path) -> None:
        Path(path).write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load_json(cls, path: str | Path) -> CaseFile:
        return cls.from_json(Path(path).read_text(encoding="utf-8"))
