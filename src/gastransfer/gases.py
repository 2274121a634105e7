"""Ideal-gas property table at 20 degC.

Viscosities are tabulated values at 293.15 K; the isothermal models use them as
constants over the whole transfer.
"""

from __future__ import annotations

from dataclasses import dataclass

from .constants import R_UNIVERSAL


@dataclass(frozen=True)
class GasProperties:
    name: str
    M: float  # molar mass [kg/mol]
    R: float  # specific gas constant [J/(kg K)]
    gamma: float
    mu: float  # dynamic viscosity [Pa s]

    @classmethod
    def from_molar_mass(
        cls, name: str, M: float, gamma: float, mu: float
    ) -> GasProperties:
        if not (M > 0.0):
            raise ValueError(f"M must be > 0, got {M}")
        if not (gamma > 1.0):
            raise ValueError(f"gamma must be > 1, got {gamma}")
        if not (mu > 0.0):
            raise ValueError(f"mu must be > 0, got {mu}")
        return cls(name=name, M=M, R=R_UNIVERSAL / M, gamma=gamma, mu=mu)


GASES: dict[str, GasProperties] = {
    "air": GasProperties.from_molar_mass("Air", 0.028964, 1.4, 1.825e-5),
    "N2": GasProperties.from_molar_mass("Nitrogen", 0.028014, 1.4, 1.780e-5),
    "O2": GasProperties.from_molar_mass("Oxygen", 0.031998, 1.4, 2.055e-5),
    "CH4": GasProperties.from_molar_mass("Methane", 0.016042, 1.32, 1.127e-5),
    "CO2": GasProperties.from_molar_mass("Carbon dioxide", 0.044010, 1.30, 1.480e-5),
    "He": GasProperties.from_molar_mass("Helium", 0.004003, 1.67, 1.990e-5),
}


def get_gas(key: str) -> GasProperties:
    if key in GASES:
        return GASES[key]
    low = key.strip().lower()
    for k, gas in GASES.items():
        if k.lower() == low or gas.name.lower() == low:
            return gas
    raise KeyError(f"unknown gas {key!r}; expected one of {sorted(GASES)}")
