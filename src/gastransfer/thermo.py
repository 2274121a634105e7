"""Isothermal ideal-gas relations for orifice and capillary flow."""

from __future__ import annotations

import math


def critical_pressure_ratio(gamma: float) -> float:
    """Downstream/upstream pressure ratio at which an orifice chokes."""
    return (2.0 / (gamma + 1.0)) ** (gamma / (gamma - 1.0))


def sonic_coefficient(gamma: float, r_gas: float, T: float) -> float:
    """C* such that the choked mass flux is ``Cd * A * C* * P_up``."""
    return math.sqrt(gamma / (r_gas * T)) * (2.0 / (gamma + 1.0)) ** (
        (gamma + 1.0) / (2.0 * (gamma - 1.0))
    )


def subsonic_coefficient(gamma: float, r_gas: float, T: float) -> float:
    return math.sqrt(2.0 * gamma / (r_gas * T * (gamma - 1.0)))


def gas_density(P: float, r_gas: float, T: float) -> float:
    return P / (r_gas * T)


def reynolds_number(rho: float, v: float, D: float, mu: float) -> float:
    return rho * v * D / mu


def reynolds_from_mass_flow(mdot: float, D: float, mu: float) -> float:
    """Pipe Reynolds number ``4 mdot / (pi D mu)``."""
    return 4.0 * mdot / (math.pi * D * mu)


def subsonic_mach(r: float, gamma: float) -> float:
    """Isentropic throat Mach number for a pressure ratio ``r = P_dn / P_up``.

    Only meaningful above the critical ratio; callers pin choked flow to 1.0.
    """
    if r >= 1.0:
        return 0.0
    return math.sqrt(2.0 / (gamma - 1.0) * ((1.0 / r) ** ((gamma - 1.0) / gamma) - 1.0))
