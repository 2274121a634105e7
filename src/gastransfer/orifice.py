"""Isothermal orifice transfer time for a rigid vessel.

While the orifice is choked the mass flux depends only on the upstream
pressure, so the sonic phase has a closed form: logarithmic in blowdown
(upstream is the vessel) and linear in filling (upstream is the constant
supply). The remaining subcritical phase is the singular integral from
:mod:`gastransfer.integrals`.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from .cases import ProcessInputs
from .constants import MARGIN_DEFAULT
from .geometry import assert_pos, circle_area
from .integrals import subcritical_integral_blowdown, subcritical_integral_filling
from .thermo import critical_pressure_ratio, sonic_coefficient, subsonic_coefficient


def _check_filling(inputs: ProcessInputs) -> None:
    Ps = inputs.Ps
    if Ps is None or not (Ps > inputs.P_final > inputs.P1 > 0.0):
        raise ValueError(
            "filling requires Ps > Pf > P1 > 0 "
            f"(Ps={Ps}, Pf={inputs.P_final}, P1={inputs.P1})"
        )


def _check_blowdown(inputs: ProcessInputs) -> None:
    if not (inputs.P1 > inputs.P_final):
        raise ValueError(
            f"blowdown requires P1 > Pf (P1={inputs.P1}, Pf={inputs.P_final})"
        )


def integral_blowdown(inputs: ProcessInputs, margin: float = MARGIN_DEFAULT) -> float:
    """Area-free integral ``I`` with ``t = V / (R T Cd A) * I``."""
    _check_blowdown(inputs)
    gas = inputs.gas
    g = gas.gamma
    P_star = inputs.P2 / critical_pressure_ratio(g)
    Pf = inputs.P_final
    C_star = sonic_coefficient(g, gas.R, inputs.T)
    K = subsonic_coefficient(g, gas.R, inputs.T)

    if inputs.P1 > P_star:
        sonic = math.log(inputs.P1 / P_star) / C_star
        sub = subcritical_integral_blowdown(inputs.P2, P_star, Pf, g, margin)
        return sonic + sub / K
    return subcritical_integral_blowdown(inputs.P2, inputs.P1, Pf, g, margin) / K


def integral_filling(inputs: ProcessInputs, margin: float = MARGIN_DEFAULT) -> float:
    _check_filling(inputs)
    gas = inputs.gas
    g = gas.gamma
    Ps = float(inputs.Ps)
    P_star = critical_pressure_ratio(g) * Ps
    Pf = inputs.P_final
    C_star = sonic_coefficient(g, gas.R, inputs.T)
    K = subsonic_coefficient(g, gas.R, inputs.T)

    total = 0.0
    if inputs.P1 < P_star:
        total += (min(P_star, Pf) - inputs.P1) / (C_star * Ps)
    if Pf > P_star:
        P_start = max(inputs.P1, P_star)
        total += subcritical_integral_filling(Ps, P_start, Pf, g, margin) / K
    return total


def integral_total(inputs: ProcessInputs, margin: float = MARGIN_DEFAULT) -> float:
    if inputs.process == "blowdown":
        return integral_blowdown(inputs, margin)
    return integral_filling(inputs, margin)


def _scale(inputs: ProcessInputs, A: float) -> float:
    return inputs.V / (inputs.gas.R * inputs.T * inputs.Cd * A)


def orifice_time_blowdown(
    inputs: ProcessInputs, A: float, margin: float = MARGIN_DEFAULT
) -> float:
    assert_pos("A", A)
    return _scale(inputs, A) * integral_blowdown(inputs, margin)


def orifice_time_filling(
    inputs: ProcessInputs, A: float, margin: float = MARGIN_DEFAULT
) -> float:
    assert_pos("A", A)
    return _scale(inputs, A) * integral_filling(inputs, margin)


def orifice_time_function(
    inputs: ProcessInputs, margin: float = MARGIN_DEFAULT
) -> Callable[[float], float]:
    """Return the single ``A -> t`` map used for search, sampling and checks.

    The area-free integral is evaluated once; every call afterwards is a scale.
    """
    I_total = integral_total(inputs, margin)
    R_T_Cd = inputs.gas.R * inputs.T * inputs.Cd

    def time_of_area(A: float) -> float:
        if not (A > 0.0):
            return math.inf
        return inputs.V / (R_T_Cd * A) * I_total

    return time_of_area


def orifice_time(inputs: ProcessInputs, D: float, margin: float = MARGIN_DEFAULT) -> float:
    assert_pos("D", D)
    A = circle_area(D)
    if inputs.process == "blowdown":
        return orifice_time_blowdown(inputs, A, margin)
    return orifice_time_filling(inputs, A, margin)
