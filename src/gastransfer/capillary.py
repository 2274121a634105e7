"""Closed-form laminar capillary (isothermal Poiseuille) transfer.

With ``mdot = pi D^4 (P_up^2 - P_dn^2) / (256 mu L R T)`` the vessel pressure
equation separates, giving ``t = 128 mu L V ln(N/Dn) / (pi D^4 P_ref)``.
"""

from __future__ import annotations

import math
from collections.abc import Callable

from .cases import ProcessInputs
from .geometry import assert_pos, circle_diameter


def capillary_log_term(inputs: ProcessInputs) -> float:
    Pf = inputs.P_final
    if inputs.process == "blowdown":
        P1, P2 = inputs.P1, inputs.P2
        num = (P1 - P2) * (Pf + P2)
        den = (P1 + P2) * (Pf - P2)
    else:
        P1, Ps = inputs.P1, float(inputs.Ps)
        num = (Ps - P1) * (Pf + Ps)
        den = (Ps + P1) * (Ps - Pf)
    if num <= 0.0 or den <= 0.0:
        raise ValueError(
            f"capillary log argument is not positive (num={num:g}, den={den:g})"
        )
    ln_term = math.log(num / den)
    if not math.isfinite(ln_term) or ln_term <= 0.0:
        raise ValueError(f"capillary log term is not usable: {ln_term}")
    return ln_term


def _numerator(inputs: ProcessInputs) -> float:
    return 128.0 * inputs.gas.mu * inputs.L * inputs.V * capillary_log_term(inputs)


def capillary_diameter(inputs: ProcessInputs, t: float) -> float:
    assert_pos("t", t)
    D4 = _numerator(inputs) / (math.pi * t * inputs.P_ref)
    D = D4**0.25
    if not math.isfinite(D) or D <= 0.0:
        raise ValueError(f"capillary diameter is not finite: {D}")
    return D


def capillary_time(inputs: ProcessInputs, D: float) -> float:
    assert_pos("D", D)
    return _numerator(inputs) / (math.pi * D**4 * inputs.P_ref)


def capillary_time_function(inputs: ProcessInputs) -> Callable[[float], float]:
    num = _numerator(inputs)
    P_ref = inputs.P_ref

    def time_of_area(A: float) -> float:
        if not (A > 0.0):
            return math.inf
        return num / (math.pi * circle_diameter(A) ** 4 * P_ref)

    return time_of_area
