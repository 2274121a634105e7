"""Subcritical orifice integrals for isothermal blowdown and filling.

Both integrands are singular where the pressure ratio reaches one. The
substitutions ``y = (P2/P)^(1/gamma)`` (blowdown) and ``z = (P/Ps)^(1/gamma)``
(filling) move that singularity to the upper end of the integration variable,
where it is cut off at ``1 - margin``. Multiplying the returned value by
``V / (R T Cd A K)`` gives the subcritical transfer time.
"""

from __future__ import annotations

import math

from .constants import (
    MARGIN_DEFAULT,
    MARGIN_MAX,
    MARGIN_MIN,
    QUAD_MAX_DEPTH,
    RATIO_MAX,
    RATIO_MIN,
)
from .errors import IntegralError, IntegralPayload
from .quadrature import adaptive_simpson


def _clamp(x: float, lo: float, hi: float) -> float:
    return min(max(x, lo), hi)


def _ratio_root(ratio: float, gamma: float) -> float:
    return _clamp(ratio, RATIO_MIN, RATIO_MAX) ** (1.0 / gamma)


def _integrate(f, lower, upper, process, margin, P_start, P_final, P_ref, gamma, max_depth):
    if not (upper > lower):
        return 0.0
    res = adaptive_simpson(f, lower, upper, max_depth=max_depth)
    if not res.converged:
        raise IntegralError(
            f"{process} subcritical integral did not converge on "
            f"[{lower:.6g}, {upper:.6g}]",
            IntegralPayload(
                process=process,
                lower=lower,
                upper=upper,
                margin=margin,
                P_start=P_start,
                P_final=P_final,
                P_ref=P_ref,
                gamma=gamma,
                evaluations=res.evaluations,
            ),
            suggestions=("increase epsilon", "check the pressure inputs"),
        )
    return res.value


def subcritical_integral_blowdown(
    P2: float,
    P_start: float,
    P_final: float,
    gamma: float,
    margin: float = MARGIN_DEFAULT,
    max_depth: int = QUAD_MAX_DEPTH,
) -> float:
    margin = _clamp(margin, MARGIN_MIN, MARGIN_MAX)
    lower = _ratio_root(P2 / P_start, gamma)
    upper = min(_ratio_root(P2 / P_final, gamma), 1.0 - margin)

    def f(y: float) -> float:
        return gamma / (y * math.sqrt(y * y - y ** (gamma + 1.0)))

    return _integrate(
        f, lower, upper, "blowdown", margin, P_start, P_final, P2, gamma, max_depth
    )


def subcritical_integral_filling(
    Ps: float,
    P_start: float,
    P_final: float,
    gamma: float,
    margin: float = MARGIN_DEFAULT,
    max_depth: int = QUAD_MAX_DEPTH,
) -> float:
    margin = _clamp(margin, MARGIN_MIN, MARGIN_MAX)
    lower = _ratio_root(P_start / Ps, gamma)
    upper = min(_ratio_root(P_final / Ps, gamma), 1.0 - margin)

    def f(z: float) -> float:
        return gamma * z ** (gamma - 1.0) / math.sqrt(z * z - z ** (gamma + 1.0))

    return _integrate(
        f, lower, upper, "filling", margin, P_start, P_final, Ps, gamma, max_depth
    )
