"""Validity diagnostics for capillary and orifice candidates."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .cases import ProcessInputs
from .constants import MARGIN_DEFAULT
from .flow import mdot_orifice
from .geometry import circle_area, equivalent_diameter
from .orifice import integral_total
from .settings import SelectionPolicy
from .thermo import (
    critical_pressure_ratio,
    gas_density,
    reynolds_from_mass_flow,
    reynolds_number,
    subsonic_mach,
)


def viscous_regime(Re: float) -> str:
    if Re <= 2000.0:
        return "laminar"
    if Re <= 4000.0:
        return "transitional"
    return "turbulent"


@dataclass(frozen=True)
class CapillaryDiagnostics:
    D: float
    A: float
    L_over_D: float
    Re: float
    mdot_avg: float
    viscous_regime: str
    valid: bool
    deprioritized: bool
    above_ceiling: bool = False


@dataclass(frozen=True)
class OrificeDiagnostics:
    D: float
    A: float
    L_over_D: float
    Re: float
    Mach: float
    choked: bool
    r: float
    r_crit: float
    ratio_type: str
    P_upstream: float
    P_downstream: float
    mdot_initial: float
    rho_upstream: float
    v_upstream: float  # superficial velocity mdot / (rho_up A)
    flow_regime: str  # sonic|subsonic
    viscous_regime: str
    I_total: float
    valid: bool


def capillary_diagnostics(
    inputs: ProcessInputs,
    D: float,
    t: float,
    policy: SelectionPolicy | None = None,
    ceiling_D: float = math.inf,
) -> CapillaryDiagnostics:
    """Gate the closed-form capillary candidate on Re, L/D and the vessel ceiling.

    Re uses the mean mass flow over the whole transfer.
    """
    policy = policy or SelectionPolicy()
    mdot_avg = inputs.transferred_mass / t
    Re = reynolds_from_mass_flow(mdot_avg, D, inputs.gas.mu)
    L_over_D = inputs.L / D
    deprioritized = L_over_D < policy.deprioritize_l_over_d and Re > policy.deprioritize_re
    above_ceiling = D > ceiling_D
    valid = (
        Re <= policy.re_laminar_max
        and L_over_D >= policy.l_over_d_min
        and not deprioritized
        and not above_ceiling
    )
    return CapillaryDiagnostics(
        D=D,
        A=circle_area(D),
        L_over_D=L_over_D,
        Re=Re,
        mdot_avg=mdot_avg,
        viscous_regime=viscous_regime(Re),
        valid=valid,
        deprioritized=deprioritized,
        above_ceiling=above_ceiling,
    )


def orifice_diagnostics(
    inputs: ProcessInputs,
    D: float,
    policy: SelectionPolicy | None = None,
    margin: float = MARGIN_DEFAULT,
) -> OrificeDiagnostics:
    policy = policy or SelectionPolicy()
    gas = inputs.gas
    if inputs.process == "blowdown":
        P_up, P_dn = inputs.P1, inputs.P2
    else:
        P_up, P_dn = float(inputs.Ps), inputs.P1
    r = P_dn / P_up
    r_crit = critical_pressure_ratio(gas.gamma)
    choked = r < r_crit
    # pinned at the sonic condition, never derived from a velocity ratio
    mach = 1.0 if choked else subsonic_mach(r, gas.gamma)

    A = circle_area(D)
    mdot = mdot_orifice(P_up, inputs.T, P_dn, inputs.Cd, A, gas.gamma, gas.R)
    rho_up = gas_density(P_up, gas.R, inputs.T)
    v_up = mdot / (rho_up * A)
    Re = reynolds_number(rho_up, v_up, D, gas.mu)
    L_over_D = inputs.L / D
    return OrificeDiagnostics(
        D=D,
        A=A,
        L_over_D=L_over_D,
        Re=Re,
        Mach=mach,
        choked=choked,
        r=r,
        r_crit=r_crit,
        ratio_type=inputs.ratio_type,
        P_upstream=P_up,
        P_downstream=P_dn,
        mdot_initial=mdot,
        rho_upstream=rho_up,
        v_upstream=v_up,
        flow_regime="sonic" if choked else "subsonic",
        viscous_regime=viscous_regime(Re),
        I_total=integral_total(inputs, margin),
        valid=L_over_D <= policy.orifice_max_l_over_d,
    )


def generate_warnings(
    inputs: ProcessInputs,
    D: float,
    capillary: CapillaryDiagnostics | None = None,
    orifice: OrificeDiagnostics | None = None,
    policy: SelectionPolicy | None = None,
) -> list[str]:
    policy = policy or SelectionPolicy()
    out: list[str] = []
    if capillary is not None:
        if capillary.Re > policy.re_laminar_max:
            out.append(
                f"capillary Re = {capillary.Re:.0f} exceeds the laminar limit "
                f"{policy.re_laminar_max:.0f}"
            )
        if capillary.L_over_D < policy.l_over_d_min:
            out.append(
                f"capillary L/D = {capillary.L_over_D:.1f} is below "
                f"{policy.l_over_d_min:.0f}; entrance effects dominate"
            )
        if capillary.deprioritized:
            out.append("capillary model de-prioritised: short path in turbulent flow")
        if capillary.above_ceiling:
            out.append(
                f"capillary diameter {capillary.D * 1e3:.2f} mm exceeds the vessel ceiling"
            )
    if orifice is not None and orifice.choked:
        out.append(f"orifice initially choked ({orifice.ratio_type} = {orifice.r:.4g})")

    if inputs.process == "blowdown":
        ratio = inputs.P1 / inputs.P2
    else:
        ratio = float(inputs.Ps) / inputs.P1
    if ratio > policy.pressure_ratio_warning:
        out.append(f"pressure ratio {ratio:.1f} is high; compressibility dominates")

    if math.isfinite(D) and D > 0.0:
        D_eq = equivalent_diameter(inputs.V)
        frac = D / D_eq
        if frac > policy.volume_ratio_warning:
            out.append(
                f"diameter {D * 1e3:.2f} mm is {frac * 100:.1f}% of the vessel "
                f"equivalent diameter {D_eq * 1e3:.2f} mm"
            )
    return out
