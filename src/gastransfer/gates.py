"""Cross-checks of the closed-form and quadrature models against ODE integration.

Each gate integrates the isothermal vessel mass balance
``dP/dt = +-(R T / V) * mdot(P)`` with the instantaneous flow laws from
:mod:`gastransfer.flow` and compares the time to reach ``Pf`` with the
forward model.
"""

from __future__ import annotations

from dataclasses import dataclass

from scipy.integrate import solve_ivp

from .capillary import capillary_time
from .cases import ProcessInputs
from .flow import mdot_capillary, mdot_orifice
from .gases import get_gas
from .geometry import circle_area
from .orifice import orifice_time


@dataclass(frozen=True)
class GateMetrics:
    name: str
    t_model: float
    t_ode: float
    err_time: float


def _time_to_final(rhs, inputs: ProcessInputs, t_guess: float) -> float:
    Pf = inputs.P_final

    def reached(t, y):
        return y[0] - Pf

    reached.terminal = True
    sol = solve_ivp(
        rhs,
        (0.0, 5.0 * t_guess),
        [inputs.P1],
        method="Radau",
        events=reached,
        rtol=1e-9,
        atol=1e-6 * inputs.P2,
    )
    if not sol.success or len(sol.t_events[0]) == 0:
        raise RuntimeError(f"gate integration did not reach Pf: {sol.message}")
    return float(sol.t_events[0][0])


def _metrics(name: str, t_model: float, t_ode: float) -> GateMetrics:
    return GateMetrics(
        name=name, t_model=t_model, t_ode=t_ode, err_time=abs(t_model - t_ode) / t_ode
    )


def gate_blowdown(D: float = 1.0e-5) -> GateMetrics:
    gas = get_gas("air")
    inputs = ProcessInputs(
        "blowdown", "time_from_diameter", 2.0e-7, 1.2e6, 1.0e3, 288.15, 0.002, gas, D=D
    )
    A = circle_area(D)
    k = gas.R * inputs.T / inputs.V

    def rhs(t, y):
        return [-k * mdot_orifice(y[0], inputs.T, inputs.P2, inputs.Cd, A, gas.gamma, gas.R)]

    t_model = orifice_time(inputs, D)
    return _metrics("blowdown", t_model, _time_to_final(rhs, inputs, t_model))


def gate_filling(D: float = 2.0e-4, P1: float = 1.0e5) -> GateMetrics:
    """Start at or above ``r_crit * Ps`` (about 3.2e5 Pa) to skip the sonic phase."""
    gas = get_gas("N2")
    inputs = ProcessInputs(
        "filling",
        "time_from_diameter",
        1.0e-6,
        P1,
        5.0e5,
        293.15,
        0.001,
        gas,
        Ps=6.0e5,
        D=D,
    )
    A = circle_area(D)
    k = gas.R * inputs.T / inputs.V

    def rhs(t, y):
        return [k * mdot_orifice(inputs.Ps, inputs.T, y[0], inputs.Cd, A, gas.gamma, gas.R)]

    t_model = orifice_time(inputs, D)
    return _metrics("filling", t_model, _time_to_final(rhs, inputs, t_model))


def gate_capillary(D: float = 1.0e-4) -> GateMetrics:
    gas = get_gas("air")
    inputs = ProcessInputs(
        "blowdown", "time_from_diameter", 1.0e-6, 3.0e5, 1.0e5, 293.15, 0.05, gas, D=D
    )
    k = gas.R * inputs.T / inputs.V

    def rhs(t, y):
        return [
            -k * mdot_capillary(y[0], inputs.T, inputs.P2, D, inputs.L, gas.mu, gas.R)
        ]

    t_model = capillary_time(inputs, D)
    return _metrics("capillary", t_model, _time_to_final(rhs, inputs, t_model))
