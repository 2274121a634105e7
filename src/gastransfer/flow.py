import math

from .thermo import critical_pressure_ratio


def mdot_orifice(
    P_up: float,
    T: float,
    P_dn: float,
    Cd: float,
    A: float,
    gamma: float,
    r_gas: float,
) -> float:
    """Isentropic orifice mass flow [kg/s], choked below the critical ratio."""
    if P_up <= 0.0 or A <= 0.0:
        return 0.0
    r = max(P_dn, 0.0) / P_up
    if r >= 1.0:
        return 0.0

    if r <= critical_pressure_ratio(gamma):
        c_choked = math.sqrt(
            gamma * (2.0 / (gamma + 1.0)) ** ((gamma + 1.0) / (gamma - 1.0))
        )
        return Cd * A * P_up * c_choked / math.sqrt(r_gas * T)

    bracket = r ** (2.0 / gamma) - r ** ((gamma + 1.0) / gamma)
    if bracket <= 0.0:
        return 0.0
    return (
        Cd
        * A
        * P_up
        * math.sqrt(2.0 * gamma / ((gamma - 1.0) * r_gas * T) * bracket)
    )


def mdot_capillary(
    P_up: float,
    T: float,
    P_dn: float,
    D: float,
    L: float,
    mu: float,
    r_gas: float,
) -> float:
    """Isothermal compressible Poiseuille flow through a round tube [kg/s]."""
    if P_up <= 0.0 or D <= 0.0:
        return 0.0
    K = math.pi * D**4 / (256.0 * mu * L)
    dp2 = max(P_up**2 - max(P_dn, 0.0) ** 2, 0.0)
    return K * dp2 / (r_gas * T)
