import math

import pytest
from scipy.integrate import quad

from gastransfer.gases import GASES, GasProperties, get_gas
from gastransfer.quadrature import adaptive_simpson
from gastransfer.thermo import (
    critical_pressure_ratio,
    gas_density,
    reynolds_from_mass_flow,
    reynolds_number,
    sonic_coefficient,
    subsonic_coefficient,
    subsonic_mach,
)


def test_critical_ratio_air():
    assert critical_pressure_ratio(1.4) == pytest.approx(0.528282, rel=1e-5)


def test_sonic_coefficient_matches_choked_flux():
    gas = get_gas("air")
    T = 293.15
    c_star = sonic_coefficient(gas.gamma, gas.R, T)
    ref = math.sqrt(gas.gamma / (gas.R * T)) * (2.0 / 2.4) ** 3.0
    assert c_star == pytest.approx(ref, rel=1e-12)
    assert subsonic_coefficient(gas.gamma, gas.R, T) == pytest.approx(
        math.sqrt(2.8 / (gas.R * T * 0.4)), rel=1e-12
    )


@pytest.mark.parametrize("gamma", [1.3, 1.4, 1.67])
def test_subsonic_mach_reaches_one_at_critical_ratio(gamma):
    assert subsonic_mach(critical_pressure_ratio(gamma), gamma) == pytest.approx(1.0, rel=1e-12)
    assert subsonic_mach(0.95, gamma) < 1.0


def test_gas_table_specific_constant():
    assert GASES["air"].R == pytest.approx(287.06, rel=1e-4)
    assert get_gas("nitrogen") is GASES["N2"]
    with pytest.raises(KeyError, match="unknown gas"):
        get_gas("xenon")
    with pytest.raises(ValueError):
        GasProperties.from_molar_mass("bad", 0.03, 1.0, 1e-5)


def test_simpson_smooth_integral():
    res = adaptive_simpson(math.sin, 0.0, math.pi)
    assert res.converged
    assert res.value == pytest.approx(2.0, rel=1e-7)


def test_simpson_truncated_sqrt_singularity_matches_quad():
    def f(x):
        return 1.0 / math.sqrt(1.0 - x)

    b = 1.0 - 1e-3
    res = adaptive_simpson(f, 0.0, b)
    ref, _ = quad(f, 0.0, b, epsabs=1e-13, epsrel=1e-12)
    assert res.converged
    assert not res.max_depth_hit
    assert res.value == pytest.approx(ref, rel=1e-6)
    assert res.value == pytest.approx(2.0 * (1.0 - math.sqrt(1e-3)), rel=1e-6)


def test_simpson_empty_or_inverted_interval_is_zero():
    assert adaptive_simpson(math.exp, 1.0, 1.0).value == 0.0
    inverted = adaptive_simpson(math.exp, 2.0, 1.0)
    assert inverted.value == 0.0
    assert inverted.converged


def test_simpson_reports_depth_cap():
    res = adaptive_simpson(lambda x: 1.0 / math.sqrt(1.0 - x), 0.0, 1.0 - 1e-9, max_depth=3)
    assert not res.converged
    assert res.max_depth_hit


def test_simpson_non_finite_is_not_converged():
    res = adaptive_simpson(lambda x: math.nan, 0.0, 1.0)
    assert not res.converged


def test_reynolds_forms_agree():
    gas = get_gas("CO2")
    D = 1.0e-4
    A = math.pi * D * D / 4.0
    mdot = 3.0e-6
    rho = gas_density(2.0e5, gas.R, 300.0)
    Re_v = reynolds_number(rho, mdot / (rho * A), D, gas.mu)
    assert Re_v == pytest.approx(reynolds_from_mass_flow(mdot, D, gas.mu), rel=1e-12)
