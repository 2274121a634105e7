import math

import pytest

from gastransfer.cases import ProcessInputs
from gastransfer.diagnostics import (
    capillary_diagnostics,
    generate_warnings,
    orifice_diagnostics,
)
from gastransfer.engine import compute, compute_diameter_from_time, compute_time_from_diameter
from gastransfer.errors import BracketingError, InputError
from gastransfer.events import RecordingSink
from gastransfer.gases import get_gas
from gastransfer.geometry import ceiling_area, ceiling_diameter
from gastransfer.settings import SelectionPolicy


def _scenario_a(**kw):
    base = dict(
        process="blowdown",
        solve_for="diameter_from_time",
        V=2.0e-7,
        P1=1.2e6,
        P2=1.0e3,
        T=288.15,
        L=0.002,
        gas=get_gas("air"),
        t_target=175.0,
    )
    base.update(kw)
    return ProcessInputs(**base)


def _filling(**kw):
    base = dict(
        process="filling",
        solve_for="diameter_from_time",
        V=1.0e-6,
        P1=1.0e5,
        P2=5.0e5,
        T=293.15,
        L=0.001,
        gas=get_gas("N2"),
        Ps=6.0e5,
        t_target=10.0,
    )
    base.update(kw)
    return ProcessInputs(**base)


def test_scenario_a_selects_orifice():
    res = compute_diameter_from_time(_scenario_a())
    assert 7e-6 <= res.D <= 1.2e-5
    assert res.verdict == "orifice"
    assert res.model == "orifice"
    assert res.residual <= 0.01
    assert res.orifice.choked
    assert res.orifice.Mach == 1.0
    assert res.orifice.ratio_type == "Pdown/Pup"
    # the capillary candidate is valid but loses the orifice-residual tie-break
    assert res.capillary.valid
    assert res.D_capillary == pytest.approx(5.5e-5, rel=0.03)
    assert res.D_orifice == res.D
    assert any("pressure ratio" in w for w in res.warnings)
    assert res.sampling is not None and res.sampling.monotonic


def test_scenario_b_input_errors():
    with pytest.raises(InputError) as ei:
        compute_diameter_from_time(_scenario_a(t_target=0))
    assert ei.value.payload.parsed == 0.0

    with pytest.raises(InputError) as ei:
        compute_diameter_from_time(_scenario_a(t_target=""))
    assert math.isnan(ei.value.payload.parsed)
    assert ei.value.to_dict()["payload"]["parsed"] == "nan"


def test_scenario_c_propagates_bracketing_error():
    with pytest.raises(BracketingError) as ei:
        compute_diameter_from_time(_scenario_a(t_target=1.0e10))
    assert ei.value.payload.expansions == 4


def test_auto_retry_recovers_long_target():
    sink = RecordingSink()
    res = compute_diameter_from_time(_scenario_a(t_target=1.0e10), sink=sink, auto_retry=True)
    assert "retry" in sink.kinds()
    assert res.residual <= 0.01


def test_scenario_d_ceiling_respected():
    V = 2.0e-6
    res = compute_diameter_from_time(_scenario_a(V=V, t_target=1.0e-3))
    assert res.D <= ceiling_diameter(V)


def test_scenario_d_forced_capillary_above_ceiling_raises():
    V = 2.0e-6
    with pytest.raises(BracketingError) as ei:
        compute_diameter_from_time(_scenario_a(V=V, t_target=1.0e-9, model="capillary"))
    payload = ei.value.payload
    assert payload.reason == "above_ceiling"
    assert payload.bound_hit == "upper"
    assert payload.A_hi == pytest.approx(ceiling_area(V), rel=1e-12)
    assert payload.t_hi > 1.0e-9


def test_capillary_candidate_above_ceiling_is_invalid():
    V = 2.0e-6
    inputs = _scenario_a(V=V, t_target=1.0e-9)
    ceiling = ceiling_diameter(V)
    diag = capillary_diagnostics(inputs, 2.0 * ceiling, 1.0e-9, ceiling_D=ceiling)
    assert diag.above_ceiling
    assert not diag.valid
    warnings = generate_warnings(inputs, 2.0 * ceiling, capillary=diag)
    assert any("exceeds the vessel ceiling" in w for w in warnings)
    assert not capillary_diagnostics(inputs, 0.5 * ceiling, 1.0, ceiling_D=ceiling).above_ceiling


def test_forced_capillary_uses_closed_form():
    res = compute_diameter_from_time(_scenario_a(model="capillary"))
    assert res.verdict == "capillary"
    assert res.orifice is None
    assert res.D == pytest.approx(5.5e-5, rel=0.03)
    assert res.forward_time == pytest.approx(175.0, rel=1e-9)
    assert res.sampling.monotonic


def test_capillary_not_applicable_degrades_to_warning():
    policy = SelectionPolicy(re_laminar_max=1e-3)
    res = compute_diameter_from_time(_scenario_a(), policy=policy)
    assert res.verdict == "orifice"
    assert not res.capillary.valid
    assert any("laminar limit" in w for w in res.warnings)


def test_neither_valid_reports_both():
    policy = SelectionPolicy(re_laminar_max=1e-3, orifice_max_l_over_d=1.0)
    res = compute_diameter_from_time(_scenario_a(), policy=policy)
    assert res.verdict == "both"
    assert res.model == "orifice"
    assert any("neither model" in w for w in res.warnings)


def test_filling_diameter_from_time():
    res = compute_diameter_from_time(_filling())
    assert res.residual <= 0.01
    assert res.orifice.ratio_type == "Pv/Ps"
    assert res.orifice.choked
    assert res.orifice.Mach == 1.0


def test_unchoked_filling_diameter_from_time():
    # P1 = 4e5 sits above r_crit * Ps, so the orifice never chokes
    res = compute_diameter_from_time(_filling(P1=4.0e5, t_target=5.0, model="orifice"))
    assert res.residual <= 0.01
    assert not res.orifice.choked
    assert res.orifice.flow_regime == "subsonic"
    assert res.orifice.Mach < 1.0
    assert 1.0e-5 < res.D < 3.0e-5


def test_filling_requires_supply_above_target():
    with pytest.raises(ValueError, match="Ps > P2 > P1"):
        compute_diameter_from_time(_filling(Ps=4.0e5))


def test_time_from_diameter_round_trip():
    solved = compute_diameter_from_time(_scenario_a())
    res = compute_time_from_diameter(
        _scenario_a(solve_for="time_from_diameter", D=solved.D, model="orifice")
    )
    assert res.t == pytest.approx(175.0, rel=0.01)
    assert res.verdict == "orifice"


def test_time_from_diameter_prefers_ideal_capillary():
    # a 9 um bore in a 2 mm wall is a long laminar capillary
    res = compute(_scenario_a(solve_for="time_from_diameter", D=9.3e-6))
    assert res.verdict == "capillary"
    assert res.t == res.t_capillary
    assert res.t_orifice == pytest.approx(175.0, rel=0.05)


def test_time_from_diameter_rejects_bad_diameter():
    with pytest.raises(InputError):
        compute_time_from_diameter(_scenario_a(solve_for="time_from_diameter", D=0.0))
    with pytest.raises(InputError):
        compute_time_from_diameter(_scenario_a(solve_for="time_from_diameter"))


def test_orifice_diagnostics_subsonic_mach():
    inputs = _scenario_a(P1=1.5e3)
    diag = orifice_diagnostics(inputs, 1.0e-4)
    assert not diag.choked
    assert diag.flow_regime == "subsonic"
    assert 0.0 < diag.Mach < 1.0
    assert diag.I_total > 0.0


def test_capillary_deprioritised_when_short_and_turbulent():
    inputs = _scenario_a(L=1.0e-4)
    diag = capillary_diagnostics(inputs, 1.0e-3, 0.01)
    assert diag.Re > 5000.0
    assert diag.deprioritized
    assert not diag.valid
    assert diag.viscous_regime == "turbulent"

    relaxed = capillary_diagnostics(inputs, 1.0e-3, 0.01, SelectionPolicy(deprioritize_re=1e9))
    assert not relaxed.deprioritized
    assert not relaxed.valid


def test_result_to_dict_is_json_ready():
    import json

    res = compute_diameter_from_time(_scenario_a())
    payload = json.loads(json.dumps(res.to_dict()))
    assert payload["verdict"] == "orifice"
    assert payload["orifice"]["Mach"] == 1.0
    assert len(payload["sampling"]["samples"]) == 5
