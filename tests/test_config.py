import pytest

from gastransfer.config import CaseFile


def test_case_file_roundtrip_json(tmp_path):
    cfg = CaseFile(process="filling", gas="N2", Ps_Pa=6.0e5, P1_Pa=1.0e5, P2_Pa=5.0e5)
    loaded = CaseFile.from_json(cfg.to_json())
    assert loaded == cfg

    path = tmp_path / "case.json"
    cfg.save_json(path)
    assert CaseFile.load_json(path) == cfg


def test_case_file_to_inputs():
    inputs = CaseFile(process="filling", gas="N2", Ps_Pa=6.0e5, P1_Pa=1.0e5, P2_Pa=5.0e5).to_process_inputs()
    inputs.validate()
    assert inputs.Ps == 6.0e5
    assert inputs.gas.name == "Nitrogen"
    assert inputs.model is None
    assert inputs.D is None

    blow = CaseFile().to_process_inputs()
    assert blow.Ps is None
    assert blow.t_target == 175.0


def test_case_file_custom_gas():
    cfg = CaseFile(gas="argon", gas_M_kg_mol=0.039948, gas_gamma=1.67, gas_mu_Pa_s=2.23e-5)
    gas = cfg.to_process_inputs().gas
    assert gas.name == "argon"
    assert gas.R == pytest.approx(208.13, rel=1e-3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"process": "purge"},
        {"model": "nozzle"},
        {"gas": "xenon"},
        {"V_m3": 0.0},
        {"process": "filling"},
    ],
)
def test_case_file_validation_rejects(kwargs):
    with pytest.raises(ValueError):
        CaseFile(**kwargs).validate()


def test_case_file_passes_missing_diameter_through():
    inputs = CaseFile(solve_for="time_from_diameter").to_process_inputs()
    assert inputs.D is None
    assert CaseFile(solve_for="time_from_diameter", D_m=1.0e-4).to_process_inputs().D == 1.0e-4
