import json

from gastransfer.cli import EXIT_SOLVE_ERROR, main
from gastransfer.config import CaseFile


def _only_run_dir(root):
    dirs = [p for p in root.iterdir() if p.is_dir()]
    assert len(dirs) == 1
    return dirs[0]


def test_dfromt_writes_artifacts(tmp_path, capsys):
    code = main(["dfromt", "--t", "175", "--out", str(tmp_path)])
    assert code == 0
    out = _only_run_dir(tmp_path)
    result = json.loads((out / "result.json").read_text(encoding="utf-8"))
    assert result["verdict"] == "orifice"
    assert 7e-6 <= result["D"] <= 1.2e-5
    run = json.loads((out / "run.json").read_text(encoding="utf-8"))
    assert run["solver_settings"]["max_expansions"] == 4
    assert run["parameters"]["process"] == "blowdown"
    lines = (out / "sampling.csv").read_text(encoding="utf-8").splitlines()
    assert lines[0] == "A_m2,D_m,t_s"
    assert len(lines) == 6
    assert "verdict: orifice" in capsys.readouterr().out


def test_dfromt_reports_typed_error(tmp_path, capsys):
    code = main(["dfromt", "--t", "", "--out", str(tmp_path)])
    assert code == EXIT_SOLVE_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["kind"] == "input"
    assert payload["payload"]["raw"] == ""
    assert payload["payload"]["parsed"] == "nan"
    assert (_only_run_dir(tmp_path) / "error.json").exists()


def test_dfromt_unbracketable_then_retry(tmp_path, capsys):
    code = main(["dfromt", "--t", "1e10", "--out", str(tmp_path / "strict")])
    assert code == EXIT_SOLVE_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["kind"] == "bracketing"
    assert payload["payload"]["expansions"] == 4

    code = main(["dfromt", "--t", "1e10", "--retry", "--out", str(tmp_path / "retry")])
    assert code == 0


def test_dfromt_uses_cache_file(tmp_path):
    cache = tmp_path / "cache.json"
    main(["dfromt", "--t", "175", "--cache", str(cache), "--out", str(tmp_path / "r")])
    stored = json.loads(cache.read_text(encoding="utf-8"))
    assert "blowdown|Air" in stored


def test_tfromd_from_case_file(tmp_path, capsys):
    case = tmp_path / "case.json"
    CaseFile(solve_for="time_from_diameter", D_m=9.3e-6, model="orifice").save_json(case)
    code = main(["tfromd", "--case", str(case), "--out", str(tmp_path / "r")])
    assert code == 0
    out = _only_run_dir(tmp_path / "r")
    result = json.loads((out / "result.json").read_text(encoding="utf-8"))
    assert 160.0 < result["t"] < 190.0
    assert result["verdict"] == "orifice"


def test_sample_command_prints_trace(tmp_path, capsys):
    code = main(["sample", "--n", "4", "--A-min", "1e-12", "--A-max", "1e-8", "--out", str(tmp_path)])
    assert code == 0
    printed = capsys.readouterr().out.splitlines()
    assert sum(1 for line in printed if line.startswith("A = ")) == 4


def test_gate_command(capsys):
    assert main(["gate", "--capillary"]) == 0
    assert "GateMetrics" in capsys.readouterr().out


def test_tfromd_without_diameter_reports_input_error(tmp_path, capsys):
    code = main(["tfromd", "--out", str(tmp_path / "missing")])
    assert code == EXIT_SOLVE_ERROR
    payload = json.loads(capsys.readouterr().out)
    assert payload["kind"] == "input"
    assert "diameter" in payload["message"]

    code = main(["tfromd", "--D=-1e-5", "--out", str(tmp_path / "negative")])
    assert code == EXIT_SOLVE_ERROR
    assert json.loads(capsys.readouterr().out)["payload"]["parsed"] == -1.0e-5


def test_module_entry_logs_runs_and_crashes(tmp_path, monkeypatch):
    from gastransfer import __main__ as entry
    from gastransfer import cli

    monkeypatch.setenv("GASTRANSFER_STATE_DIR", str(tmp_path / "state"))
    assert entry.run(["gate", "--capillary"]) == 0
    runs = (tmp_path / "state" / "runs.log").read_text(encoding="utf-8")
    assert "argv=['gate', '--capillary']" in runs
    assert "exit code 0" in runs

    def boom(argv):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(cli, "main", boom)
    assert entry.run(["gate"]) == 1
    crashes = list((tmp_path / "state").glob("crash_*.log"))
    assert len(crashes) == 1
    assert "disk on fire" in crashes[0].read_text(encoding="utf-8")
