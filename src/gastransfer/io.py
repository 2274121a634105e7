from __future__ import annotations

import csv
import json
import platform
import subprocess
import sys
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from . import __version__


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def make_results_dir(case_name: str, root: str | Path = "results") -> Path:
    out = Path(root) / f"{utc_timestamp()}_{case_name}"
    out.mkdir(parents=True, exist_ok=True)
    return out


def current_git_commit() -> str:
    try:
        return subprocess.check_output(
            ["git", "rev-parse", "HEAD"], text=True, stderr=subprocess.DEVNULL
        ).strip()
    except (OSError, subprocess.CalledProcessError):
        return "unknown"


def package_version() -> str:
    try:
        return version("gastransfer")
    except PackageNotFoundError:
        return __version__


def _write_json(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    return path


def write_run_json(outdir: Path, params: dict, solver_settings: dict) -> Path:
    payload = {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "git_commit": current_git_commit(),
        "python_version": sys.version,
        "package_version": package_version(),
        "platform": platform.platform(),
        "parameters": params,
        "solver_settings": solver_settings,
    }
    return _write_json(outdir / "run.json", payload)


def write_result_json(outdir: Path, result) -> Path:
    return _write_json(outdir / "result.json", result.to_dict())


def write_error_json(outdir: Path, err) -> Path:
    return _write_json(outdir / "error.json", err.to_dict())


def write_sampling_csv(outdir: Path, trace) -> Path:
    path = outdir / "sampling.csv"
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=["A_m2", "D_m", "t_s"])
        writer.writeheader()
        for s in trace.samples:
            writer.writerow({"A_m2": s.A, "D_m": s.D, "t_s": s.t})
    return path


def print_result_summary(result) -> None:
    print(f"D = {result.D * 1e3:.6g} mm   t = {result.t:.6g} s")
    print(f"verdict: {result.verdict} ({result.rationale})")
    print(f"residual: {result.residual:.3g}")
    for w in result.warnings:
        print(f"  - {w}")
