from __future__ import annotations

import argparse
import json
import logging
from dataclasses import replace

from .cache import JsonBracketCache, NullBracketCache
from .capillary import capillary_time_function
from .config import CaseFile
from .engine import compute
from .errors import SolveError
from .events import LoggingSink
from .gases import GASES
from .gates import gate_blowdown, gate_capillary, gate_filling
from .io import (
    make_results_dir,
    print_result_summary,
    write_error_json,
    write_result_json,
    write_run_json,
    write_sampling_csv,
)
from .orifice import orifice_time_function
from .plotting import plot_sampling
from .sampling import sample_time_area
from .settings import SelectionPolicy, SolverSettings

EXIT_SOLVE_ERROR = 2

# flag name -> CaseFile field
_CASE_FLAGS = {
    "process": "process",
    "gas": "gas",
    "V": "V_m3",
    "P1": "P1_Pa",
    "P2": "P2_Pa",
    "Ps": "Ps_Pa",
    "T": "T_K",
    "L": "L_m",
    "Cd": "Cd",
    "eps": "epsilon",
    "model": "model",
}


def _add_case_args(s: argparse.ArgumentParser) -> None:
    s.add_argument("--case", default="", help="JSON case file (CaseFile fields)")
    s.add_argument("--process", choices=["blowdown", "filling"])
    s.add_argument("--gas", choices=sorted(GASES))
    s.add_argument("--V", type=float, help="vessel volume [m3]")
    s.add_argument("--P1", type=float, help="initial vessel pressure [Pa]")
    s.add_argument("--P2", type=float, help="final/ambient pressure [Pa]")
    s.add_argument("--Ps", type=float, help="supply pressure for filling [Pa]")
    s.add_argument("--T", type=float, help="temperature [K]")
    s.add_argument("--L", type=float, help="flow path length [m]")
    s.add_argument("--Cd", type=float)
    s.add_argument("--eps", type=float)
    s.add_argument("--model", choices=["orifice", "capillary"])
    s.add_argument("--out", default="results")
    s.add_argument("--do-plots", action="store_true")
    s.add_argument("-v", "--verbose", action="store_true")


def _case_from_args(args) -> CaseFile:
    case = CaseFile.load_json(args.case) if args.case else CaseFile()
    overrides = {
        field: getattr(args, flag)
        for flag, field in _CASE_FLAGS.items()
        if getattr(args, flag, None) is not None
    }
    return replace(case, **overrides)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="gastransfer")
    sub = p.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("gate")
    g.add_argument("--blowdown", action="store_true")
    g.add_argument("--filling", action="store_true")
    g.add_argument("--capillary", action="store_true")

    d = sub.add_parser("dfromt", help="diameter from target time")
    _add_case_args(d)
    d.add_argument("--t", default=None, help="target time [s]")
    d.add_argument("--retry", action="store_true", help="retry with 12 expansions")
    d.add_argument("--cache", default="", help="JSON bracket cache file")

    t = sub.add_parser("tfromd", help="time from diameter")
    _add_case_args(t)
    t.add_argument("--D", default=None, help="diameter [m]")

    s = sub.add_parser("sample", help="sample t(A) for one model")
    _add_case_args(s)
    s.add_argument("--A-min", type=float, default=1e-12)
    s.add_argument("--A-max", type=float, default=1e-4)
    s.add_argument("--n", type=int, default=9)
    return p


def _run_gates(args) -> int:
    selected = [args.blowdown, args.filling, args.capillary]
    run_all = not any(selected)
    for flag, gate in zip(selected, [gate_blowdown, gate_filling, gate_capillary]):
        if flag or run_all:
            print(gate())
    return 0


def _run_solve(args) -> int:
    case = _case_from_args(args)
    if args.cmd == "dfromt":
        case = replace(case, solve_for="diameter_from_time")
    else:
        case = replace(case, solve_for="time_from_diameter")
    inputs = case.to_process_inputs()
    # raw values so that the solver reports exactly what was given
    if args.cmd == "dfromt" and args.t is not None:
        inputs = replace(inputs, t_target=args.t)
    if args.cmd == "tfromd" and args.D is not None:
        inputs = replace(inputs, D=args.D)

    settings = SolverSettings()
    cache = NullBracketCache()
    retry = False
    if args.cmd == "dfromt":
        retry = args.retry
        if args.cache:
            cache = JsonBracketCache(args.cache)
    sink = LoggingSink()

    out = make_results_dir(args.cmd, root=args.out)
    write_run_json(
        out,
        params=json.loads(case.to_json()),
        solver_settings={
            **settings.to_dict(),
            "auto_retry": retry,
            "policy": SelectionPolicy().to_dict(),
        },
    )
    try:
        result = compute(inputs, settings, cache=cache, sink=sink, auto_retry=retry)
    except SolveError as exc:
        write_error_json(out, exc)
        print(json.dumps(exc.to_dict(), ensure_ascii=False, indent=2))
        return EXIT_SOLVE_ERROR

    write_result_json(out, result)
    if result.sampling is not None:
        write_sampling_csv(out, result.sampling)
        if args.do_plots:
            target = result.t if args.cmd == "dfromt" else None
            plot_sampling(out, args.cmd, result.sampling, target)
    print_result_summary(result)
    return 0


def _run_sample(args) -> int:
    inputs = _case_from_args(args).to_process_inputs()
    inputs.validate()
    if inputs.model == "capillary":
        time_fn = capillary_time_function(inputs)
    else:
        time_fn = orifice_time_function(inputs)
    trace = sample_time_area(time_fn, args.A_min, args.A_max, args.n)
    out = make_results_dir(args.cmd, root=args.out)
    write_sampling_csv(out, trace)
    if args.do_plots:
        plot_sampling(out, args.cmd, trace)
    for smp in trace.samples:
        print(f"A = {smp.A:.4e} m2   D = {smp.D * 1e3:.6g} mm   t = {smp.t:.6g} s")
    for w in trace.warnings:
        print(f"  - {w}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if getattr(args, "verbose", False):
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if args.cmd == "gate":
        return _run_gates(args)
    if args.cmd == "sample":
        return _run_sample(args)
    return _run_solve(args)


if __name__ == "__main__":
    raise SystemExit(main())
