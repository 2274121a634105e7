"""Area inversion of a monotonic forward time model.

``invert_area`` runs the full search for any strictly decreasing ``A -> t``
map: bracket seeding and expansion, Brent root search on ``log10(A)``,
rejection of roots stuck on a bracket end, forward residual verification with
local refinement, and acceptance with a sampling trace. ``solve_orifice_diameter``
binds it to the orifice model of a concrete process.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from scipy.optimize import brentq

from .bracket import Bracket, build_bracket
from .cache import BracketCache, NullBracketCache
from .cases import ProcessInputs
from .errors import (
    BracketingError,
    ConvergenceError,
    ConvergencePayload,
    ResidualError,
    ResidualPayload,
    validate_positive,
)
from .events import EventSink, SolverEvent, null_sink
from .geometry import ceiling_area, circle_diameter
from .orifice import orifice_time_function
from .sampling import SamplingTrace, sample_time_area
from .settings import SolverSettings


@dataclass(frozen=True)
class AreaSolution:
    D: float
    A: float
    t_forward: float
    residual: float
    residual_original: float
    tolerance: float
    bracket: Bracket
    iterations: int
    refined: bool
    sampling: SamplingTrace


def relative_residual(t: float, target: float, floor: float = 1e-9) -> float:
    return abs(t - target) / max(target, floor)


def _near_bound(A: float, bound: float, settings: SolverSettings) -> bool:
    gap = abs(A - bound)
    return gap <= settings.bound_atol and gap <= settings.bound_rtol * bound


def _seed(
    time_fn, target, key, ceiling, settings, cache, sink
) -> Bracket:
    hint = cache.get(key) if key is not None else None
    if hint is not None:
        sink(SolverEvent("cache_hit", {"A_lo": hint.A_lo, "A_hi": hint.A_hi}))
        try:
            return build_bracket(
                time_fn, target, hint.A_lo, hint.A_hi, ceiling, settings, sink
            )
        except BracketingError as exc:
            sink(SolverEvent("cache_fallback", {"reason": exc.payload.reason}))
    return build_bracket(
        time_fn, target, settings.A_lo, settings.A_hi, ceiling, settings, sink
    )


def _brent(time_fn, target: float, br: Bracket, settings: SolverSettings):
    def payload(reason: str, iterations: int = 0) -> ConvergencePayload:
        return ConvergencePayload(
            reason=reason,
            A_lo=br.A_lo,
            A_hi=br.A_hi,
            iterations=iterations,
            target=target,
        )

    def f(x: float) -> float:
        t = time_fn(10.0**x)
        if not math.isfinite(t):
            raise ConvergenceError(
                f"forward time not finite at A={10.0**x:g}", payload("non_finite")
            )
        return t - target

    a, b = sorted((math.log10(br.A_lo), math.log10(br.A_hi)))
    fa, fb = f(a), f(b)
    if fa == 0.0:
        return 10.0**a, 0
    if fb == 0.0:
        return 10.0**b, 0
    if fa * fb > 0.0:
        raise ConvergenceError(
            "bracket ends do not change sign", payload("no_sign_change")
        )
    try:
        x, info = brentq(
            f,
            a,
            b,
            xtol=settings.xtol,
            maxiter=settings.maxiter,
            full_output=True,
            disp=False,
        )
    except ValueError as exc:
        raise ConvergenceError(str(exc), payload("brent_failed")) from exc
    if not info.converged:
        raise ConvergenceError(
            f"root search did not converge in {info.iterations} iterations",
            payload("maxiter", info.iterations),
            suggestions=("raise maxiter", "loosen xtol"),
        )
    return 10.0**x, int(info.iterations)


def _refine(time_fn, target, A, residual, ceiling, settings, sink):
    best_A, best_t, best_res = A, math.nan, residual
    for step in settings.refine_steps:
        A_try = A * (1.0 + step)
        if not (0.0 < A_try <= ceiling):
            continue
        t_try = time_fn(A_try)
        if not math.isfinite(t_try):
            continue
        r = relative_residual(t_try, target, settings.target_floor)
        if r < best_res:
            best_A, best_t, best_res = A_try, t_try, r
    sink(
        SolverEvent(
            "refined",
            {"A": A, "A_refined": best_A, "residual": residual, "residual_refined": best_res},
        )
    )
    return best_A, best_t, best_res


def invert_area(
    time_fn: Callable[[float], float],
    target: float,
    *,
    ceiling: float,
    eps: float,
    settings: SolverSettings | None = None,
    cache: BracketCache | None = None,
    key: tuple[str, str] | None = None,
    sink: EventSink | None = None,
    choking_ratio: float = math.nan,
    ratio_type: str = "",
    model: str = "orifice",
) -> AreaSolution:
    settings = settings or SolverSettings()
    cache = cache if cache is not None else NullBracketCache()
    sink = sink or null_sink
    tol = settings.tolerance(eps)

    br = _seed(time_fn, target, key, ceiling, settings, cache, sink)
    A, iterations = _brent(time_fn, target, br, settings)
    t_fwd = time_fn(A)
    residual = relative_residual(t_fwd, target, settings.target_floor)
    sink(SolverEvent("root_found", {"A": A, "iterations": iterations, "residual": residual}))

    for bound, name in ((br.A_lo, "lower"), (br.A_hi, "upper")):
        if _near_bound(A, bound, settings) and not (residual <= tol):
            sink(SolverEvent("boundary_rejected", {"A": A, "bound": name, "residual": residual}))
            raise BracketingError(
                f"root landed on the {name} bound without an interior solution "
                f"(residual {residual:.3g} > {tol:.3g})",
                br.payload(target, "hit_bound", bound_hit=name, residual=residual),
                suggestions=("widen the bracket", "check that the target is reachable"),
            )

    residual_original = residual
    refined = False
    if not (residual <= tol):
        A_ref, t_ref, res_ref = _refine(time_fn, target, A, residual, ceiling, settings, sink)
        refined = A_ref != A
        if refined:
            A, t_fwd, residual = A_ref, t_ref, res_ref
        if not (residual <= tol):
            sink(SolverEvent("residual_rejected", {"A": A, "residual": residual, "tolerance": tol}))
            raise ResidualError(
                f"forward time {t_fwd:.6g} s misses target {target:.6g} s "
                f"(residual {residual:.3g} > {tol:.3g})",
                ResidualPayload(
                    target=target,
                    t_forward=t_fwd,
                    residual=residual,
                    epsilon=eps,
                    tolerance=tol,
                    A_lo=br.A_lo,
                    A_hi=br.A_hi,
                    choking_ratio=choking_ratio,
                    ratio_type=ratio_type,
                    residual_original=residual_original,
                    residual_refined=residual,
                    D=circle_diameter(A),
                    model=model,
                ),
                suggestions=("increase epsilon", "try the other flow model"),
            )

    sampling = sample_time_area(time_fn, br.A_lo, br.A_hi, settings.n_samples)
    if key is not None:
        cache.put(key, br)
    D = circle_diameter(A)
    sink(SolverEvent("accepted", {"D": D, "A": A, "residual": residual, "refined": refined}))
    return AreaSolution(
        D=D,
        A=A,
        t_forward=t_fwd,
        residual=residual,
        residual_original=residual_original,
        tolerance=tol,
        bracket=br,
        iterations=iterations,
        refined=refined,
        sampling=sampling,
    )


def solve_orifice_diameter(
    inputs: ProcessInputs,
    settings: SolverSettings | None = None,
    cache: BracketCache | None = None,
    sink: EventSink | None = None,
) -> AreaSolution:
    settings = settings or SolverSettings()
    target = validate_positive(inputs.t_target)
    inputs.validate()
    time_fn = orifice_time_function(inputs, settings.margin)
    return invert_area(
        time_fn,
        target,
        ceiling=ceiling_area(inputs.V, settings.ceiling_factor),
        eps=inputs.eps,
        settings=settings,
        cache=cache,
        key=(inputs.process, inputs.gas.name),
        sink=sink,
        choking_ratio=inputs.choking_ratio,
        ratio_type=inputs.ratio_type,
    )
