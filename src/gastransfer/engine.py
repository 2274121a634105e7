"""Top-level compute paths: diameter from time and time from diameter."""

from __future__ import annotations

import logging

from .cache import BracketCache
from .capillary import capillary_diameter, capillary_time, capillary_time_function
from .cases import ProcessInputs, SolveResult
from .diagnostics import capillary_diagnostics, generate_warnings, orifice_diagnostics
from .errors import (
    BracketingError,
    BracketPayload,
    ResidualError,
    ResidualPayload,
    validate_positive,
)
from .events import EventSink, SolverEvent, null_sink
from .geometry import ceiling_area, ceiling_diameter, circle_area
from .orifice import orifice_time, orifice_time_function
from .sampling import sample_time_area
from .settings import SelectionPolicy, SolverSettings
from .solver import relative_residual, solve_orifice_diameter

log = logging.getLogger(__name__)


def _solve_orifice(inputs, settings, cache, sink, auto_retry):
    try:
        return solve_orifice_diameter(inputs, settings, cache, sink)
    except BracketingError as exc:
        if not auto_retry or exc.payload.reason == "hit_bound":
            raise
        retry = settings.retry()
        sink(SolverEvent("retry", {"max_expansions": retry.max_expansions}))
        return solve_orifice_diameter(inputs, retry, cache, sink)


def _raise_above_ceiling(inputs, target, D, settings):
    time_fn = capillary_time_function(inputs)
    A_ceiling = ceiling_area(inputs.V, settings.ceiling_factor)
    raise BracketingError(
        f"capillary diameter {D:.4g} m exceeds the vessel ceiling "
        f"{ceiling_diameter(inputs.V, settings.ceiling_factor):.4g} m",
        BracketPayload(
            reason="above_ceiling",
            A_lo=settings.A_lo,
            A_hi=A_ceiling,
            t_lo=time_fn(settings.A_lo),
            t_hi=time_fn(A_ceiling),
            expansions=0,
            target=target,
            bound_hit="upper",
        ),
        suggestions=("increase the target time", "check the vessel volume"),
    )


def _select(cap_diag, ori_diag, orifice_fn, target):
    """Return ``(verdict, model, rationale, extra_warnings)``."""
    cap_ok = cap_diag is not None and cap_diag.valid
    ori_ok = ori_diag is not None and ori_diag.valid
    if cap_ok and ori_ok:
        # both candidates are scored against the orifice forward model
        res_cap = relative_residual(orifice_fn(cap_diag.A), target)
        res_ori = relative_residual(orifice_fn(ori_diag.A), target)
        if res_cap < res_ori:
            return "capillary", "capillary", (
                f"both models valid; capillary residual {res_cap:.3g} < "
                f"orifice residual {res_ori:.3g}"
            ), []
        return "orifice", "orifice", (
            f"both models valid; orifice residual {res_ori:.3g} <= "
            f"capillary residual {res_cap:.3g}"
        ), []
    if cap_ok:
        return "capillary", "capillary", "only the capillary model passes its gates", []
    if ori_ok:
        reason = "only the orifice model passes its gates"
        if cap_diag is None:
            reason = "capillary model not applicable; orifice used"
        return "orifice", "orifice", reason, []
    if cap_diag is not None and ori_diag is not None:
        return "both", "orifice", "neither model passes its gates", [
            "neither model is within its validity range; orifice diameter reported"
        ]
    return "inconclusive", "orifice", "no model passes its gates", [
        "orifice model outside its validity range and capillary model not applicable"
    ]


def compute_diameter_from_time(
    inputs: ProcessInputs,
    settings: SolverSettings | None = None,
    policy: SelectionPolicy | None = None,
    cache: BracketCache | None = None,
    sink: EventSink | None = None,
    auto_retry: bool = False,
) -> SolveResult:
    settings = settings or SolverSettings()
    policy = policy or SelectionPolicy()
    sink = sink or null_sink
    target = validate_positive(inputs.t_target)
    inputs.validate()

    warnings: list[str] = []
    ceiling_D = ceiling_diameter(inputs.V, settings.ceiling_factor)
    cap_D = cap_diag = None
    if inputs.model != "orifice":
        try:
            cap_D = capillary_diameter(inputs, target)
            cap_diag = capillary_diagnostics(inputs, cap_D, target, policy, ceiling_D)
        except ValueError as exc:
            if inputs.model == "capillary":
                raise
            log.debug("capillary closed form skipped: %s", exc)
            warnings.append(f"capillary model not applicable: {exc}")
    if inputs.model == "capillary" and cap_D > ceiling_D:
        _raise_above_ceiling(inputs, target, cap_D, settings)

    ori = ori_diag = None
    orifice_fn = None
    if inputs.model != "capillary":
        ori = _solve_orifice(inputs, settings, cache, sink, auto_retry)
        ori_diag = orifice_diagnostics(inputs, ori.D, policy, settings.margin)
        orifice_fn = orifice_time_function(inputs, settings.margin)

    if inputs.model is not None:
        verdict = model = inputs.model
        rationale = f"{model} model requested"
    else:
        verdict, model, rationale, extra = _select(
            cap_diag, ori_diag, orifice_fn, target
        )
        warnings.extend(extra)

    if model == "capillary":
        D = cap_D
        t_fwd = capillary_time(inputs, D)
    else:
        D = ori.D
        t_fwd = orifice_fn(circle_area(D))
    tol = settings.tolerance(inputs.eps)
    residual = relative_residual(t_fwd, target, settings.target_floor)
    if not (residual <= tol):
        raise ResidualError(
            f"selected {model} diameter fails the final check "
            f"(residual {residual:.3g} > {tol:.3g})",
            ResidualPayload(
                target=target,
                t_forward=t_fwd,
                residual=residual,
                epsilon=inputs.eps,
                tolerance=tol,
                A_lo=ori.bracket.A_lo if ori else float("nan"),
                A_hi=ori.bracket.A_hi if ori else float("nan"),
                choking_ratio=inputs.choking_ratio,
                ratio_type=inputs.ratio_type,
                residual_original=residual,
                residual_refined=residual,
                D=D,
                model=model,
            ),
        )

    if model == "orifice":
        sampling = ori.sampling
    else:
        A = circle_area(D)
        sampling = sample_time_area(
            capillary_time_function(inputs),
            A / settings.expand_factor,
            min(A * settings.expand_factor, ceiling_area(inputs.V, settings.ceiling_factor)),
            settings.n_samples,
        )

    warnings.extend(generate_warnings(inputs, D, cap_diag, ori_diag, policy))
    warnings.extend(sampling.warnings)
    return SolveResult(
        D=D,
        t=target,
        verdict=verdict,
        model=model,
        forward_time=t_fwd,
        residual=residual,
        capillary=cap_diag,
        orifice=ori_diag,
        warnings=warnings,
        rationale=rationale,
        D_capillary=cap_D,
        D_orifice=ori.D if ori else None,
        sampling=sampling,
    )


def compute_time_from_diameter(
    inputs: ProcessInputs,
    settings: SolverSettings | None = None,
    policy: SelectionPolicy | None = None,
) -> SolveResult:
    settings = settings or SolverSettings()
    policy = policy or SelectionPolicy()
    D = validate_positive(inputs.D, "diameter")
    inputs.validate()

    warnings: list[str] = []
    t_cap = cap_diag = None
    if inputs.model != "orifice":
        try:
            t_cap = capillary_time(inputs, D)
            cap_diag = capillary_diagnostics(inputs, D, t_cap, policy)
        except ValueError as exc:
            if inputs.model == "capillary":
                raise
            warnings.append(f"capillary model not applicable: {exc}")

    t_ori = ori_diag = None
    if inputs.model != "capillary":
        t_ori = orifice_time(inputs, D, settings.margin)
        ori_diag = orifice_diagnostics(inputs, D, policy, settings.margin)

    if inputs.model is not None:
        verdict = model = inputs.model
        rationale = f"{model} model requested"
    elif (
        cap_diag is not None
        and cap_diag.valid
        and abs(t_cap - t_ori) / max(t_cap, t_ori) <= policy.agreement_rel
    ):
        verdict, model = "both", "orifice"
        rationale = (
            f"models agree within {policy.agreement_rel:.0%} "
            f"(capillary {t_cap:.4g} s, orifice {t_ori:.4g} s)"
        )
    elif (
        cap_diag is not None
        and cap_diag.Re <= policy.ideal_capillary_re
        and cap_diag.L_over_D >= policy.ideal_capillary_l_over_d
    ):
        verdict = model = "capillary"
        rationale = (
            f"capillary regime (Re = {cap_diag.Re:.0f}, L/D = {cap_diag.L_over_D:.1f})"
        )
    else:
        verdict = model = "orifice"
        rationale = "outside the ideal capillary regime"

    t = t_cap if model == "capillary" else t_ori
    warnings.extend(generate_warnings(inputs, D, cap_diag, ori_diag, policy))
    return SolveResult(
        D=D,
        t=t,
        verdict=verdict,
        model=model,
        forward_time=t,
        residual=0.0,
        capillary=cap_diag,
        orifice=ori_diag,
        warnings=warnings,
        rationale=rationale,
        D_capillary=D if t_cap is not None else None,
        D_orifice=D if t_ori is not None else None,
        t_capillary=t_cap,
        t_orifice=t_ori,
    )


def compute(
    inputs: ProcessInputs,
    settings: SolverSettings | None = None,
    policy: SelectionPolicy | None = None,
    cache: BracketCache | None = None,
    sink: EventSink | None = None,
    auto_retry: bool = False,
) -> SolveResult:
    if inputs.solve_for == "time_from_diameter":
        return compute_time_from_diameter(inputs, settings, policy)
    return compute_diameter_from_time(inputs, settings, policy, cache, sink, auto_retry)
