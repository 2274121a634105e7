"""Adaptive Simpson quadrature with Richardson-corrected panels.

The recursion carries its depth and tolerance explicitly and reuses the
function values of the parent panel, so each refinement costs two new
evaluations.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from .constants import QUAD_ATOL, QUAD_MAX_DEPTH, QUAD_RTOL


@dataclass(frozen=True)
class QuadratureResult:
    value: float
    converged: bool
    evaluations: int
    max_depth_hit: bool


def _simpson(a: float, b: float, fa: float, fm: float, fb: float) -> float:
    return (b - a) / 6.0 * (fa + 4.0 * fm + fb)


def _panel(
    f: Callable[[float], float],
    a: float,
    b: float,
    fa: float,
    fm: float,
    fb: float,
    whole: float,
    tol: float,
    depth: int,
    max_depth: int,
) -> tuple[float, bool, int, bool]:
    m = 0.5 * (a + b)
    lm = 0.5 * (a + m)
    rm = 0.5 * (m + b)
    flm = f(lm)
    frm = f(rm)
    left = _simpson(a, m, fa, flm, fm)
    right = _simpson(m, b, fm, frm, fb)
    delta = left + right - whole

    if not math.isfinite(delta):
        return math.nan, False, 2, False
    if abs(delta) <= 15.0 * tol:
        return left + right + delta / 15.0, True, 2, False
    if depth >= max_depth:
        return left + right + delta / 15.0, False, 2, True

    lv, lok, ln, lhit = _panel(f, a, m, fa, flm, fm, left, 0.5 * tol, depth + 1, max_depth)
    rv, rok, rn, rhit = _panel(f, m, b, fm, frm, fb, right, 0.5 * tol, depth + 1, max_depth)
    return lv + rv, lok and rok, 2 + ln + rn, lhit or rhit


def adaptive_simpson(
    f: Callable[[float], float],
    a: float,
    b: float,
    rtol: float = QUAD_RTOL,
    atol: float = QUAD_ATOL,
    max_depth: int = QUAD_MAX_DEPTH,
) -> QuadratureResult:
    """Integrate ``f`` over ``[a, b]``.

    An empty or inverted interval integrates to zero. The result is flagged as
    not converged when any panel hit ``max_depth`` or produced a non-finite
    estimate; the caller decides whether that is fatal.
    """
    if not (b > a) or (b - a) < atol:
        return QuadratureResult(0.0, True, 0, False)

    fa = f(a)
    fb = f(b)
    fm = f(0.5 * (a + b))
    whole = _simpson(a, b, fa, fm, fb)
    if not math.isfinite(whole):
        return QuadratureResult(math.nan, False, 3, False)

    tol = max(atol, rtol * abs(whole))
    value, ok, n, hit = _panel(f, a, b, fa, fm, fb, whole, tol, 0, max_depth)
    return QuadratureResult(value, ok and math.isfinite(value), 3 + n, hit)
