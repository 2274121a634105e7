"""Monotonic area bracket for the time-to-area inversion.

The forward time is strictly decreasing in area, so a valid bracket has the
longer time at ``A_lo``. Expansion widens both ends by a fixed factor but never
lets ``A_hi`` exceed the physical ceiling of the vessel.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass

from .errors import BracketingError, BracketPayload
from .events import EventSink, SolverEvent, null_sink
from .settings import SolverSettings


@dataclass(frozen=True)
class Bracket:
    A_lo: float
    A_hi: float
    t_lo: float = math.nan
    t_hi: float = math.nan
    expansions: int = 0

    def swapped(self) -> Bracket:
        return Bracket(self.A_hi, self.A_lo, self.t_hi, self.t_lo, self.expansions)

    def includes(self, target: float) -> bool:
        return self.t_hi <= target <= self.t_lo

    def payload(self, target: float, reason: str, **extra) -> BracketPayload:
        return BracketPayload(
            reason=reason,
            A_lo=self.A_lo,
            A_hi=self.A_hi,
            t_lo=self.t_lo,
            t_hi=self.t_hi,
            expansions=self.expansions,
            target=target,
            **extra,
        )


def build_bracket(
    time_fn: Callable[[float], float],
    target: float,
    A_lo: float,
    A_hi: float,
    ceiling: float,
    settings: SolverSettings,
    sink: EventSink = null_sink,
) -> Bracket:
    A_hi = min(A_hi, ceiling)
    if not (0.0 < A_lo < A_hi):
        raise BracketingError(
            f"empty area bracket [{A_lo:g}, {A_hi:g}] below ceiling {ceiling:g}",
            Bracket(A_lo, A_hi).payload(target, "empty"),
        )
    sink(SolverEvent("bracket_seeded", {"A_lo": A_lo, "A_hi": A_hi, "ceiling": ceiling}))

    expansions = 0
    while True:
        br = Bracket(A_lo, A_hi, time_fn(A_lo), time_fn(A_hi), expansions)
        if not (math.isfinite(br.t_lo) and math.isfinite(br.t_hi)):
            raise BracketingError(
                f"forward time is not finite at the bracket ends "
                f"(t_lo={br.t_lo}, t_hi={br.t_hi})",
                br.payload(target, "non_finite"),
                suggestions=("check pressures and temperature",),
            )
        if br.t_lo < br.t_hi:
            br = br.swapped()
            sink(SolverEvent("bracket_swapped", {"A_lo": br.A_lo, "A_hi": br.A_hi}))
        if br.includes(target):
            sink(
                SolverEvent(
                    "bracket_included",
                    {"A_lo": br.A_lo, "A_hi": br.A_hi, "expansions": expansions},
                )
            )
            return br
        if expansions >= settings.max_expansions:
            if target > br.t_lo:
                hint = "target is longer than the smallest area allows; retry with more expansions"
            else:
                hint = "target is shorter than the largest physical opening allows"
            raise BracketingError(
                f"target {target:g} s not bracketed after {expansions} expansions "
                f"(t in [{br.t_hi:g}, {br.t_lo:g}] s)",
                br.payload(target, "out_of_bracket"),
                suggestions=(hint,),
            )
        A_lo /= settings.expand_factor
        A_hi = min(A_hi * settings.expand_factor, ceiling)
        expansions += 1
        sink(
            SolverEvent(
                "bracket_expanded",
                {"A_lo": A_lo, "A_hi": A_hi, "expansions": expansions},
            )
        )
