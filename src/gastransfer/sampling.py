from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import asdict, dataclass, field

import numpy as np

from .constants import N_SAMPLES
from .errors import SolveError
from .geometry import circle_diameter


@dataclass(frozen=True)
class Sample:
    A: float
    D: float
    t: float


@dataclass
class SamplingTrace:
    samples: list[Sample]
    monotonic: bool
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "samples": [asdict(s) for s in self.samples],
            "monotonic": self.monotonic,
            "warnings": list(self.warnings),
        }


def sample_time_area(
    time_fn: Callable[[float], float],
    A_min: float,
    A_max: float,
    n: int = N_SAMPLES,
) -> SamplingTrace:
    """Evaluate ``time_fn`` at ``n`` log-spaced areas between the two bounds."""
    lo, hi = sorted((float(A_min), float(A_max)))
    if not (lo > 0.0):
        raise ValueError(f"sampling bounds must be > 0, got [{A_min}, {A_max}]")
    areas = np.geomspace(lo, hi, num=max(int(n), 2))

    samples: list[Sample] = []
    warnings: list[str] = []
    for A in areas:
        A = float(A)
        try:
            t = float(time_fn(A))
        except (ValueError, SolveError) as exc:
            warnings.append(f"sample at A={A:.3e} m2 failed: {exc}")
            continue
        if not math.isfinite(t):
            warnings.append(f"sample at A={A:.3e} m2 is not finite")
            continue
        samples.append(Sample(A=A, D=circle_diameter(A), t=t))

    monotonic = all(b.t < a.t for a, b in zip(samples, samples[1:]))
    if not monotonic:
        warnings.append("sampled time is not strictly decreasing in area")
    times = [s.t for s in samples]
    if len(times) >= 2 and min(times) > 0.0 and max(times) / min(times) < 2.0:
        warnings.append("sampled time span is narrow (ratio < 2)")
    return SamplingTrace(samples=samples, monotonic=monotonic, warnings=warnings)
