from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace

from .constants import (
    A_HI_DEFAULT,
    A_LO_DEFAULT,
    BOUND_ATOL,
    BOUND_RTOL,
    BRENT_MAXITER,
    BRENT_XTOL,
    CEILING_FACTOR,
    EXPAND_FACTOR,
    MARGIN_DEFAULT,
    MAX_EXPANSIONS_RETRY,
    MAX_EXPANSIONS_STRICT,
    N_SAMPLES,
    REFINE_STEPS,
    RESIDUAL_FLOOR,
    TARGET_FLOOR,
)


@dataclass(frozen=True)
class SolverSettings:
    A_lo: float = A_LO_DEFAULT
    A_hi: float = A_HI_DEFAULT
    max_expansions: int = MAX_EXPANSIONS_STRICT
    expand_factor: float = EXPAND_FACTOR
    ceiling_factor: float = CEILING_FACTOR
    xtol: float = BRENT_XTOL  # in log10(A)
    maxiter: int = BRENT_MAXITER
    bound_atol: float = BOUND_ATOL
    bound_rtol: float = BOUND_RTOL
    residual_floor: float = RESIDUAL_FLOOR
    target_floor: float = TARGET_FLOOR
    refine_steps: tuple[float, ...] = REFINE_STEPS
    n_samples: int = N_SAMPLES
    margin: float = MARGIN_DEFAULT

    def retry(self) -> SolverSettings:
        """Same settings with the wider expansion budget used on retry."""
        return replace(self, max_expansions=MAX_EXPANSIONS_RETRY)

    def tolerance(self, eps: float) -> float:
        return max(eps, self.residual_floor)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class SelectionPolicy:
    """Validity gates and thresholds for choosing between the two models.

    ``deprioritize_*`` is an empirical rule: a short capillary in strongly
    turbulent flow is dropped even when its closed form is computable.
    """

    re_laminar_max: float = 2000.0
    l_over_d_min: float = 10.0
    deprioritize_l_over_d: float = 10.0
    deprioritize_re: float = 5000.0
    orifice_max_l_over_d: float = math.inf
    agreement_rel: float = 0.05
    ideal_capillary_re: float = 1000.0
    ideal_capillary_l_over_d: float = 20.0
    pressure_ratio_warning: float = 10.0
    volume_ratio_warning: float = 0.1

    def to_dict(self) -> dict:
        return {k: (str(v) if v == math.inf else v) for k, v in asdict(self).items()}
