# CODATA 2018 molar gas constant [J/(mol K)]
R_UNIVERSAL = 8.314462618

CD_DEFAULT = 0.62
EPSILON_DEFAULT = 0.01
EPSILON_MIN = 1e-3
EPSILON_MAX = 0.1

# bracket search over cross-sectional area [m^2]
A_LO_DEFAULT = 1e-12
A_HI_DEFAULT = 1e-2
EXPAND_FACTOR = 10.0
MAX_EXPANSIONS_STRICT = 4
MAX_EXPANSIONS_RETRY = 12
CEILING_FACTOR = 2.0

# root search
BRENT_XTOL = 1e-6
BRENT_MAXITER = 200
BOUND_ATOL = 1e-10
BOUND_RTOL = 1e-6
RESIDUAL_FLOOR = 0.01
TARGET_FLOOR = 1e-9
REFINE_STEPS = (-0.1, 0.1, -0.05, 0.05)

# singular integrals
QUAD_RTOL = 1e-7
QUAD_ATOL = 1e-12
QUAD_MAX_DEPTH = 20
MARGIN_DEFAULT = 1e-3
MARGIN_MIN = 1e-6
MARGIN_MAX = 0.1
RATIO_MIN = 1e-12
RATIO_MAX = 1.0 - 1e-9

N_SAMPLES = 5
CACHE_TTL_S = 3600.0
