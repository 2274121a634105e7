import math

from .constants import CEILING_FACTOR


def circle_area(d: float) -> float:
    return math.pi * (d / 2.0) ** 2


def circle_diameter(A: float) -> float:
    return math.sqrt(4.0 * A / math.pi)


def equivalent_diameter(V: float) -> float:
    """Diameter of the sphere with volume ``V``."""
    return (6.0 * V / math.pi) ** (1.0 / 3.0)


def ceiling_diameter(V: float, k: float = CEILING_FACTOR) -> float:
    return k * equivalent_diameter(V)


def ceiling_area(V: float, k: float = CEILING_FACTOR) -> float:
    """Largest opening the solver may propose for a vessel of volume ``V``."""
    return circle_area(ceiling_diameter(V, k))


def assert_pos(name: str, val: float) -> None:
    if not (val > 0.0):
        raise ValueError(f"{name} must be > 0, got {val}")
