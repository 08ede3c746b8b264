"""
Easing curves for the overlay fades.

Each curve maps linear progress t in [0, 1] onto eased progress in [0, 1].
"""
import math
from typing import Callable, Dict
from core.animation.types import EasingCurve


def linear(t: float) -> float:
    return t


def quad_in_out(t: float) -> float:
    # Accelerate over the first half, mirror it over the second
    if t < 0.5:
        return 2 * t * t
    return 1 - 2 * (1 - t) * (1 - t)


def sine_in_out(t: float) -> float:
    return (1 - math.cos(math.pi * t)) / 2


EASING_FUNCTIONS: Dict[EasingCurve, Callable[[float], float]] = {
    EasingCurve.LINEAR: linear,
    EasingCurve.QUAD_IN_OUT: quad_in_out,
    EasingCurve.SINE_IN_OUT: sine_in_out,
}


def get_easing_function(curve: EasingCurve) -> Callable[[float], float]:
    """
    Look up the function behind ``curve``.

    Raises:
        ValueError: If curve is not registered
    """
    try:
        return EASING_FUNCTIONS[curve]
    except KeyError:
        raise ValueError(f"Unknown easing curve: {curve}") from None


def ease(t: float, curve: EasingCurve) -> float:
    """Apply ``curve`` to ``t`` clamped to [0, 1]."""
    return get_easing_function(curve)(min(1.0, max(0.0, t)))
