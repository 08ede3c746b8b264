"""Centralized animation framework."""

from .types import (
    AnimationState,
    EasingCurve,
    AnimationConfig,
    CustomAnimationConfig,
)
from .easing import ease, get_easing_function, EASING_FUNCTIONS
from .animator import Animation, CustomAnimator, AnimationManager

__all__ = [
    'AnimationState',
    'EasingCurve',
    'AnimationConfig',
    'CustomAnimationConfig',
    'ease',
    'get_easing_function',
    'EASING_FUNCTIONS',
    'Animation',
    'CustomAnimator',
    'AnimationManager',
]
