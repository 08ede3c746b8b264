"""Engine module: shape generation and the scheduling cycle."""

from .errors import (
    OverlayError,
    ConfigurationError,
    GenerationError,
    GenerationCancelled,
    BackgroundLoadError,
)
from .shapes import ShapeKind, Rgba, ShapeSpec, Batch, CanvasGeometry
from .config import OverlayConfig
from .shape_factory import ShapeFactory, produce
from .batch_generator import BatchGenerator
from .generation_scheduler import GenerationScheduler, SchedulerState

__all__ = [
    'OverlayError', 'ConfigurationError', 'GenerationError', 'GenerationCancelled',
    'BackgroundLoadError', 'ShapeKind', 'Rgba', 'ShapeSpec', 'Batch', 'CanvasGeometry',
    'OverlayConfig', 'ShapeFactory', 'produce', 'BatchGenerator',
    'GenerationScheduler', 'SchedulerState',
]
