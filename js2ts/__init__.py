"""js2ts - promote JSDoc-only type annotations into typedefs."""

from .assistant import AssistantOptions, BatchResult, FileFailure, run, transform
from .middleend.errors import (
    AmbiguousTypedefError,
    TransformError,
    UnsupportedShapeError,
)
from .middleend.hooks import (
    ClassContext,
    ClassNameStrategy,
    ParamContext,
    ParamTypeStrategy,
)

__all__ = [
    "AmbiguousTypedefError",
    "AssistantOptions",
    "BatchResult",
    "ClassContext",
    "ClassNameStrategy",
    "FileFailure",
    "ParamContext",
    "ParamTypeStrategy",
    "TransformError",
    "UnsupportedShapeError",
    "run",
    "transform",
]
