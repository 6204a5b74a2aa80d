"""Override strategies for class-to-type synthesis.

A strategy's `resolve` receives a context and returns a replacement string, or
None to keep the default. Empty strings count as None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from ..frontend.ast import DocBlock, Node
from ..frontend.builders import Builders


@dataclass
class ClassContext:
    """Argument bag for the class-name strategy."""

    program: Node
    builders: Builders
    type_cast: Callable[[str], DocBlock]
    super_class_name: str | None
    class_name: str


@dataclass
class ParamContext:
    """Argument bag for the per-parameter strategy."""

    program: Node
    builders: Builders
    type_cast: Callable[[str], DocBlock]
    class_name: str
    method_name: str
    param_name: str
    default_type: str


class ClassNameStrategy:
    """Picks the supertype merged into a synthesized class typedef."""

    def resolve(self, context: ClassContext) -> str | None:
        return None


class ParamTypeStrategy:
    """Picks the rendered type of one method parameter."""

    def resolve(self, context: ParamContext) -> str | None:
        return None


class CallableClassName(ClassNameStrategy):
    """Adapts a plain function `(context) -> str | None`."""

    def __init__(self, func: Callable[[ClassContext], str | None]):
        self.func: Callable[[ClassContext], str | None] = func

    def resolve(self, context: ClassContext) -> str | None:
        return self.func(context)


class CallableParamType(ParamTypeStrategy):
    """Adapts a plain function `(context) -> str | None`."""

    def __init__(self, func: Callable[[ParamContext], str | None]):
        self.func: Callable[[ParamContext], str | None] = func

    def resolve(self, context: ParamContext) -> str | None:
        return self.func(context)


DEFAULT_CLASS_NAME = ClassNameStrategy()
DEFAULT_PARAM_TYPE = ParamTypeStrategy()


def override(result: object) -> str | None:
    """Normalize a strategy result: only a non-empty string replaces."""
    if isinstance(result, str) and result != "":
        return result
    if result is None or result == "":
        return None
    raise TypeError("strategy must return a string or None, got " + type(result).__name__)
