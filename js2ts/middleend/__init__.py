"""Transform passes over the documented tree (mutate in place)."""

from ..frontend.ast import Node

from .classes import synthesize_class_types
from .hooks import ClassNameStrategy, ParamTypeStrategy
from .locals import remove_local_blocks
from .typedefs import inline_local_typedefs


def run_passes(
    program: Node,
    class_name_strategy: ClassNameStrategy | None = None,
    param_type_strategy: ParamTypeStrategy | None = None,
) -> None:
    """Run all passes in order, editing `program` in place."""
    inline_local_typedefs(program)
    remove_local_blocks(program)
    synthesize_class_types(program, class_name_strategy, param_type_strategy)
