"""Class-to-type synthesis.

For an `@export` block on `return class Foo extends Bar { ... }`, append a
typedef to the program body merging the class's method signatures with its
supertype:

    /**
     * @typedef {{
     *   baz: (a: number) => string
     * } & Bar} Foo
     */
"""

from __future__ import annotations

from ..backend.jsdoc import tag_type_text
from ..frontend.ast import DocBlock, DocTag, Node
from ..frontend.builders import Builders
from ..frontend.query import query
from ..frontend.types import TypeArena
from .errors import UnsupportedShapeError
from .hooks import (
    DEFAULT_CLASS_NAME,
    DEFAULT_PARAM_TYPE,
    ClassContext,
    ClassNameStrategy,
    ParamContext,
    ParamTypeStrategy,
    override,
)

EXPORT_BLOCKS = 'DocBlock:has(> DocTag[tag="export"])'

RETURN_TAGS: set[str] = {"returns", "return"}


def _where(program: Node, node: Node | None) -> tuple[int, int]:
    source = getattr(program, "source_text", None)
    if node is None or node.start is None or source is None:
        return 0, 0
    line = source.count("\n", 0, node.start) + 1
    col = node.start - (source.rfind("\n", 0, node.start) + 1) + 1
    return line, col


def _unsupported(program: Node, node: Node | None, msg: str) -> UnsupportedShapeError:
    line, col = _where(program, node)
    return UnsupportedShapeError(msg, line, col)


def _member_name(key: Node) -> str:
    if key.type == "Identifier":
        return key.name
    if key.type == "PrivateIdentifier":
        return "#" + key.name
    if key.raw:
        return key.raw
    return str(key.value)


def super_class_name(node: Node | None) -> str | None:
    """Dotted syntax name of a superclass expression, or None when it has none."""
    if node is None:
        return None
    if node.type == "Identifier":
        return node.name
    if node.type == "MemberExpression" and not node.computed:
        head = super_class_name(node.object)
        if head is not None and node.property.type == "Identifier":
            return head + "." + node.property.name
    return None


class ClassTypeSynthesizer:
    """Builds typedef blocks for exported class expressions of one program."""

    def __init__(
        self,
        program: Node,
        class_name_strategy: ClassNameStrategy | None = None,
        param_type_strategy: ParamTypeStrategy | None = None,
    ):
        self.program: Node = program
        self.arena: TypeArena = program.types
        self.builders: Builders = Builders(self.arena)
        self.class_name_strategy: ClassNameStrategy = (
            class_name_strategy or DEFAULT_CLASS_NAME
        )
        self.param_type_strategy: ParamTypeStrategy = (
            param_type_strategy or DEFAULT_PARAM_TYPE
        )

    def run(self) -> list[DocBlock]:
        # Snapshot before appending to the body
        exports = query(self.program, EXPORT_BLOCKS)
        typedefs = [self.synthesize(block) for block in exports]
        for typedef in typedefs:
            typedef.parent = self.program
            self.program.body.append(typedef)
        return typedefs

    def synthesize(self, block: DocBlock) -> DocBlock:
        owner = block.parent
        if not isinstance(owner, Node) or owner is self.program:
            raise UnsupportedShapeError(
                "@export block is not attached to a statement", block.line, 1
            )
        if owner.type != "ReturnStatement":
            raise _unsupported(
                self.program,
                owner,
                "@export on " + owner.type + ", expected a return statement",
            )
        cls = owner.argument
        if cls is None or cls.type != "ClassExpression":
            shape = cls.type if cls is not None else "empty return"
            raise _unsupported(
                self.program,
                cls or owner,
                "@export returns " + shape + ", expected a class expression",
            )
        if cls.id is None:
            raise _unsupported(self.program, cls, "exported class has no name")
        class_name = cls.id.name
        signatures: list[str] = []
        for member in cls.body.body:
            if getattr(member, "computed", False):
                continue
            if member.type != "MethodDefinition":
                raise _unsupported(
                    self.program,
                    member,
                    "unsupported class member " + member.type + " in " + class_name,
                )
            if member.kind == "constructor":
                continue
            signatures.append(self.signature(class_name, member))
        supertype = self.supertype(class_name, cls)
        return self.builders.typedef(class_name, build_type_text(signatures, supertype))

    def supertype(self, class_name: str, cls: Node) -> str | None:
        default = super_class_name(cls.super_class)
        context = ClassContext(
            program=self.program,
            builders=self.builders,
            type_cast=self.builders.type_cast,
            super_class_name=default,
            class_name=class_name,
        )
        replacement = override(self.class_name_strategy.resolve(context))
        if replacement is not None:
            return replacement
        if cls.super_class is not None and default is None:
            raise _unsupported(
                self.program,
                cls.super_class,
                "cannot name the superclass of " + class_name,
            )
        return default

    def signature(self, class_name: str, member: Node) -> str:
        name = _member_name(member.key)
        prefix = "static " if member.is_static else ""
        doc = member.jsdoc
        if doc is None:
            return prefix + name + ": () => void"
        params: list[str] = []
        returns: DocTag | None = None
        for tag in doc.tags:
            if tag.tag == "param" and tag.name and "." not in tag.name:
                params.append(self.param(class_name, name, tag))
            elif tag.tag in RETURN_TAGS and returns is None:
                returns = tag
        ret = "void"
        if returns is not None:
            ret = tag_type_text(returns, self.arena).strip() or "void"
        return prefix + name + ": (" + ", ".join(params) + ") => " + ret

    def param(self, class_name: str, method_name: str, tag: DocTag) -> str:
        default = tag_type_text(tag, self.arena).strip() or "any"
        context = ParamContext(
            program=self.program,
            builders=self.builders,
            type_cast=self.builders.type_cast,
            class_name=class_name,
            method_name=method_name,
            param_name=tag.name,
            default_type=default,
        )
        type_text = override(self.param_type_strategy.resolve(context)) or default
        marker = "?" if tag.optional else ""
        return tag.name + marker + ": " + type_text


def build_type_text(signatures: list[str], supertype: str | None) -> str:
    """`{\\n  sig1;\\n  sig2\\n} & Super`; `{}` when there are no members."""
    if signatures:
        text = "{\n  " + ";\n  ".join(signatures) + "\n}"
    else:
        text = "{}"
    if supertype is not None:
        text += " & " + supertype
    return text


def synthesize_class_types(
    program: Node,
    class_name_strategy: ClassNameStrategy | None = None,
    param_type_strategy: ParamTypeStrategy | None = None,
) -> list[DocBlock]:
    """Append a typedef for every exported class expression. Returns them."""
    synthesizer = ClassTypeSynthesizer(program, class_name_strategy, param_type_strategy)
    return synthesizer.run()
