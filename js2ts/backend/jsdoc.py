"""Render JSDoc blocks, tags and type expressions back to comment text."""

from __future__ import annotations

from ..frontend.ast import DocBlock, DocTag
from ..frontend.types import TypeArena, TypeNode

# Type kinds that need parentheses under a postfix or prefix operator
_LOOSE: set[str] = {"TypeUnion", "TypeIntersection", "TypeKeyof", "TypeTypeof"}


class _TypeEmitter:
    def __init__(self, arena: TypeArena):
        self.arena: TypeArena = arena

    def emit(self, key: int | None) -> str:
        if key is None:
            return ""
        node = self.arena.get(key)
        method = getattr(self, "emit_" + node.type)
        return method(node)

    def _is_arrow(self, node: TypeNode) -> bool:
        return node.type == "TypeFunction" and node.arrow

    def wrapped(self, key: int | None, loose: set[str]) -> str:
        """Emit `key`, parenthesized when its kind binds looser than the site."""
        if key is None:
            return ""
        node = self.arena.get(key)
        text = self.emit(key)
        if node.type in loose or self._is_arrow(node):
            return "(" + text + ")"
        return text

    def emit_TypeName(self, node) -> str:
        return node.value

    def emit_TypeAny(self, node) -> str:
        return "*"

    def emit_TypeUnknown(self, node) -> str:
        return "?"

    def emit_TypeStringValue(self, node) -> str:
        return node.quote + node.value + node.quote

    def emit_TypeNumber(self, node) -> str:
        return node.value

    def emit_TypeUnion(self, node) -> str:
        parts: list[str] = []
        for key in node.elements:
            if self._is_arrow(self.arena.get(key)):
                parts.append("(" + self.emit(key) + ")")
            else:
                parts.append(self.emit(key))
        return " | ".join(parts)

    def emit_TypeIntersection(self, node) -> str:
        return " & ".join(self.wrapped(key, {"TypeUnion"}) for key in node.elements)

    def emit_TypeGeneric(self, node) -> str:
        open_ = ".<" if node.dot else "<"
        args = ", ".join(self.emit(key) for key in node.elements)
        return self.emit(node.left) + open_ + args + ">"

    def emit_TypeArray(self, node) -> str:
        element = self.arena.get(node.element)
        text = self.wrapped(node.element, _LOOSE)
        if element.type in ("TypeNullable", "TypeNotNullable", "TypeVariadic") and (
            element.prefix
        ):
            text = "(" + text + ")"
        return text + "[]"

    def emit_TypeObjectField(self, node) -> str:
        text = "readonly " if node.readonly else ""
        text += node.quote + node.name + node.quote
        if node.optional:
            text += "?"
        if node.right is not None:
            text += ": " + self.emit(node.right)
        return text

    def emit_TypeObject(self, node) -> str:
        if not node.fields:
            return "{}"
        fields = (node.separator + " ").join(self.emit(key) for key in node.fields)
        return "{" + fields + "}"

    def emit_TypeTuple(self, node) -> str:
        return "[" + ", ".join(self.emit(key) for key in node.elements) + "]"

    def emit_TypeKeyValue(self, node) -> str:
        text = "..." if node.variadic else ""
        text += node.name
        if node.optional:
            text += "?"
        if node.right is not None:
            text += ": " + self.emit(node.right)
        return text

    def emit_TypeFunction(self, node) -> str:
        params = ", ".join(self.emit(key) for key in node.parameters)
        if node.arrow:
            ret = self.emit(node.return_type) if node.return_type is not None else "void"
            prefix = "new " if node.constructor else ""
            return prefix + "(" + params + ") => " + ret
        text = "function(" + params + ")"
        if node.return_type is not None:
            text += ": " + self.wrapped(node.return_type, {"TypeUnion", "TypeIntersection"})
        return text

    def emit_TypeParenthesis(self, node) -> str:
        return "(" + self.emit(node.element) + ")"

    def _affix(self, node, op: str) -> str:
        inner = self.wrapped(node.element, _LOOSE)
        if node.prefix:
            return op + inner
        return inner + op

    def emit_TypeNullable(self, node) -> str:
        return self._affix(node, "?")

    def emit_TypeNotNullable(self, node) -> str:
        return self._affix(node, "!")

    def emit_TypeOptional(self, node) -> str:
        return self._affix(node, "=")

    def emit_TypeVariadic(self, node) -> str:
        if node.element is None:
            return "..."
        return self._affix(node, "...")

    def emit_TypeTypeof(self, node) -> str:
        return "typeof " + self.emit(node.element)

    def emit_TypeKeyof(self, node) -> str:
        return "keyof " + self.wrapped(node.element, {"TypeUnion", "TypeIntersection"})


def type_to_string(arena: TypeArena, key: int) -> str:
    """Render the type rooted at `key`."""
    return _TypeEmitter(arena).emit(key)


def tag_type_text(tag: DocTag, arena: TypeArena) -> str:
    """The tag's type as it should now read: the source text unless an inlined
    reference changed it."""
    if tag.parsed_type is not None and arena.touched(tag.parsed_type):
        return type_to_string(arena, tag.parsed_type)
    return tag.raw_type


def tag_to_string(tag: DocTag, arena: TypeArena) -> str:
    """`@tag {type} name description`; may span lines."""
    text = "@" + tag.tag
    type_text = tag_type_text(tag, arena)
    if type_text or tag.parsed_type is not None:
        text += " {" + type_text + "}"
    if tag.name:
        name = tag.name
        if tag.optional:
            if tag.default is not None:
                name = "[" + name + "=" + tag.default + "]"
            else:
                name = "[" + name + "]"
        text += " " + name
    if tag.description:
        text += " " + tag.description[0]
        for line in tag.description[1:]:
            text += "\n" + line
    return text


def is_modified(block: DocBlock, arena: TypeArena) -> bool:
    """Has any pass changed what this block would print?"""
    if block.tags_removed:
        return True
    for tag in block.tags:
        if tag.parsed_type is not None and arena.touched(tag.parsed_type):
            return True
    return False


def block_to_string(block: DocBlock, arena: TypeArena) -> str:
    """The comment text, `/**` through `*/`. Continuation lines are indented
    with the block's `initial`; the first line is not."""
    lines: list[str] = list(block.description)
    for tag in block.tags:
        lines.extend(tag_to_string(tag, arena).split("\n"))
    if not lines:
        return block.delimiter + " " + block.terminal
    if block.one_line and len(lines) == 1:
        return block.delimiter + " " + lines[0] + " " + block.terminal
    out = block.delimiter + "\n"
    for line in lines:
        if line:
            out += block.initial + " * " + line + "\n"
        else:
            out += block.initial + " *\n"
    return out + block.initial + " " + block.terminal
