"""Syntax tree — ESTree-shaped program nodes plus JSDoc block and tag nodes."""

from __future__ import annotations

from dataclasses import dataclass, field


# ============================================================
# PROGRAM NODES
# ============================================================


class Node:
    """A program node. `type` names the ESTree kind; child fields are listed in
    VISITOR_KEYS. `start`/`end` are source offsets, None for synthesized nodes."""

    def __init__(
        self, type_: str, start: int | None = None, end: int | None = None, **fields
    ):
        self.type: str = type_
        self.start: int | None = start
        self.end: int | None = end
        self.parent: Node | None = None
        self.jsdoc: DocBlock | None = None
        for name, value in fields.items():
            setattr(self, name, value)

    def __repr__(self) -> str:
        name = getattr(self, "name", None)
        if isinstance(name, str):
            return "Node(" + self.type + ", " + repr(name) + ")"
        return "Node(" + self.type + ")"


# Child fields per node kind, in source order
VISITOR_KEYS: dict[str, list[str]] = {
    "Program": ["body"],
    # Statements
    "EmptyStatement": [],
    "DebuggerStatement": [],
    "ExpressionStatement": ["expression"],
    "BlockStatement": ["body"],
    "StaticBlock": ["body"],
    "ReturnStatement": ["argument"],
    "ThrowStatement": ["argument"],
    "IfStatement": ["test", "consequent", "alternate"],
    "ForStatement": ["init", "test", "update", "body"],
    "ForInStatement": ["left", "right", "body"],
    "ForOfStatement": ["left", "right", "body"],
    "WhileStatement": ["test", "body"],
    "DoWhileStatement": ["body", "test"],
    "BreakStatement": ["label"],
    "ContinueStatement": ["label"],
    "LabeledStatement": ["label", "body"],
    "SwitchStatement": ["discriminant", "cases"],
    "SwitchCase": ["test", "consequent"],
    "TryStatement": ["block", "handler", "finalizer"],
    "CatchClause": ["param", "body"],
    "WithStatement": ["object", "body"],
    # Declarations
    "VariableDeclaration": ["declarations"],
    "VariableDeclarator": ["id", "init"],
    "FunctionDeclaration": ["id", "params", "body"],
    "ClassDeclaration": ["id", "super_class", "body"],
    "ClassBody": ["body"],
    "MethodDefinition": ["key", "value"],
    "PropertyDefinition": ["key", "value"],
    # Modules
    "ImportDeclaration": ["specifiers", "source"],
    "ImportSpecifier": ["imported", "local"],
    "ImportDefaultSpecifier": ["local"],
    "ImportNamespaceSpecifier": ["local"],
    "ExportNamedDeclaration": ["declaration", "specifiers", "source"],
    "ExportSpecifier": ["local", "exported"],
    "ExportDefaultDeclaration": ["declaration"],
    "ExportAllDeclaration": ["exported", "source"],
    # Expressions
    "Identifier": [],
    "PrivateIdentifier": [],
    "Literal": [],
    "ThisExpression": [],
    "Super": [],
    "TemplateLiteral": ["quasis", "expressions"],
    "TemplateElement": [],
    "TaggedTemplateExpression": ["tag", "quasi"],
    "ArrayExpression": ["elements"],
    "ObjectExpression": ["properties"],
    "Property": ["key", "value"],
    "SpreadElement": ["argument"],
    "FunctionExpression": ["id", "params", "body"],
    "ArrowFunctionExpression": ["params", "body"],
    "ClassExpression": ["id", "super_class", "body"],
    "UnaryExpression": ["argument"],
    "UpdateExpression": ["argument"],
    "BinaryExpression": ["left", "right"],
    "LogicalExpression": ["left", "right"],
    "AssignmentExpression": ["left", "right"],
    "ConditionalExpression": ["test", "consequent", "alternate"],
    "CallExpression": ["callee", "arguments"],
    "NewExpression": ["callee", "arguments"],
    "MemberExpression": ["object", "property"],
    "ChainExpression": ["expression"],
    "SequenceExpression": ["expressions"],
    "YieldExpression": ["argument"],
    "AwaitExpression": ["argument"],
    "MetaProperty": ["meta", "property"],
    "ImportExpression": ["source"],
    # Patterns
    "ObjectPattern": ["properties"],
    "ArrayPattern": ["elements"],
    "RestElement": ["argument"],
    "AssignmentPattern": ["left", "right"],
}


def child_nodes(node: Node) -> list[Node]:
    """Direct children in visitor-key order, skipping holes."""
    result: list[Node] = []
    for key in VISITOR_KEYS.get(node.type, []):
        value = getattr(node, key, None)
        if isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    result.append(item)
        elif isinstance(value, Node):
            result.append(value)
    return result


def walk(node: Node) -> list[Node]:
    """Pre-order list of `node` and every program node below it."""
    result: list[Node] = []
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        result.append(current)
        children = child_nodes(current)
        i = len(children) - 1
        while i >= 0:
            stack.append(children[i])
            i -= 1
    return result


def set_parents(root: Node) -> None:
    """Point every child's `parent` at the node holding it."""
    for node in walk(root):
        for child in child_nodes(node):
            child.parent = node


# ============================================================
# DOCUMENTATION NODES
# ============================================================


@dataclass(eq=False)
class DocTag:
    """One `@tag {type} name description` annotation. `parsed_type` is a key
    into the program's type arena."""

    tag: str
    raw_type: str = ""
    parsed_type: int | None = None
    name: str = ""
    optional: bool = False
    default: str | None = None
    description: list[str] = field(default_factory=list)
    line: int = 0
    parent: DocBlock | None = None

    type = "DocTag"


@dataclass(eq=False)
class DocBlock:
    """A `/** ... */` block.

    `start`/`end` cover the block's owned layout span: the comment, the line
    break before it when it opens a line, and the line break plus indentation
    after it when one follows. Both are None for synthesized blocks.
    """

    tags: list[DocTag]
    description: list[str] = field(default_factory=list)
    initial: str = ""
    delimiter: str = "/**"
    terminal: str = "*/"
    one_line: bool = False
    leading_break: bool = False
    end_line: bool = False
    start: int | None = None
    end: int | None = None
    line: int = 0
    tags_removed: int = 0
    parent: object = None

    type = "DocBlock"


DOC_VISITOR_KEYS: dict[str, list[str]] = {
    "DocBlock": ["tags"],
    "DocTag": ["parsed_type"],
}
