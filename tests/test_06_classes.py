"""Class-to-type synthesis and override hooks."""

import pytest

from js2ts import AssistantOptions, transform
from js2ts.backend.jsdoc import block_to_string
from js2ts.frontend import parse
from js2ts.middleend.classes import (
    build_type_text,
    super_class_name,
    synthesize_class_types,
)
from js2ts.middleend.errors import UnsupportedShapeError
from js2ts.middleend.hooks import (
    CallableClassName,
    CallableParamType,
    ClassNameStrategy,
    ParamTypeStrategy,
    override,
)

EXPORTED = """\
function make(Bar) {
    /** @export */
    return class Foo extends Bar {
        /**
         * @param {number} a
         * @param {string} [label]
         * @returns {string}
         */
        baz(a, label) {}
    };
}
"""

MIXED = """\
function make() {
    /** @export */
    return class Mixed extends mix(A, B) {
        get size() {}
        #secret() {}
        'quoted'() {}
    };
}
"""


def typedef_of(source: str, class_names=None, param_types=None):
    program = parse(source)
    blocks = synthesize_class_types(program, class_names, param_types)
    assert len(blocks) == 1
    return program, blocks[0]


# ============================================================
# SYNTHESIS
# ============================================================


def test_typedef_is_appended_to_body():
    program, block = typedef_of(EXPORTED)
    assert program.body[-1] is block
    assert block.parent is program
    assert block not in program.doc_blocks
    tag = block.tags[0]
    assert tag.tag == "typedef"
    assert tag.name == "Foo"
    assert tag.raw_type == "{\n  baz: (a: number, label?: string) => string\n} & Bar"


def test_typedef_layout():
    _, block = typedef_of(EXPORTED)
    assert block.start is None
    assert block.leading_break
    assert block.end_line


def test_member_kinds():
    _, block = typedef_of(
        MIXED, CallableClassName(lambda context: "Base")
    )
    assert block.tags[0].raw_type == (
        "{\n  size: () => void;\n  #secret: () => void;\n  'quoted': () => void\n} & Base"
    )


def test_unnameable_supertype_without_hook():
    with pytest.raises(UnsupportedShapeError) as info:
        typedef_of(MIXED)
    assert "cannot name the superclass of Mixed" in str(info.value)
    assert info.value.line == 3


def test_every_export_gets_a_typedef():
    source = (
        "function a() {\n    /** @export */\n    return class A {};\n}\n"
        "function b() {\n    /** @export */\n    return class B {};\n}\n"
    )
    program = parse(source)
    blocks = synthesize_class_types(program)
    assert [b.tags[0].name for b in blocks] == ["A", "B"]
    assert [b.tags[0].raw_type for b in blocks] == ["{}", "{}"]


def test_no_exports():
    program = parse("function f() { return class A {}; }")
    assert synthesize_class_types(program) == []
    assert len(program.body) == 1


def test_first_return_tag_wins():
    source = (
        "function f() {\n"
        "    /** @export */\n"
        "    return class A {\n"
        "        /**\n"
        "         * @return {number}\n"
        "         * @returns {string}\n"
        "         */\n"
        "        m() {}\n"
        "    };\n"
        "}\n"
    )
    _, block = typedef_of(source)
    assert block.tags[0].raw_type == "{\n  m: () => number\n}"


def test_untyped_param_is_any():
    source = (
        "function f() {\n"
        "    /** @export */\n"
        "    return class A {\n"
        "        /** @param a */\n"
        "        m(a) {}\n"
        "    };\n"
        "}\n"
    )
    _, block = typedef_of(source)
    assert block.tags[0].raw_type == "{\n  m: (a: any) => void\n}"


@pytest.mark.parametrize(
    "expr,expected",
    [("Bar", "Bar"), ("a.b.C", "a.b.C"), ("mix(A)", None), ("a[b]", None)],
)
def test_super_class_name(expr: str, expected):
    program = parse("x = " + expr + ";")
    assert super_class_name(program.body[0].expression.right) == expected


def test_super_class_name_none():
    assert super_class_name(None) is None


@pytest.mark.parametrize(
    "signatures,supertype,expected",
    [
        ([], None, "{}"),
        ([], "Bar", "{} & Bar"),
        (["a: () => void"], None, "{\n  a: () => void\n}"),
        (["a: () => void", "b: () => void"], "X", "{\n  a: () => void;\n  b: () => void\n} & X"),
    ],
)
def test_build_type_text(signatures, supertype, expected):
    assert build_type_text(signatures, supertype) == expected


# ============================================================
# HOOKS
# ============================================================


class RecordingClassName(ClassNameStrategy):
    def __init__(self, result):
        self.result = result
        self.contexts = []

    def resolve(self, context):
        self.contexts.append(context)
        return self.result


class RecordingParamType(ParamTypeStrategy):
    def __init__(self, results):
        self.results = results
        self.contexts = []

    def resolve(self, context):
        self.contexts.append(context)
        return self.results.get(context.param_name)


def test_class_hook_context():
    hook = RecordingClassName("Base<T>")
    program, block = typedef_of(EXPORTED, hook)
    assert block.tags[0].raw_type.endswith("} & Base<T>")
    [context] = hook.contexts
    assert context.program is program
    assert context.class_name == "Foo"
    assert context.super_class_name == "Bar"


def test_class_hook_empty_keeps_default():
    _, block = typedef_of(EXPORTED, RecordingClassName(""))
    assert block.tags[0].raw_type.endswith("} & Bar")


def test_class_hook_without_superclass():
    hook = RecordingClassName(None)
    _, block = typedef_of("function f() {\n    /** @export */\n    return class A {};\n}", hook)
    assert hook.contexts[0].super_class_name is None
    assert block.tags[0].raw_type == "{}"


def test_param_hook_context():
    hook = RecordingParamType({"a": "Long"})
    _, block = typedef_of(EXPORTED, None, hook)
    assert block.tags[0].raw_type.startswith("{\n  baz: (a: Long, label?: string) => string")
    first, second = hook.contexts
    assert (first.class_name, first.method_name, first.param_name) == ("Foo", "baz", "a")
    assert first.default_type == "number"
    assert second.param_name == "label"
    assert second.default_type == "string"


def test_callable_param_hook():
    hook = CallableParamType(lambda context: context.default_type + " | null")
    _, block = typedef_of(EXPORTED, None, hook)
    assert "(a: number | null, label?: string | null) => string" in block.tags[0].raw_type


def test_hook_returning_non_string():
    with pytest.raises(TypeError):
        typedef_of(EXPORTED, CallableClassName(lambda context: 5))


def test_hook_type_cast_builder():
    seen = []

    def hook(context):
        seen.append(block_to_string(context.type_cast("Foo"), context.program.types))
        return None

    typedef_of(EXPORTED, CallableClassName(hook))
    assert seen == ["/** @type {Foo} */"]


def test_hooks_through_options():
    options = AssistantOptions(
        class_name_strategy=CallableClassName(lambda context: "Base"),
        param_type_strategy=CallableParamType(lambda context: None),
    )
    output = transform(MIXED, options)
    assert output.endswith(
        "/**\n"
        " * @typedef {{\n"
        " *   size: () => void;\n"
        " *   #secret: () => void;\n"
        " *   'quoted': () => void\n"
        " * } & Base} Mixed\n"
        " */\n"
    )


def test_typedef_starts_on_the_next_line():
    with_newline = transform(EXPORTED)
    without_newline = transform(EXPORTED.rstrip("\n"))
    assert with_newline == without_newline
    assert "}\n/**\n * @typedef {{\n" in with_newline
    assert "\n\n" not in with_newline
    assert with_newline.endswith(" */\n")


def test_blank_line_before_typedef_is_kept():
    output = transform(EXPORTED + "\n")
    assert "}\n\n/**\n * @typedef {{\n" in output


@pytest.mark.parametrize(
    "value,expected", [("X", "X"), ("", None), (None, None)]
)
def test_override(value, expected):
    assert override(value) == expected


def test_override_rejects_other_types():
    with pytest.raises(TypeError):
        override(["X"])
