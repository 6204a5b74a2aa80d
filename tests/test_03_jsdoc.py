"""JSDoc block parsing, layout, attachment and type expression tests."""

import pytest

from js2ts.backend.jsdoc import block_to_string, tag_to_string, type_to_string
from js2ts.frontend import parse
from js2ts.frontend.builders import Builders
from js2ts.frontend.types import TypeArena, TypeParseError, parse_type


# ============================================================
# BLOCKS AND TAGS
# ============================================================


DOC = """\
/**
 * Summary line.
 *
 * @param {string} [name="x"] - The name
 * @param {number} count
 * @returns {number} count
 */
function f(name, count) {}
"""


def test_description_and_tags():
    block = parse(DOC).doc_blocks[0]
    assert block.description == ["Summary line."]
    assert [t.tag for t in block.tags] == ["param", "param", "returns"]
    name = block.tags[0]
    assert name.raw_type == "string"
    assert name.name == "name"
    assert name.optional
    assert name.default == '"x"'
    assert name.description == ["The name"]
    assert name.line == 4
    assert block.tags[1].name == "count"
    assert block.tags[1].optional is False
    returns = block.tags[2]
    assert returns.name == ""
    assert returns.description == ["count"]


def test_tag_rendering():
    program = parse(DOC)
    tags = program.doc_blocks[0].tags
    assert tag_to_string(tags[0], program.types) == '@param {string} [name="x"] The name'
    assert tag_to_string(tags[2], program.types) == "@returns {number} count"


def test_multiline_typedef():
    source = "/**\n * @typedef {{\n *   a: number,\n *   b: string\n * }} Pair\n */\n"
    program = parse(source)
    tag = program.doc_blocks[0].tags[0]
    assert tag.name == "Pair"
    assert tag.raw_type == "{\n  a: number,\n  b: string\n}"
    assert type_to_string(program.types, tag.parsed_type) == "{a: number, b: string}"


def test_bare_tags():
    program = parse("/** @local @export */\nx;")
    # Tags only start at the beginning of a line
    assert [t.tag for t in program.doc_blocks[0].tags] == ["local"]
    program = parse("/**\n * @local\n * @export\n */\nx;")
    assert [t.tag for t in program.doc_blocks[0].tags] == ["local", "export"]


def test_malformed_type_reports_tag():
    with pytest.raises(TypeParseError) as info:
        parse("/** @param {string|} x */\nf(x);")
    assert "in @param" in str(info.value)


def test_non_jsdoc_comments_are_ignored():
    program = parse("/* plain */\n/*** stars */\nx;")
    assert program.doc_blocks == []


# ============================================================
# LAYOUT
# ============================================================


def test_layout_at_file_start():
    source = "/**\n * a\n */\nfunction f() {}"
    block = parse(source).doc_blocks[0]
    assert block.start == 0
    assert not block.leading_break
    assert block.end_line
    assert source[block.end :] == "function f() {}"
    assert block.initial == ""
    assert not block.one_line


def test_layout_indented():
    source = "class A {\n    /** @returns {number} */\n    m() {}\n}"
    block = parse(source).doc_blocks[0]
    assert block.leading_break
    assert block.initial == "    "
    assert source[block.start] == "\n"
    assert source[block.start : block.end] == "\n    /** @returns {number} */\n    "
    assert block.one_line


def test_layout_inline():
    source = "x = /** @type {number} */ (y);"
    block = parse(source).doc_blocks[0]
    assert not block.leading_break
    assert not block.end_line
    assert source[block.start : block.end] == "/** @type {number} */ "


def test_adjacent_blocks_do_not_overlap():
    source = "/** a */\n/** b */\nx;"
    first, second = parse(source).doc_blocks
    assert first.end == 9
    assert second.start == 9
    assert not second.leading_break


def test_block_to_string_continuation_indent():
    source = "class A {\n    /**\n     * Doc.\n     * @param {T} a\n     */\n    m(a) {}\n}"
    program = parse(source)
    block = program.doc_blocks[0]
    assert block_to_string(block, program.types) == (
        "/**\n     * Doc.\n     * @param {T} a\n     */"
    )


def test_block_to_string_one_line():
    program = parse("/** @type {number} */\nx;")
    block = program.doc_blocks[0]
    assert block_to_string(block, program.types) == "/** @type {number} */"


# ============================================================
# ATTACHMENT
# ============================================================


def test_attaches_to_next_statement():
    program = parse("/** a */\nfunction f() {}")
    fn = program.body[0]
    assert fn.jsdoc is program.doc_blocks[0]
    assert program.doc_blocks[0].parent is fn


def test_blank_line_detaches():
    program = parse("/** a */\n\nfunction f() {}")
    assert program.body[0].jsdoc is None
    assert program.doc_blocks[0].parent is program


def test_intervening_comment_detaches():
    program = parse("/** a */\n// note\nfunction f() {}")
    assert program.body[0].jsdoc is None


def test_attaches_to_outermost_node():
    program = parse("/** a */\nexport function f() {}")
    assert program.body[0].type == "ExportNamedDeclaration"
    assert program.body[0].jsdoc is program.doc_blocks[0]
    assert program.body[0].declaration.jsdoc is None


def test_attaches_to_class_members():
    source = "class A {\n    /** @returns {number} */\n    static m() {}\n}"
    program = parse(source)
    member = program.body[0].body.body[0]
    assert member.jsdoc is program.doc_blocks[0]


def test_registry_and_source_blocks():
    program = parse("/** a */\nx;\n/** b */\ny;")
    assert len(program.doc_blocks) == 2
    assert program.doc_blocks is not program.source_blocks
    assert program.doc_blocks == program.source_blocks


# ============================================================
# TYPE EXPRESSIONS
# ============================================================


@pytest.mark.parametrize(
    "text,expected",
    [
        ("string", "string"),
        ("ns.Thing", "ns.Thing"),
        ("*", "*"),
        ("?", "?"),
        ("?string", "?string"),
        ("!Object", "!Object"),
        ("string=", "string="),
        ("...number", "...number"),
        ("string|number", "string | number"),
        ("(string|number)[]", "(string | number)[]"),
        ("Array<string>", "Array<string>"),
        ("Object.<string, number>", "Object.<string, number>"),
        ("{a: number, b?: string}", "{a: number, b?: string}"),
        ("{a: number; b: string}", "{a: number; b: string}"),
        ("[string, number]", "[string, number]"),
        ("(a: number, b?: string) => void", "(a: number, b?: string) => void"),
        ("function(string, number): boolean", "function(string, number): boolean"),
        ("'a' | 'b'", "'a' | 'b'"),
        ("keyof typeof x", "keyof typeof x"),
        ("new (x: number) => Foo", "new (x: number) => Foo"),
        ("A & B", "A & B"),
        ("1 | -1", "1 | -1"),
    ],
)
def test_type_round_trip(text: str, expected: str):
    arena = TypeArena()
    key = parse_type(text, arena)
    assert type_to_string(arena, key) == expected


@pytest.mark.parametrize("text", ["", "string|", "Array<string", "{a: }", "(a: number"])
def test_type_errors(text: str):
    with pytest.raises(TypeParseError):
        parse_type(text, TypeArena())


def test_arena_replace_shares_children():
    arena = TypeArena()
    root = parse_type("Array<string>", arena)
    ref = parse_type("Alias[]", arena)
    alias = arena.get(ref).element
    arena.replace(alias, root)
    assert type_to_string(arena, ref) == "Array<string>[]"
    assert arena.get(alias).left == arena.get(root).left
    assert arena.touched(ref)
    assert not arena.touched(root)


def test_built_types_render():
    arena = TypeArena()
    build = Builders(arena)
    fn = build.type_function(
        [("a", build.type_name("number"), False), ("b", None, True)],
        build.type_union([build.type_name("A"), build.type_name("B")]),
    )
    assert type_to_string(arena, fn) == "(a: number, b?) => A | B"
    array_of = build.type_generic(build.type_name("Array"), [build.type_name("string")])
    obj = build.type_object([("x", array_of)])
    both = build.type_intersection([obj, build.type_name("Base")])
    assert type_to_string(arena, both) == "{x: Array<string>} & Base"


def test_replaced_union_is_parenthesized_under_array():
    arena = TypeArena()
    root = parse_type("string|number", arena)
    ref = parse_type("ID[]", arena)
    arena.replace(arena.get(ref).element, root)
    assert type_to_string(arena, ref) == "(string | number)[]"
