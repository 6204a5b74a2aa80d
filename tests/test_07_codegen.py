"""Serializer tests: source-preserving output and generation from structure."""

import pytest

from js2ts.backend import generate, to_source
from js2ts.frontend import Node, parse
from js2ts.frontend.builders import Builders
from js2ts.frontend.types import TypeArena


ROUND_TRIP = [
    "",
    "x;",
    "  // leading comment\nlet a = 1,   b = {c, d: [1, , 2]};\n",
    "const t = `a${b}c${ `nested ${d}` }e`;\n",
    "export default class A extends B {\n  static #count = 0;\n  get x() { return this.#x; }\n}\n",
    "label: for (const [k, v] of Object.entries(o)) {\n\tif (!v) continue label;\n}\n",
    "a = b ? /re[/]x/g.test(s) : c ?? d;\r\n",
    "async function* g() { yield* await h?.(); }\n",
    "switch (x) {\n  case 1:\n  default:\n    break;\n}\n",
    "/**\n * @param {string} a\n */\nfunction f(a) {}\n/* tail */\n",
]


@pytest.mark.parametrize("source", ROUND_TRIP)
def test_round_trip_is_byte_identical(source: str):
    program = parse(source)
    assert generate(program, source) == source


@pytest.fixture
def build():
    return Builders(TypeArena())


def test_structure_statements(build):
    program = Node(
        "Program",
        body=[
            build.variable_declaration(
                "const",
                "x",
                build.call(
                    build.member(build.identifier("a"), "b"),
                    [build.literal(1), build.literal("it's")],
                ),
            ),
            build.return_statement(None),
        ],
    )
    assert to_source(program) == "const x = a.b(1, 'it\\'s');\nreturn;\n"


def test_structure_literals(build):
    values = [None, True, False, 2.0, 2.5, "a\nb"]
    statements = [build.expression_statement(build.literal(v)) for v in values]
    program = Node("Program", body=statements)
    assert to_source(program) == "null;\ntrue;\nfalse;\n2;\n2.5;\n'a\\nb';\n"


def test_structure_precedence():
    source = "x = (a + b) * c;\ny = a + b * c;\nz = (a, b);\n"
    # Without source text every node is generated from structure
    assert to_source(parse(source)) == source


@pytest.mark.parametrize(
    "source",
    [
        "(-a) ** b;\n",
        "(await a) ** b;\n",
        "(a ** b) ** c;\n",
        "a ** -b;\n",
        "(a?.b).c;\n",
        "(a?.b)();\n",
        "a?.b.c;\n",
        "(1).toFixed();\n",
        "1.5.toFixed();\n",
        "for (let j = (a in b); ; ) {\n}\n",
        "for ((a in b); ; ) {\n}\n",
        "for (x in y) {\n}\n",
    ],
)
def test_structure_keeps_required_parentheses(source: str):
    output = to_source(parse(source))
    assert output == source
    assert to_source(parse(output)) == output
    program = parse("function f(a) { if (a) { return 1; } else return 2; }")
    assert to_source(program) == (
        "function f(a) {\n"
        "    if (a) {\n"
        "        return 1;\n"
        "    } else\n"
        "        return 2;\n"
        "}\n"
    )


def test_built_statement_spliced_into_source(build):
    source = "a();\n"
    program = parse(source)
    program.body.append(build.expression_statement(build.identifier("x")))
    assert generate(program, source) == "a();\nx;"


def test_doc_block_needs_a_handler():
    source = "/** @type {number} */\nx;"
    program = parse(source)
    with pytest.raises(ValueError):
        to_source(program, source)
