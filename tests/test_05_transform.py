"""Pytest-based transform tests.

Test cases live in 05_transform/*.tests files. Format:

    === test name
    input source
    ---
    expected output     (or: error: <ErrorKind>)
    ---

Outputs are compared with surrounding whitespace stripped.
"""

from pathlib import Path

import pytest

from js2ts import transform
from js2ts.backend import generate
from js2ts.frontend import parse, query
from js2ts.middleend import run_passes
from js2ts.middleend.locals import LOCAL_ONLY, remove_local_blocks
from js2ts.middleend.typedefs import (
    LOCAL_TYPEDEFS,
    find_local_typedefs,
    inline_local_typedefs,
)

TRANSFORM_DIR = Path(__file__).parent / "05_transform"


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines)
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover_transform_tests() -> list[tuple[str, str, str]]:
    """Find all transform tests, returns (test_id, input, expected)."""
    results = []
    for test_file in sorted(TRANSFORM_DIR.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def pytest_generate_tests(metafunc):
    """Parametrize tests over transform test files."""
    if "transform_input" in metafunc.fixturenames:
        params = [
            pytest.param(input_code, expected, id=test_id)
            for test_id, input_code, expected in discover_transform_tests()
        ]
        metafunc.parametrize("transform_input,transform_expected", params)


def test_transform(transform_input: str, transform_expected: str):
    """Verify the pipeline output, or the kind of error it stops with."""
    try:
        output = transform(transform_input)
        error = None
    except Exception as e:
        output = None
        error = e

    expected = transform_expected.strip()
    if expected.startswith("error:"):
        kind = expected[6:].strip()
        if error is None:
            pytest.fail(f"Expected {kind}, but the transform succeeded:\n{output}")
        assert type(error).__name__ == kind, str(error)
        return
    if error is not None:
        pytest.fail(f"Expected output, got {type(error).__name__}: {error}")
    assert output.strip() == expected


# ============================================================
# EXACT LAYOUT
# ============================================================


TYPEDEF_THEN_FUNCTION = """\
/**
 * @local
 * @typedef {string} Id
 */

/**
 * @param {Id} id
 */
function f(id) {}
"""


def test_dropped_block_at_top_leaves_nothing():
    assert transform(TYPEDEF_THEN_FUNCTION) == (
        "/**\n * @param {string} id\n */\nfunction f(id) {}\n"
    )


def test_dropped_blocks_in_a_row_at_top():
    source = (
        "/**\n * @local\n * @typedef {string} A\n */\n"
        "/**\n * @local\n * @typedef {number} B\n */\n"
        "\n"
        "/** @param {A} a */\n"
        "function f(a) {}\n"
    )
    assert transform(source) == "/** @param {string} a */\nfunction f(a) {}\n"


def test_leading_blank_lines_of_the_source_stay():
    assert transform("\n\nx;\n") == "\n\nx;\n"
    source = "\n/**\n * @local\n * @typedef {string} A\n */\n/** @type {A} */\nlet a;\n"
    assert transform(source).startswith("\n/** @type {string} */")


def test_second_run_is_identical():
    once = transform(TYPEDEF_THEN_FUNCTION)
    assert transform(once) == once


def test_unmodified_source_is_byte_identical():
    source = "/**\n * @param {string} a\n */\r\nfunction f(a) {\n\treturn a;\n}\n\n"
    assert transform(source) == source


def test_modified_block_keeps_indentation():
    source = (
        "/**\n * @local\n * @typedef {number} N\n */\n"
        "class A {\n"
        "    /** @returns {N} */\n"
        "    m() {}\n"
        "}\n"
    )
    assert transform(source) == (
        "class A {\n"
        "    /** @returns {number} */\n"
        "    m() {}\n"
        "}\n"
    )


def test_dropped_block_before_sibling_block():
    source = (
        "class A {\n"
        "    /** @local */\n"
        "    /** @returns {number} */\n"
        "    m() {}\n"
        "}\n"
    )
    assert transform(source) == (
        "class A {\n"
        "    /** @returns {number} */\n"
        "    m() {}\n"
        "}\n"
    )


# ============================================================
# PASSES
# ============================================================


def test_pass_counts():
    program = parse(TYPEDEF_THEN_FUNCTION)
    assert [t.name for t in find_local_typedefs(program)] == ["Id"]
    assert inline_local_typedefs(program) == 1
    assert query(program, LOCAL_TYPEDEFS) == []
    assert len(query(program, LOCAL_ONLY)) == 1
    assert remove_local_blocks(program) == 1
    assert len(program.doc_blocks) == 1
    assert len(program.source_blocks) == 2


def test_removed_block_stays_linked_to_its_node():
    program = parse("/** @local */\nfunction f() {}")
    block = program.doc_blocks[0]
    assert remove_local_blocks(program) == 1
    assert program.doc_blocks == []
    assert program.body[0].jsdoc is block


def test_remove_without_local_blocks():
    program = parse("/** @param {string} a */\nfunction f(a) {}")
    assert remove_local_blocks(program) == 0
    assert len(program.doc_blocks) == 1


def test_typedef_with_other_tags_keeps_its_block():
    source = "/**\n * @local\n * @typedef {string} Id\n * @see other\n */\nx;"
    program = parse(source)
    run_passes(program)
    assert [t.tag for t in program.doc_blocks[0].tags] == ["local", "see"]
    assert generate(program, source) == "/**\n * @local\n * @see other\n */\nx;"


def test_error_carries_location():
    source = "/**\n * @local\n * @typedef {A} B\n */\n/**\n * @local\n * @typedef {C} B\n */\n"
    program = parse(source)
    try:
        inline_local_typedefs(program)
    except Exception as e:
        assert type(e).__name__ == "AmbiguousTypedefError"
        assert e.line == 7
        assert e.first_line == 3
        assert str(e) == "local typedef 'B' already defined at line 3 at line 7 col 1"
    else:
        pytest.fail("duplicate typedef was accepted")
