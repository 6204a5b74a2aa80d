"""Selector query tests."""

import pytest

from js2ts.frontend import parse
from js2ts.frontend.query import _CACHE, _CACHE_SIZE, SelectorError, parse_selector, query

SOURCE = """\
/**
 * @local
 * @typedef {string} ID
 */

/**
 * @local
 */

/**
 * @param {ID} id
 * @param {Array<ID>} ids
 * @returns {ID}
 */
function pick(id, ids) {
    return id;
}
"""


@pytest.fixture
def program():
    return parse(SOURCE)


def test_type_selector(program):
    names = [node.id.name for node in query(program, "FunctionDeclaration")]
    assert names == ["pick"]


def test_attribute_equality(program):
    tags = query(program, 'DocTag[tag="param"]')
    assert [t.name for t in tags] == ["id", "ids"]


def test_attribute_inequality(program):
    tags = query(program, 'DocTag[tag!="param"]')
    assert [t.tag for t in tags] == ["local", "typedef", "local", "returns"]


def test_attribute_path(program):
    fns = query(program, 'FunctionDeclaration[id.name="pick"]')
    assert len(fns) == 1


def test_unquoted_value(program):
    assert len(query(program, "DocTag[tag=returns]")) == 1


def test_child_combinator_and_has(program):
    tags = query(program, 'DocBlock:has(> DocTag[tag="local"]) > DocTag[tag="typedef"]')
    assert [t.name for t in tags] == ["ID"]


def test_not_has(program):
    blocks = query(
        program, 'DocBlock:has(> DocTag[tag="local"]):not(:has(> DocTag[tag!="local"]))'
    )
    assert len(blocks) == 1
    assert [t.tag for t in blocks[0].tags] == ["local"]


def test_descends_into_types(program):
    refs = query(program, 'TypeName[value="ID"]')
    # One in each of the three tags of the function's block
    assert len(refs) == 3
    assert all(ref.type == "TypeName" for ref in refs)


def test_descendant_combinator(program):
    refs = query(program, 'DocTag[name="ids"] TypeName')
    assert [r.value for r in refs] == ["Array", "ID"]


def test_document_order(program):
    nodes = query(program, "Identifier")
    assert [n.name for n in nodes] == ["pick", "id", "ids", "id"]


def test_selector_list(program):
    nodes = query(program, "ReturnStatement, FunctionDeclaration")
    assert [n.type for n in nodes] == ["FunctionDeclaration", "ReturnStatement"]


def test_sibling_combinators(program):
    after_local = query(program, 'DocTag[tag="local"] + DocTag')
    assert [t.tag for t in after_local] == ["typedef"]
    after_param = query(program, 'DocTag[tag="param"] + DocTag')
    assert [t.tag for t in after_param] == ["param", "returns"]
    later = query(program, 'DocTag[tag="local"] ~ DocTag')
    assert [t.tag for t in later] == ["typedef"]


def test_first_and_last_child(program):
    first = query(program, 'DocBlock:has(> DocTag[tag="param"]) > DocTag:first-child')
    last = query(program, 'DocBlock:has(> DocTag[tag="param"]) > DocTag:last-child')
    assert [t.name for t in first] == ["id"]
    assert [t.tag for t in last] == ["returns"]


def test_matches(program):
    nodes = query(program, ':matches(ReturnStatement, Identifier[name="ids"])')
    assert [n.type for n in nodes] == ["Identifier", "ReturnStatement"]


def test_wildcard_counts_every_node():
    program = parse("x;")
    types = [getattr(n, "type", None) for n in query(program, "*")]
    assert types == ["Program", "ExpressionStatement", "Identifier"]


def test_removed_blocks_are_not_visited(program):
    program.doc_blocks = program.doc_blocks[2:]
    assert query(program, 'DocTag[tag="local"]') == []


@pytest.mark.parametrize(
    "selector",
    ["", "DocTag[", "DocTag[tag=", 'DocTag[tag="x"', ":unknown(x)", "A >", "A B)"],
)
def test_selector_errors(selector: str):
    with pytest.raises(SelectorError):
        parse_selector(selector)


def test_selector_cache_is_bounded():
    first = parse_selector('TypeName[value="Id0"]')
    assert parse_selector('TypeName[value="Id0"]') is first
    for i in range(_CACHE_SIZE * 2):
        parse_selector('TypeName[value="Id' + str(i) + '"]')
    assert len(_CACHE) <= _CACHE_SIZE
