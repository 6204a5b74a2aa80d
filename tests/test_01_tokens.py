"""Tokenizer tests."""

import pytest

from js2ts.frontend.tokens import (
    TK_EOF,
    TK_NAME,
    TK_NUM,
    TK_PRIVATE,
    TK_PUNCT,
    TK_REGEX,
    TK_STRING,
    TK_TEMPLATE,
    TokenizeError,
    tokenize,
)


def kinds(source: str) -> list[tuple[str, str]]:
    tokens, _ = tokenize(source)
    return [(tok.type, tok.value) for tok in tokens]


def test_simple_statement():
    assert kinds("let x = 1;") == [
        (TK_NAME, "let"),
        (TK_NAME, "x"),
        (TK_PUNCT, "="),
        (TK_NUM, "1"),
        (TK_PUNCT, ";"),
        (TK_EOF, ""),
    ]


def test_greedy_punctuators():
    values = [value for _, value in kinds("a >>>= b ?? c?.d")]
    assert values == ["a", ">>>=", "b", "??", "c", "?.", "d", ""]


def test_conditional_before_number_is_not_optional_chain():
    values = [value for _, value in kinds("a?.5:1")]
    assert values == ["a", "?", ".5", ":", "1", ""]


def test_strings_and_private_names():
    assert kinds("'a\\'b' \"c\" #x") == [
        (TK_STRING, "'a\\'b'"),
        (TK_STRING, '"c"'),
        (TK_PRIVATE, "#x"),
        (TK_EOF, ""),
    ]


def test_regex_after_operator():
    assert kinds("x = /ab+c/g")[2] == (TK_REGEX, "/ab+c/g")


def test_regex_with_slash_in_class():
    assert kinds("f(/[/]/)")[2] == (TK_REGEX, "/[/]/")


def test_division_after_name_and_paren():
    values = [kind for kind, _ in kinds("a / b / (c) / 2")]
    assert TK_REGEX not in values


def test_regex_after_keyword():
    assert kinds("return /x/")[1] == (TK_REGEX, "/x/")


def test_template_chunks():
    assert kinds("`a${b}c`") == [
        (TK_TEMPLATE, "`a${"),
        (TK_NAME, "b"),
        (TK_TEMPLATE, "}c`"),
        (TK_EOF, ""),
    ]


def test_template_with_nested_braces():
    tokens, _ = tokenize("`${ {a: 1}.a }`")
    types = [tok.type for tok in tokens]
    assert types[0] == TK_TEMPLATE
    assert types[-2] == TK_TEMPLATE
    assert tokens[-2].value == "}`"


def test_comments_collected_on_the_side():
    tokens, comments = tokenize("/** doc */ a // line\n/* block */ b")
    assert [tok.value for tok in tokens] == ["a", "b", ""]
    assert [c.kind for c in comments] == ["Block", "Line", "Block"]
    assert comments[0].value == "* doc "
    assert comments[1].value == " line"


def test_jsdoc_detection():
    _, comments = tokenize("/** a */ /* b */ /***/ /*** c */ /**/")
    assert [c.is_jsdoc() for c in comments] == [True, False, False, False, False]


def test_positions_and_line_breaks():
    tokens, _ = tokenize("a\n  b")
    b = tokens[1]
    assert (b.line, b.col) == (2, 3)
    assert b.nl_before
    assert not tokens[0].nl_before


def test_multiline_comment_counts_as_line_break():
    tokens, comments = tokenize("a /*\n*/ b")
    assert tokens[1].nl_before
    assert tokens[1].line == 2
    assert comments[0].line == 1


def test_hashbang():
    tokens, comments = tokenize("#!/usr/bin/env node\nx")
    assert comments[0].kind == "Hashbang"
    assert tokens[0].value == "x"


@pytest.mark.parametrize(
    "source,message",
    [
        ("'abc", "unterminated string literal at line 1 col 1"),
        ("x = `abc", "unterminated template literal at line 1 col 5"),
        ("/* open", "unterminated comment at line 1 col 1"),
        ("a\nx = /abc", "unterminated regular expression at line 2 col 5"),
        ("3in", "identifier directly after number at line 1 col 2"),
    ],
)
def test_tokenize_errors(source: str, message: str):
    with pytest.raises(TokenizeError) as info:
        tokenize(source)
    assert str(info.value) == message
