"""Command-line tests."""

import sys
from pathlib import Path

import pytest

from js2ts.cli import (
    USAGE,
    UsageError,
    build_options,
    class_strategy,
    load_hook,
    main,
    param_strategy,
    parse_args,
)
from js2ts.middleend.hooks import CallableClassName, ClassNameStrategy

CLASS_SOURCE = """\
function make(Bar) {
    /** @export */
    return class Foo extends Bar {
        /** @param {number} a */
        baz(a) {}
    };
}
"""

HOOKS_MODULE = """\
from js2ts.middleend.hooks import ClassNameStrategy


class Named(ClassNameStrategy):
    def resolve(self, context):
        return "Named" + context.class_name


def long_params(context):
    return "Long"


NOT_CALLABLE = 3
"""


@pytest.fixture
def hooks_module(tmp_path: Path, monkeypatch):
    (tmp_path / "cli_test_hooks.py").write_text(HOOKS_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    yield "cli_test_hooks"
    sys.modules.pop("cli_test_hooks", None)


# ============================================================
# ARGUMENTS
# ============================================================


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out == USAGE


def test_defaults():
    cli = parse_args([])
    assert cli.config == "tsconfig.json"
    assert cli.out_dir == "tmp"
    options = build_options(cli)
    assert options.include_files is None
    assert options.ignore_files is None
    assert options.files is None
    assert options.target_directory == "tmp"


def test_flags():
    cli = parse_args(
        ["--include", "a/*.js", "--include", "b/*.js", "--ignore", "a/x.js", "-o", "out",
         "-j", "4", "--verbose", "f.js"]
    )
    assert cli.include == ["a/*.js", "b/*.js"]
    assert cli.ignore == ["a/x.js"]
    assert cli.out_dir == "out"
    assert cli.jobs == 4
    assert cli.verbose
    assert cli.files == ["f.js"]
    options = build_options(cli)
    assert options.include_files == ["a/*.js", "b/*.js"]
    assert options.ignore_files == ["a/x.js"]
    assert options.max_workers == 4
    assert options.files == ["f.js"]


@pytest.mark.parametrize(
    "argv,message",
    [
        (["--bogus"], "unknown flag '--bogus'"),
        (["--include"], "--include requires an argument"),
        (["-j", "0"], "-j expects a positive integer, got '0'"),
        (["--jobs", "x"], "--jobs expects a positive integer, got 'x'"),
        (["--stdout"], "--stdout needs exactly one FILE"),
        (["--stdout", "a.js", "b.js"], "--stdout needs exactly one FILE"),
    ],
)
def test_usage_errors(argv, message, capsys):
    with pytest.raises(UsageError) as info:
        parse_args(argv)
    assert str(info.value) == message
    assert main(argv) == 2
    assert capsys.readouterr().err == "js2ts: error: " + message + "\n"


# ============================================================
# HOOKS
# ============================================================


def test_load_hook_errors(hooks_module):
    with pytest.raises(UsageError, match="MODULE:FUNCTION"):
        load_hook("no_colon")
    with pytest.raises(UsageError, match="cannot import hook module"):
        load_hook("no_such_module_xyz:f")
    with pytest.raises(UsageError, match="has no 'missing'"):
        load_hook(hooks_module + ":missing")


def test_strategy_kinds(hooks_module):
    named = class_strategy(hooks_module + ":Named")
    assert isinstance(named, ClassNameStrategy)
    assert not isinstance(named, CallableClassName)
    wrapped = param_strategy(hooks_module + ":long_params")
    assert wrapped.resolve(None) == "Long"
    with pytest.raises(UsageError, match="is not callable"):
        class_strategy(hooks_module + ":NOT_CALLABLE")


# ============================================================
# RUNS
# ============================================================


def test_stdout(project, capsys, hooks_module):
    root = project({"a.js": CLASS_SOURCE})
    argv = [
        "--stdout",
        str(root / "a.js"),
        "--class-hook",
        hooks_module + ":Named",
        "--param-hook",
        hooks_module + ":long_params",
    ]
    assert main(argv) == 0
    out = capsys.readouterr().out
    assert out == CLASS_SOURCE + (
        "/**\n * @typedef {{\n *   baz: (a: Long) => void\n * } & NamedFoo} Foo\n */\n"
    )
    assert not (root / "tmp").exists()


def test_stdout_failure(project, capsys):
    root = project({"a.js": "/** @export */\nconst x = 1;\n"})
    assert main(["--stdout", str(root / "a.js")]) == 1
    err = capsys.readouterr().err
    assert err.startswith("js2ts: " + str(root / "a.js") + ": UnsupportedShapeError: ")


def test_stdout_missing_file(tmp_path: Path, capsys):
    assert main(["--stdout", str(tmp_path / "none.js")]) == 1
    assert "cannot open" in capsys.readouterr().err


def test_batch(project, capsys, monkeypatch):
    root = project({"src/a.js": "a;\n", "src/b.js": "b;\n"})
    monkeypatch.chdir(root)
    assert main(["--include", "src/*.js", "-o", "out", "--verbose"]) == 0
    err = capsys.readouterr().err.splitlines()
    assert err == [
        "js2ts: wrote " + str(root / "out" / "src" / "a.js"),
        "js2ts: wrote " + str(root / "out" / "src" / "b.js"),
    ]
    assert (root / "out/src/a.js").read_text() == "a;\n"


def test_batch_failure_summary(project, capsys, monkeypatch):
    root = project({"a.js": "a;\n", "b.js": "/** @export */\nconst x = 1;\n"})
    monkeypatch.chdir(root)
    assert main(["a.js", "b.js"]) == 1
    err = capsys.readouterr().err.splitlines()
    assert err[0].startswith("js2ts: " + str(root / "b.js") + ": UnsupportedShapeError: ")
    assert err[-1] == "js2ts: 1 written, 1 failed"
    assert (root / "tmp/a.js").exists()


def test_missing_config(tmp_path: Path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 2
    err = capsys.readouterr().err
    assert err.startswith("js2ts: error: ")
    assert "cannot read config" in err
