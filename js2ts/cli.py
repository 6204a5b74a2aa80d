"""Command-line entry point."""

from __future__ import annotations

import importlib
import sys
from dataclasses import dataclass, field

from .assistant import AssistantOptions, run, transform
from .config import ConfigError
from .files import OutputError
from .middleend.hooks import (
    CallableClassName,
    CallableParamType,
    ClassNameStrategy,
    ParamTypeStrategy,
)

PROG = "js2ts"

USAGE: str = """\
js2ts [OPTIONS] [FILE...]

Promote JSDoc-only types: inline @local typedefs and synthesize typedefs for
@export class expressions. Output for <root>/<path> goes to <out-dir>/<path>.

Options:
  --include PAT         Glob of files to transform (repeatable)
  --ignore PAT          Glob of files to skip (repeatable)
  --config FILE         Read _preprocess_include/_preprocess_exclude from FILE
                        when no --include/--ignore is given (default tsconfig.json)
  -o, --out-dir DIR     Output root (default tmp)
  --class-hook MOD:FN   Strategy choosing the merged supertype name
  --param-hook MOD:FN   Strategy choosing a parameter's rendered type
  --stdout              Print the single FILE's output instead of writing it
  -j, --jobs N          Worker threads
  --verbose             Report every written file
  --help                Show this help message
"""


class UsageError(Exception):
    """Bad command line."""


@dataclass
class CliArgs:
    include: list[str] = field(default_factory=list)
    ignore: list[str] = field(default_factory=list)
    config: str = "tsconfig.json"
    out_dir: str = "tmp"
    class_hook: str | None = None
    param_hook: str | None = None
    stdout: bool = False
    jobs: int | None = None
    verbose: bool = False
    files: list[str] = field(default_factory=list)


def _value(args: list[str], i: int) -> str:
    if i + 1 >= len(args):
        raise UsageError(args[i] + " requires an argument")
    return args[i + 1]


def parse_args(args: list[str]) -> CliArgs | None:
    """Parse argv (without the program name). None means help was shown."""
    result = CliArgs()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return None
        if arg == "--include":
            result.include.append(_value(args, i))
            i += 2
        elif arg == "--ignore":
            result.ignore.append(_value(args, i))
            i += 2
        elif arg == "--config":
            result.config = _value(args, i)
            i += 2
        elif arg == "-o" or arg == "--out-dir":
            result.out_dir = _value(args, i)
            i += 2
        elif arg == "--class-hook":
            result.class_hook = _value(args, i)
            i += 2
        elif arg == "--param-hook":
            result.param_hook = _value(args, i)
            i += 2
        elif arg == "-j" or arg == "--jobs":
            text = _value(args, i)
            if not text.isdigit() or int(text) < 1:
                raise UsageError(arg + " expects a positive integer, got '" + text + "'")
            result.jobs = int(text)
            i += 2
        elif arg == "--stdout":
            result.stdout = True
            i += 1
        elif arg == "--verbose":
            result.verbose = True
            i += 1
        elif arg.startswith("-") and arg != "-":
            raise UsageError("unknown flag '" + arg + "'")
        else:
            result.files.append(arg)
            i += 1
    if result.stdout and len(result.files) != 1:
        raise UsageError("--stdout needs exactly one FILE")
    return result


def load_hook(spec: str) -> object:
    """Import `module:attribute`."""
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise UsageError("hook must look like MODULE:FUNCTION, got '" + spec + "'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise UsageError("cannot import hook module '" + module_name + "': " + str(e)) from e
    try:
        return getattr(module, attr)
    except AttributeError:
        raise UsageError("module '" + module_name + "' has no '" + attr + "'") from None


def class_strategy(spec: str) -> ClassNameStrategy:
    hook = load_hook(spec)
    if isinstance(hook, type) and issubclass(hook, ClassNameStrategy):
        return hook()
    if isinstance(hook, ClassNameStrategy):
        return hook
    if callable(hook):
        return CallableClassName(hook)
    raise UsageError("class hook '" + spec + "' is not callable")


def param_strategy(spec: str) -> ParamTypeStrategy:
    hook = load_hook(spec)
    if isinstance(hook, type) and issubclass(hook, ParamTypeStrategy):
        return hook()
    if isinstance(hook, ParamTypeStrategy):
        return hook
    if callable(hook):
        return CallableParamType(hook)
    raise UsageError("param hook '" + spec + "' is not callable")


def build_options(cli: CliArgs) -> AssistantOptions:
    options = AssistantOptions(
        target_directory=cli.out_dir,
        config_path=cli.config,
        max_workers=cli.jobs,
    )
    if cli.include or cli.ignore:
        options.include_files = list(cli.include)
        options.ignore_files = list(cli.ignore)
    if cli.files:
        options.files = list(cli.files)
    if cli.class_hook is not None:
        options.class_name_strategy = class_strategy(cli.class_hook)
    if cli.param_hook is not None:
        options.param_type_strategy = param_strategy(cli.param_hook)
    return options


def _report(msg: str) -> None:
    print(PROG + ": " + msg, file=sys.stderr)


def _print_single(path: str, options: AssistantOptions) -> int:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            source = f.read()
    except OSError as e:
        _report(path + ": cannot open: " + (e.strerror or str(e)))
        return 1
    try:
        output = transform(source, options)
    except Exception as e:
        _report(path + ": " + type(e).__name__ + ": " + str(e))
        return 1
    sys.stdout.write(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        cli = parse_args(argv)
        if cli is None:
            return 0
        options = build_options(cli)
    except UsageError as e:
        _report("error: " + str(e))
        return 2
    if cli.stdout:
        return _print_single(cli.files[0], options)

    def written(path: str) -> None:
        if cli.verbose:
            _report("wrote " + path)

    try:
        result = run(options, on_written=written)
    except (ConfigError, OutputError) as e:
        _report("error: " + str(e))
        return 2
    for failure in result.failures:
        _report(str(failure))
    if not result.ok():
        _report(
            str(len(result.written))
            + " written, "
            + str(len(result.failures))
            + " failed"
        )
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
