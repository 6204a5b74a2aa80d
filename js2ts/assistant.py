"""Per-file pipeline and batch driver.

    source → parse → inline local typedefs → drop local-only blocks
           → synthesize class typedefs → serialize

Each file owns its tree; files of a batch run on a thread pool and fail
independently.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from .backend.adapter import generate
from .config import ConfigError, load_config
from .files import discover, output_path, write_atomic
from .frontend import parse
from .middleend import run_passes
from .middleend.hooks import ClassNameStrategy, ParamTypeStrategy

DEFAULT_TARGET = "tmp"
DEFAULT_CONFIG = "tsconfig.json"


@dataclass
class AssistantOptions:
    """Batch options. Include/ignore patterns fall back to the project config
    when neither is given; explicit `files` bypass discovery."""

    include_files: list[str] | None = None
    ignore_files: list[str] | None = None
    class_name_strategy: ClassNameStrategy | None = None
    param_type_strategy: ParamTypeStrategy | None = None
    target_directory: str = DEFAULT_TARGET
    config_path: str = DEFAULT_CONFIG
    root: str | None = None
    max_workers: int | None = None
    files: list[str] | None = None


@dataclass
class FileFailure:
    """A file whose pipeline stopped, with the error that stopped it."""

    path: str
    error: Exception

    @property
    def kind(self) -> str:
        return type(self.error).__name__

    def __str__(self) -> str:
        return self.path + ": " + self.kind + ": " + str(self.error)


@dataclass
class BatchResult:
    """Outputs written and files that failed."""

    written: list[str] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    def ok(self) -> bool:
        return len(self.failures) == 0


def transform(source: str, options: AssistantOptions | None = None) -> str:
    """Run the full pipeline over one source text."""
    if options is None:
        options = AssistantOptions()
    program = parse(source)
    run_passes(program, options.class_name_strategy, options.param_type_strategy)
    return generate(program, source)


def transform_file(path: Path, root: Path, target: Path, options: AssistantOptions) -> str:
    """Transform `path` into its place under `target`. Returns the output path."""
    out = output_path(root, target, path)
    with open(path, encoding="utf-8", newline="") as f:
        source = f.read()
    text = transform(source, options)
    write_atomic(out, text)
    return str(out)


def resolve_files(options: AssistantOptions, root: Path) -> list[Path]:
    """Explicit files, else include/ignore discovery (patterns from the
    project config when none were given)."""
    if options.files:
        return [root / f if not os.path.isabs(f) else Path(f) for f in options.files]
    include = options.include_files
    ignore = options.ignore_files
    if include is None and ignore is None:
        config_path = Path(options.config_path)
        if not config_path.is_absolute():
            config_path = root / config_path
        config = load_config(str(config_path))
        include = config.include
        ignore = config.exclude
    if not include:
        raise ConfigError("no include patterns", options.config_path)
    return discover(root, include, ignore or [])


def _inside(path: Path, directory: Path) -> bool:
    try:
        path.resolve().relative_to(directory.resolve())
    except ValueError:
        return False
    return True


def run(
    options: AssistantOptions,
    on_written: Callable[[str], None] | None = None,
) -> BatchResult:
    """Transform every selected file. A failing file is recorded and never
    stops its siblings; configuration errors propagate."""
    root = Path(options.root) if options.root is not None else Path.cwd()
    target = Path(options.target_directory)
    if not target.is_absolute():
        target = root / target
    paths = [p for p in resolve_files(options, root) if not _inside(p, target)]
    result = BatchResult()
    with ThreadPoolExecutor(
        max_workers=options.max_workers, thread_name_prefix="js2ts"
    ) as executor:
        futures = [
            (path, executor.submit(transform_file, path, root, target, options))
            for path in paths
        ]
        for path, future in futures:
            try:
                written = future.result()
            except Exception as e:
                result.failures.append(FileFailure(str(path), e))
                continue
            result.written.append(written)
            if on_written is not None:
                on_written(written)
    return result
