"""File discovery and output placement."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


class OutputError(Exception):
    """An output path that must not be written."""

    def __init__(self, msg: str, path: str):
        self.msg: str = msg
        self.path: str = path
        super().__init__(path + ": " + msg)


def _glob(root: Path, pattern: str) -> list[Path]:
    if os.path.isabs(pattern):
        raise OutputError("patterns must be relative to the project root", pattern)
    return list(root.glob(pattern))


def ignored_paths(root: Path, ignore: list[str]) -> set[Path]:
    """Everything under `root` an ignore pattern matches, files or directories.
    Ignore patterns follow the same glob rules as include patterns."""
    ignored: set[Path] = set()
    for pattern in ignore:
        ignored.update(_glob(root, pattern))
    return ignored


def is_ignored(root: Path, path: Path, ignored: set[Path]) -> bool:
    """Is `path`, or a directory holding it under `root`, in the ignored set?"""
    if path in ignored:
        return True
    for parent in path.parents:
        if parent in ignored:
            return True
        if parent == root:
            break
    return False


def discover(root: Path, include: list[str], ignore: list[str]) -> list[Path]:
    """Files under `root` matching an include pattern and no ignore pattern,
    sorted and without duplicates."""
    ignored = ignored_paths(root, ignore)
    found: dict[str, Path] = {}
    for pattern in include:
        for path in _glob(root, pattern):
            if not path.is_file() or is_ignored(root, path, ignored):
                continue
            found[path.relative_to(root).as_posix()] = path
    return [found[rel] for rel in sorted(found)]


def output_path(root: Path, target: Path, path: Path) -> Path:
    """`<target>/<path relative to root>`. Inputs outside the root and outputs
    that would overwrite their input are refused."""
    try:
        rel = path.resolve().relative_to(root.resolve())
    except ValueError:
        raise OutputError("input is outside the project root", str(path)) from None
    out = target / rel
    if out.resolve() == path.resolve():
        raise OutputError("output would overwrite its input", str(path))
    return out


def _read_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Read once: os.umask is process-wide and writes run on worker threads
_UMASK = _read_umask()


def write_atomic(path: Path, text: str) -> None:
    """Write through a sibling temporary file so readers never see partial output.
    The result gets the mode a plain open() would give it."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix="." + path.name + ".", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.chmod(tmp, 0o666 & ~_UMASK)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
