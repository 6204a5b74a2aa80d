"""Project configuration: include/exclude lists read from tsconfig.json."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

INCLUDE_KEY = "_preprocess_include"
EXCLUDE_KEY = "_preprocess_exclude"


class ConfigError(Exception):
    """Unreadable or malformed project configuration."""

    def __init__(self, msg: str, path: str):
        self.msg: str = msg
        self.path: str = path
        super().__init__(path + ": " + msg)


@dataclass
class ProjectConfig:
    """Patterns found in the project configuration file."""

    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)


def strip_jsonc(text: str) -> str:
    """Drop `//` and `/* */` comments and trailing commas, as tsconfig allows."""
    out: list[str] = []
    i = 0
    length = len(text)
    while i < length:
        c = text[i]
        if c == '"':
            j = i + 1
            while j < length and text[j] != '"':
                if text[j] == "\\":
                    j += 1
                j += 1
            out.append(text[i : j + 1])
            i = j + 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = length if end == -1 else end + 2
        elif c == ",":
            j = i + 1
            while j < length and text[j] in " \t\r\n":
                j += 1
            if j < length and text[j] in "]}":
                i += 1
            else:
                out.append(c)
                i += 1
        else:
            out.append(c)
            i += 1
    return "".join(out)


def _patterns(data: dict, key: str, path: str) -> list[str]:
    value = data.get(key, [])
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError("'" + key + "' must be a list of strings", path)
    return list(value)


def load_config(path: str) -> ProjectConfig:
    """Read include/exclude patterns from a tsconfig-style JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        raise ConfigError("cannot read config: " + (e.strerror or str(e)), path) from e
    try:
        data = json.loads(strip_jsonc(text))
    except ValueError as e:
        raise ConfigError("invalid JSON: " + str(e), path) from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be an object", path)
    return ProjectConfig(
        include=_patterns(data, INCLUDE_KEY, path),
        exclude=_patterns(data, EXCLUDE_KEY, path),
    )
