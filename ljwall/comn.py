"""Small shared helpers: folder creation, string splitting and number parsing."""

from __future__ import annotations

import math
import os
import re
from typing import Callable, TypeVar, Union

PI = math.pi
DELIMITER = os.sep

NumT = TypeVar("NumT", int, float)

_INT_PREFIX = re.compile(r"[+-]?\d+")
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def make_dir(folder: Union[str, os.PathLike]) -> bool:
    """Create ``folder`` unless it exists; return True if it was created."""
    if os.path.exists(folder):
        print(f"folder: {os.fspath(folder)} already exists")
        return False
    os.makedirs(folder)
    print(f"create folder: {os.fspath(folder)} successfully")
    return True


def split(text: str, delim: str) -> list[str]:
    """Split ``text`` on ``delim``; a trailing delimiter yields no empty last piece."""
    if not delim:
        raise ValueError("delimiter must not be empty")
    if not text:
        return []
    parts = text.split(delim)
    if text.endswith(delim):
        parts.pop()
    return parts


def str_to_num(text: str, kind: Callable[[str], NumT] = float) -> NumT:
    """Parse the leading number of ``text`` as ``kind`` (int or float)."""
    stripped = text.lstrip()
    pattern = _INT_PREFIX if kind is int else _FLOAT_PREFIX
    match = pattern.match(stripped)
    if match is None:
        raise ValueError(f"no number at the start of {text!r}")
    return kind(match.group(0))