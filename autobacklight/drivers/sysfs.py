"""Single-integer sysfs style resources: trimmed decimal reads, newline-terminated writes."""
from __future__ import annotations

from pathlib import Path
from typing import Union

PathLike = Union[str, Path]


def read_int(path: PathLike) -> int:
    """Raise OSError if unreadable, ValueError if not a decimal integer."""
    return int(Path(path).read_text().strip())


def write_int(path: PathLike, value: int) -> None:
    with open(path, "w", encoding="ascii") as fh:
        fh.write(f"{int(value)}\n")
