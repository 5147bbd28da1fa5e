"""
File Enumeration
Lists the image files of a directory that match a simple wildcard pattern.
"""

import os
import re
from collections import deque
from pathlib import Path
from typing import Iterator, NamedTuple, Union


class ImageFile(NamedTuple):
    """A file picked up by the enumerator: its path and its size in bytes."""

    path: Path
    size: int

    @property
    def name(self) -> str:
        return self.path.name


def compile_pattern(pattern: str) -> re.Pattern:
    """
    Compile a simple wildcard pattern into a case-insensitive regex.

    Only `*` (any run of characters) and `?` (exactly one character) are
    special; brackets and everything else match literally.
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


def enumerate_files(directory: Union[str, Path], pattern: str = "*.jpg",
                    recurse: bool = False) -> Iterator[ImageFile]:
    """
    Yield the files under `directory` whose name matches `pattern`.

    Files of a directory come out in the order the filesystem lists them;
    with `recurse`, sub-directories are visited afterwards, breadth first.
    Entries that cannot be listed or read are skipped, as are hidden entries,
    directories themselves and symbolic links to directories.

    Args:
        directory: Directory to scan
        pattern: Wildcard pattern matched against file names, ignoring case
        recurse: Also scan sub-directories

    Returns:
        Iterator of ImageFile
    """
    matcher = compile_pattern(pattern)
    pending = deque([Path(directory)])

    while pending:
        current = pending.popleft()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    if _is_hidden(entry.name):
                        continue
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            if recurse:
                                pending.append(Path(entry.path))
                            continue
                        if not entry.is_file():
                            continue
                        if not matcher.fullmatch(entry.name):
                            continue
                        if not os.access(entry.path, os.R_OK):
                            continue
                        size = entry.stat().st_size
                    except OSError:
                        continue
                    yield ImageFile(Path(entry.path), size)
        except OSError:
            continue
