"""
Document and origin models

An expanded document is the root file with every include directive replaced
by the contents of the file it names. Each expanded line keeps track of the
file and line it came from, so diagnostics can be reported in the
coordinates the author actually edits.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class Origin:
    """
    Location of a line in a concrete source file

    Attributes:
        file: File the line was read from
        line: Zero-based line index within that file

    Example:
        >>> str(Origin(Path("guide.adoc"), 0))
        'guide.adoc:1'
    """
    file: Path
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line + 1}"


@dataclass(frozen=True)
class Document:
    """
    Include-resolved line sequence with a parallel origin map

    ``lines[i]`` was read from ``origins[i]``. Both tuples always have the
    same length.

    Attributes:
        path: Root document path
        lines: Expanded lines (includes spliced in place)
        origins: Origin of every expanded line
    """
    path: Path
    lines: Tuple[str, ...]
    origins: Tuple[Origin, ...]

    def __len__(self) -> int:
        return len(self.lines)

    def origin_get(self, index: int) -> Optional[Origin]:
        """Origin of expanded line ``index``, or None if out of range"""
        if 0 <= index < len(self.origins):
            return self.origins[index]
        return None

    def line_get(self, index: int) -> Optional[str]:
        """Expanded (unrewritten) text of line ``index``, or None"""
        if 0 <= index < len(self.lines):
            return self.lines[index]
        return None
