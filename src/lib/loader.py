"""
Source loader for annotated documents

Reads a root document and splices the contents of ``include::path[]``
directives in place, producing a Document whose every line remembers the
file and line it came from.

Inclusion is single-level: lines spliced in from an included file are not
scanned for further include directives.

Example:
    guide.adoc:                 part.adoc:
        intro                       x = 1
        include::part.adoc[]        y = 2
        outro

    SourceLoader(Path("guide.adoc")).load().lines
    -> ("intro", "x = 1", "y = 2", "outro")
    origins
    -> (guide.adoc:1, part.adoc:1, part.adoc:2, guide.adoc:3)
"""

import re
from pathlib import Path
from typing import Callable, List

from ..models.document import Document, Origin
from .log import LOG


INCLUDE_PATTERN = re.compile(r'^include::(?P<path>[^\[\]]+)\[\]$')


def text_read(path: Path) -> str:
    """Default reader: the whole file as UTF-8 text"""
    return path.read_text(encoding="utf-8")


class SourceLoader:
    """
    Loads a document and resolves its include directives

    Args:
        root: Path of the root document
        reader: Function returning the text of a file; raises
                FileNotFoundError for missing files
    """

    def __init__(self, root: Path, reader: Callable[[Path], str] = text_read) -> None:
        self.root = Path(root)
        self.reader = reader

    def file_read(self, path: Path, referrer: Origin | None = None) -> List[str]:
        """
        Read a file and split it into lines

        Raises:
            FileNotFoundError: If the file does not exist. For included
                               files the message names the include site.
        """
        try:
            text = self.reader(path)
        except FileNotFoundError:
            if referrer is None:
                raise FileNotFoundError(f"Document not found: {path}") from None
            raise FileNotFoundError(
                f"Included file not found: {path} (included from {referrer})"
            ) from None
        return text.splitlines()

    def load(self) -> Document:
        """
        Load the root document with includes spliced in place

        Returns:
            Document with expanded lines and a parallel origin map

        Raises:
            FileNotFoundError: Root or included file missing
        """
        lines = self.file_read(self.root)
        origins = [Origin(self.root, index) for index in range(len(lines))]
        LOG(f"Read {len(lines)} lines from {self.root}", level=2)

        position = 0
        while position < len(lines):
            match = INCLUDE_PATTERN.match(lines[position].rstrip())
            if not match:
                position += 1
                continue

            site = origins[position]
            included_path = site.file.parent / match.group("path")
            included = self.file_read(included_path, referrer=site)
            LOG(f"Including {len(included)} lines from {included_path} at {site}", level=2)

            lines[position:position + 1] = included
            origins[position:position + 1] = [
                Origin(included_path, index) for index in range(len(included))
            ]
            # Spliced lines are never rescanned
            position += len(included)

        return Document(path=self.root, lines=tuple(lines), origins=tuple(origins))
