"""Public API for loading snapshots and exporting matches.

This module provides:
- Reading a reference snapshot from JSONL
- Writing duplicate matches to deterministic JSONL
- Running the matching engine
"""

from __future__ import annotations

import json
from collections.abc import Hashable, Iterable
from pathlib import Path

from refmatch.engine import DeduplicationOptions, find_duplicates
from refmatch.models import DuplicateMatch, Reference

__all__ = [
    "ReferenceFormatError",
    "find_duplicates",
    "read_references_jsonl",
    "write_matches_jsonl",
    "DeduplicationOptions",
]


class ReferenceFormatError(ValueError):
    """Raised when a reference snapshot cannot be read."""

    def __init__(self, message: str, line: int | None = None) -> None:
        """Initialize format error.

        Parameters
        ----------
        message : str
            Error message.
        line : int | None, optional
            1-based line number where the error occurred.
        """
        super().__init__(f"line {line}: {message}" if line is not None else message)
        self.line = line


def read_references_jsonl(path: str | Path) -> list[Reference]:
    """Load a reference snapshot (one JSON object per line).

    Blank lines are skipped. Each object needs an ``id``; ``title``,
    ``year``, ``doi`` and ``pmid`` are optional.

    Parameters
    ----------
    path : str | Path
        JSONL file to read.

    Returns
    -------
    list[Reference]
        References in file order.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ReferenceFormatError
        On invalid JSON or a non-object line, on a missing, duplicate or
        mixed-type id, and on a field of the wrong type.

    Examples
    --------
        >>> from refmatch import read_references_jsonl, find_duplicates
        >>> matches = find_duplicates(read_references_jsonl("library.jsonl"))
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    references: list[Reference] = []
    seen: set[Hashable] = set()

    with file_path.open("r", encoding="utf-8") as fh:
        for line_no, line in enumerate(fh, start=1):
            if not line.strip():
                continue
            try:
                data = json.loads(line)
            except json.JSONDecodeError as exc:
                raise ReferenceFormatError(f"invalid JSON ({exc.msg})", line=line_no) from exc

            if not isinstance(data, dict):
                raise ReferenceFormatError("expected a JSON object", line=line_no)
            if data.get("id") is None:
                raise ReferenceFormatError("missing 'id'", line=line_no)
            _check_field_types(data, line_no)

            reference = Reference.from_dict(data)
            if references and type(reference.id) is not type(references[0].id):
                raise ReferenceFormatError(
                    "'id' values must be all integers or all strings", line=line_no
                )
            if reference.id in seen:
                raise ReferenceFormatError(f"duplicate id {reference.id!r}", line=line_no)
            seen.add(reference.id)
            references.append(reference)

    return references


def _check_field_types(data: dict, line_no: int) -> None:
    """Reject field values the engine cannot hash or normalize."""
    ref_id = data["id"]
    if isinstance(ref_id, bool) or not isinstance(ref_id, (int, str)):
        raise ReferenceFormatError(
            f"'id' must be an integer or string, got {type(ref_id).__name__}", line=line_no
        )

    title = data.get("title")
    if title is not None and not isinstance(title, str):
        raise ReferenceFormatError(
            f"'title' must be a string, got {type(title).__name__}", line=line_no
        )

    # Integer identifiers are accepted and read as text
    for key in ("doi", "pmid"):
        value = data.get(key)
        if value is not None and (isinstance(value, bool) or not isinstance(value, (int, str))):
            raise ReferenceFormatError(
                f"'{key}' must be a string or integer, got {type(value).__name__}", line=line_no
            )


def write_matches_jsonl(
    matches: Iterable[DuplicateMatch],
    path: str | Path,
    *,
    sort_keys: bool = True,
) -> int:
    """Write matches to JSONL in the given order.

    Parameters
    ----------
    matches : Iterable[DuplicateMatch]
        Matches to write, normally the engine's sorted output.
    path : str | Path
        Output file path.
    sort_keys : bool, optional
        Sort object keys for deterministic output, by default True.

    Returns
    -------
    int
        Number of lines written.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with file_path.open("w", encoding="utf-8", newline="\n") as fh:
        for match in matches:
            fh.write(json.dumps(match.to_dict(), ensure_ascii=False, sort_keys=sort_keys))
            fh.write("\n")
            count += 1
    return count
