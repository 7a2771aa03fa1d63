"""
Project model: the immutable set of source files for one extraction run.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Tuple

from extraction.config import EXCLUDED_DIRS, SOURCE_EXTENSIONS

logger = logging.getLogger(__name__)


class ProjectInputError(ValueError):
    """Raised when an ingested file record is malformed."""


@dataclass(frozen=True)
class SourceFile:
    """One ingested source file.

    Attributes:
        path: Path relative to the project root, ``/``-separated.
        content: Full source text.
    """

    path: str
    content: str


def normalize_source_path(path: str) -> str:
    """Normalize a relative source path to ``/`` separators without ``./``."""
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized


class ProjectModel:
    """Ordered, read-only collection of ``SourceFile`` objects.

    Duplicate paths keep their first occurrence; the skipped paths are
    available from ``duplicate_paths`` so callers can report them.
    """

    def __init__(self, files: Iterable[SourceFile] = ()):
        self._files: Tuple[SourceFile, ...] = ()
        self._duplicates: Tuple[str, ...] = ()
        seen: set = set()
        kept: List[SourceFile] = []
        duplicates: List[str] = []
        for source_file in files:
            if source_file.path in seen:
                logger.warning("Duplicate source path %s; keeping first occurrence", source_file.path)
                duplicates.append(source_file.path)
                continue
            seen.add(source_file.path)
            kept.append(source_file)
        self._files = tuple(kept)
        self._duplicates = tuple(duplicates)

    @classmethod
    def from_files(cls, files: Iterable[Mapping[str, Any]]) -> "ProjectModel":
        """Build a project from ``{"source": path, "content": text}`` records.

        Raises:
            ProjectInputError: If ``files`` is not an iterable of records,
                a record lacks ``source``/``content`` or
                ``content`` is not text.
        """
        if files is None or isinstance(files, (str, bytes, Mapping)):
            raise ProjectInputError(
                f"Files must be an iterable of records, got {type(files).__name__}"
            )
        try:
            records = list(files)
        except TypeError as exc:
            raise ProjectInputError(
                f"Files must be an iterable of records, got {type(files).__name__}"
            ) from exc

        source_files = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise ProjectInputError(f"File record #{index} must be a mapping")
            path = record.get("source")
            content = record.get("content")
            if not isinstance(path, str) or not path.strip():
                raise ProjectInputError(f"File record #{index} has no 'source' path")
            if not isinstance(content, str):
                raise ProjectInputError(
                    f"File record #{index} ({path}) has non-text content: "
                    f"{type(content).__name__}"
                )
            source_files.append(SourceFile(path=normalize_source_path(path), content=content))
        return cls(source_files)

    @property
    def files(self) -> Tuple[SourceFile, ...]:
        return self._files

    @property
    def duplicate_paths(self) -> Tuple[str, ...]:
        return self._duplicates

    def paths(self) -> List[str]:
        return [f.path for f in self._files]

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[SourceFile]:
        return iter(self._files)

    def __bool__(self) -> bool:
        return bool(self._files)


def discover_source_files(directory: str) -> List[Dict[str, str]]:
    """Recursively collect in-scope source files under ``directory``.

    Returns ``{"source", "content"}`` records ready for
    ``HookExtractor.set_project``, sorted by relative path.

    Raises:
        FileNotFoundError: If directory does not exist.
    """
    directory = os.path.abspath(directory)
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Directory not found: {directory}")

    logger.info("Discovering source files in %s", directory)
    records: List[Dict[str, str]] = []
    for root, dirs, files in os.walk(directory):
        # Skip hidden, dependency and build directories
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in EXCLUDED_DIRS]
        for name in files:
            if os.path.splitext(name)[1].lower() not in SOURCE_EXTENSIONS:
                continue
            if name.endswith(".d.ts"):
                continue
            full_path = os.path.join(root, name)
            try:
                with open(full_path, "r", encoding="utf-8") as f:
                    content = f.read()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Skipping unreadable file %s: %s", full_path, e)
                continue
            relative = os.path.relpath(full_path, directory).replace(os.sep, "/")
            records.append({"source": relative, "content": content})

    records.sort(key=lambda r: r["source"])
    logger.info("Found %d source files", len(records))
    return records
