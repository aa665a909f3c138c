"""Output path allocation for dumped definitions.

Layout below the output root (all lower-cased):

    <target>[/ddl]/<database>/<schema>/<kind folder>/<name>[<signature>].sql

The file system is the uniqueness oracle: an existing file at the computed
path is a collision, resolved by a `_duplicate<unix time>` suffix. Two
collisions on the same path within one second get the same suffix and the
later write wins.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

from sfdump.core.errors import FolderAlreadyExistsError, WriteError
from sfdump.core.objects import ObjectKind, SchemaObjectDescriptor

KIND_FOLDERS: dict[ObjectKind, str] = {
    ObjectKind.TABLE: "tables",
    ObjectKind.VIEW: "views",
    ObjectKind.FUNCTION: "functions",
    ObjectKind.PROCEDURE: "procedures",
    ObjectKind.SEQUENCE: "sequences",
    ObjectKind.PIPE: "pipes",
}

DDL_SUFFIX = ".sql"
DUPLICATE_MARKER = "_duplicate"

_DOT_SEGMENTS = {".": "_", "..": "__"}


def _segment(name: str) -> str:
    """Lower-case a catalog name for use as a single path segment."""
    segment = name.lower().replace("/", "_").replace("\\", "_")
    return _DOT_SEGMENTS.get(segment, segment)


def file_name(obj: SchemaObjectDescriptor) -> str:
    """Return the file stem: the name, plus the signature for callables."""
    if obj.kind.is_callable:
        return obj.name + obj.signature
    return obj.name


class PathAllocator:
    """Maps catalog objects to output files under one output root."""

    def __init__(self, root: str | Path, *, clock: Callable[[], float] = time.time):
        """
        Args:
            root: Output root directory. It is used as given (not lower-cased).
            clock: Time source for duplicate suffixes.
        """
        self.root = Path(root)
        self._clock = clock

    def relative(self, ddl_folder: str, *names: str) -> Path:
        """Return the lower-cased path of a target folder and catalog names."""
        return Path(ddl_folder.lower()).joinpath(*(_segment(n) for n in names))

    def create_sub_folder(self, ddl_folder: str, *names: str) -> Path:
        """
        Create a new target/database/schema folder.

        Raises:
            FolderAlreadyExistsError: If the folder already exists, which means
                two targets or catalog names map to the same folder.
            WriteError: If the folder cannot be created.
        """
        path = self.root / self.relative(ddl_folder, *names)
        if path.exists():
            raise FolderAlreadyExistsError(f"Folder [{path}] already present")
        try:
            path.mkdir(parents=True)
        except FileExistsError as exc:
            raise FolderAlreadyExistsError(f"Folder [{path}] already present") from exc
        except OSError as exc:
            raise WriteError(f"Could not create folder [{path}]: {exc}") from exc
        return path

    def object_folder(
        self, ddl_folder: str, database: str, schema: str, kind: ObjectKind
    ) -> Path:
        """Return the kind folder of a schema, creating it if needed."""
        path = self.root / self.relative(ddl_folder, database, schema, KIND_FOLDERS[kind])
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WriteError(f"Could not create folder [{path}]: {exc}") from exc
        return path

    def file_path(
        self, ddl_folder: str, database: str, schema: str, obj: SchemaObjectDescriptor
    ) -> Path:
        """Return a path for the object's DDL file that is not taken yet."""
        folder = self.object_folder(ddl_folder, database, schema, obj.kind)
        stem = _segment(file_name(obj))
        path = folder / f"{stem}{DDL_SUFFIX}"
        if path.exists():
            path = folder / f"{stem}{DUPLICATE_MARKER}{int(self._clock())}{DDL_SUFFIX}"
        return path

    def write(self, path: Path, ddl: str) -> None:
        """Write a definition to disk as UTF-8."""
        try:
            path.write_text(ddl, encoding="utf-8")
        except OSError as exc:
            raise WriteError(f"Could not write [{path}]: {exc}") from exc
