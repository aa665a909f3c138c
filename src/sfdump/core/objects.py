"""Core domain models for Snowflake DDL dumps.

These models represent configured targets and catalog objects in a simple,
immutable form. They are intentionally free of Snowflake connector types and
UI/CLI concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from sfdump.core.signature import normalize_signature

DDL_FOLDER = "ddl"


class ObjectKind(str, Enum):
    """
    Enumeration of the catalog object kinds that are dumped.

    The values are the object type names accepted by Snowflake's GET_DDL.
    """

    TABLE = "TABLE"
    VIEW = "VIEW"
    FUNCTION = "FUNCTION"
    PROCEDURE = "PROCEDURE"
    SEQUENCE = "SEQUENCE"
    PIPE = "PIPE"

    @property
    def is_callable(self) -> bool:
        """Return True for kinds that can be overloaded by argument types."""
        return self in (ObjectKind.FUNCTION, ObjectKind.PROCEDURE)


@dataclass(frozen=True)
class Target:
    """
    One configured Snowflake account/session.

    Attributes:
        name: Name of the configuration section, also the top output folder.
        account: Snowflake account identifier (e.g. "myorg-myaccount").
        user: Login name.
        password: Login password.
        role: Role used for the session.
        warehouse: Virtual warehouse name.
        database: Default database of the session.
        schema: Default schema of the session.
        ddl_in_separate_folder: Write DDL files under `<name>/ddl` instead
            of directly under `<name>`.
    """

    name: str
    account: str
    user: str
    password: str = field(repr=False)
    role: str
    warehouse: str
    database: str
    schema: str
    ddl_in_separate_folder: bool = False

    @property
    def ddl_folder(self) -> str:
        """Folder of this target's DDL files, relative to the output root."""
        if self.ddl_in_separate_folder:
            return f"{self.name}/{DDL_FOLDER}"
        return self.name


@dataclass(frozen=True)
class SchemaObjectDescriptor:
    """
    Lightweight representation of a dumpable schema object.

    Attributes:
        name: Object name as stored in the catalog.
        kind: Object kind.
        original_signature: Argument signature as returned by the catalog,
            e.g. `(A NUMBER, B VARCHAR)`. Empty for non-callables.
        signature: Normalized, type-only signature, e.g. `(NUMBER, VARCHAR)`.
            Empty unless `original_signature` is set.
    """

    name: str
    kind: ObjectKind
    original_signature: str = ""
    signature: str = ""

    @classmethod
    def from_row(
        cls, name: str, kind: str | ObjectKind, original_signature: str | None
    ) -> SchemaObjectDescriptor:
        """Build a descriptor from a catalog row, normalizing the signature."""
        kind = ObjectKind(kind)
        original = (original_signature or "") if kind.is_callable else ""
        return cls(
            name=name,
            kind=kind,
            original_signature=original,
            signature=normalize_signature(original),
        )


@dataclass(frozen=True)
class DumpFailure:
    """A failure recorded while dumping in best-effort mode."""

    target: str
    operation: str
    location: str
    error: str


@dataclass
class DumpReport:
    """Outcome of dumping one target."""

    target: str
    ddl_folder: str = ""
    databases: int = 0
    schemas: int = 0
    objects_written: int = 0
    failures: list[DumpFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Return True if no failure was recorded."""
        return not self.failures
