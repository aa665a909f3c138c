"""Error types raised by the dump pipeline.

Every error derives from SfdumpError so the CLI can report any pipeline
failure uniformly. Messages name the operation and the catalog location so a
failure can be diagnosed from the console output alone.
"""


class SfdumpError(RuntimeError):
    """Base class for all dump pipeline errors."""


class ConfigError(SfdumpError):
    """Raised when the target configuration is missing or invalid."""


class ConnectError(SfdumpError):
    """Raised when a target cannot be reached or rejects the credentials."""


class QueryError(SfdumpError):
    """Raised when the warehouse rejects or fails a query."""


class EnumerationError(SfdumpError):
    """Raised when listing databases, schemas or objects fails."""


class RetrievalError(SfdumpError):
    """Raised when fetching an object definition fails or returns nothing."""


class FolderAlreadyExistsError(SfdumpError):
    """Raised when a target/database/schema output folder already exists."""


class WriteError(SfdumpError):
    """Raised when an output folder or file cannot be written."""
