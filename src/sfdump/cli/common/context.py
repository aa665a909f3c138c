"""Application context management for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from sfdump.cli.common.exits import die
from sfdump.core.adapters.snowflake import SnowflakeAdapter
from sfdump.core.auth import connect
from sfdump.core.config import load_targets, resolve_config_path
from sfdump.core.errors import ConfigError, ConnectError
from sfdump.core.objects import Target


@dataclass
class AppContext:
    """Application context holding the loaded target configuration."""

    config_path: Path
    targets: list[Target]

    def target(self, name: str) -> Target:
        """Return a configured target by name or exit with a usage error."""
        for t in self.targets:
            if t.name == name:
                return t
        known = ", ".join(t.name for t in self.targets) or "-"
        die(f"Unknown target '{name}'. Configured targets: {known}", code=2)


def build_context(config: str | None) -> AppContext:
    """Load the configuration and return the application context.

    Args:
        config: Optional config file path (falls back to $SFDUMP_CONFIG,
            then config.ini).

    Returns:
        AppContext: Context with all configured targets.
    """
    config_path = resolve_config_path(config)
    try:
        targets = load_targets(config_path)
    except ConfigError as exc:
        die(str(exc), code=1)
    return AppContext(config_path=config_path, targets=targets)


@contextmanager
def connected(target: Target) -> Iterator[SnowflakeAdapter]:
    """Open a connection to a target for the duration of a command."""
    try:
        adapter = connect(target)
    except ConnectError as exc:
        die(str(exc), code=1)
    try:
        yield adapter
    finally:
        adapter.close()
