"""Target configuration loading.

Targets are described in an INI file, one section per Snowflake account:

    [production]
    DBACCOUNT = myorg-prod
    DBUSER = dumper
    DBPASSWORD = ...
    DBUSERROLE = SYSADMIN
    DBWAREHOUSE = COMPUTE_WH
    DBNAME = ANALYTICS
    DBSCHEMA = PUBLIC
    DDLSEPARATEFOLDER = false

The section name becomes the target name and its top-level output folder.
Every key is required. The password may be supplied through the environment
variable `SFDUMP_<SECTION>_PASSWORD` instead of the file.
"""

from __future__ import annotations

import configparser
import os
import re
from pathlib import Path

from sfdump.core.errors import ConfigError
from sfdump.core.objects import Target

CONFIG_ENV = "SFDUMP_CONFIG"
DEFAULT_CONFIG_FILE = "config.ini"

_PASSWORD_ENV_TEMPLATE = "SFDUMP_{}_PASSWORD"

_REQUIRED_KEYS = {
    "account": "DBACCOUNT",
    "user": "DBUSER",
    "password": "DBPASSWORD",
    "role": "DBUSERROLE",
    "warehouse": "DBWAREHOUSE",
    "database": "DBNAME",
    "schema": "DBSCHEMA",
}
_SEPARATE_FOLDER_KEY = "DDLSEPARATEFOLDER"


def resolve_config_path(path: str | Path | None = None) -> Path:
    """Return the config file path from the argument, env override or default."""
    if path:
        return Path(path)
    return Path(os.getenv(CONFIG_ENV) or DEFAULT_CONFIG_FILE)


def password_env_var(section: str) -> str:
    """Return the environment variable that overrides a section's password."""
    safe = re.sub(r"[^A-Za-z0-9]+", "_", section).upper()
    return _PASSWORD_ENV_TEMPLATE.format(safe)


def _target_from_section(section: configparser.SectionProxy) -> Target:
    """Build a Target from one INI section, failing on any missing key."""
    values: dict[str, str] = {}
    for attr, key in _REQUIRED_KEYS.items():
        value = section.get(key)
        if attr == "password":
            value = os.getenv(password_env_var(section.name)) or value
        if value is None:
            raise ConfigError(f"[{key}] not found in section [{section.name}]")
        values[attr] = value.strip()

    if section.get(_SEPARATE_FOLDER_KEY) is None:
        raise ConfigError(
            f"[{_SEPARATE_FOLDER_KEY}] not found in section [{section.name}]"
        )
    try:
        separate = section.getboolean(_SEPARATE_FOLDER_KEY)
    except ValueError as exc:
        raise ConfigError(
            f"[{_SEPARATE_FOLDER_KEY}] in section [{section.name}] is not a boolean"
        ) from exc

    return Target(name=section.name, ddl_in_separate_folder=separate, **values)


def parse_targets(text: str, *, source: str = "<string>") -> list[Target]:
    """Parse INI text into targets, in section order."""
    parser = configparser.ConfigParser(interpolation=None)
    try:
        parser.read_string(text, source=source)
    except configparser.Error as exc:
        raise ConfigError(f"Could not parse {source}: {exc}") from exc

    sections = parser.sections()
    if not sections:
        raise ConfigError(f"No sections found in {source}")

    return [_target_from_section(parser[name]) for name in sections]


def load_targets(path: str | Path | None = None) -> list[Target]:
    """
    Load all targets from the INI config file.

    Args:
        path: Config file path. Defaults to $SFDUMP_CONFIG, then `config.ini`.

    Returns:
        Targets in file order.

    Raises:
        ConfigError: If the file is missing, unreadable or incomplete.
    """
    config_path = resolve_config_path(path)
    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Could not read config file {config_path}: {exc}") from exc
    return parse_targets(text, source=str(config_path))


def select_targets(targets: list[Target], names: list[str]) -> list[Target]:
    """Return the targets named in `names` (all targets if empty)."""
    if not names:
        return list(targets)
    by_name = {t.name: t for t in targets}
    unknown = [n for n in names if n not in by_name]
    if unknown:
        raise ConfigError(
            f"Unknown target(s): {', '.join(unknown)}. "
            f"Configured: {', '.join(by_name) or '-'}"
        )
    return [by_name[n] for n in names]
