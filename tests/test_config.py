import pytest

from sfdump.core.config import (
    load_targets,
    parse_targets,
    password_env_var,
    resolve_config_path,
    select_targets,
)
from sfdump.core.errors import ConfigError

_INI = """
[production]
DBACCOUNT = myorg-prod
DBUSER = dumper
DBPASSWORD = secret
DBUSERROLE = SYSADMIN
DBWAREHOUSE = COMPUTE_WH
DBNAME = ANALYTICS
DBSCHEMA = PUBLIC
DDLSEPARATEFOLDER = true

[staging]
DBACCOUNT = myorg-stg
DBUSER = dumper
DBPASSWORD = other%secret
DBUSERROLE = SYSADMIN
DBWAREHOUSE = COMPUTE_WH
DBNAME = ANALYTICS
DBSCHEMA = PUBLIC
DDLSEPARATEFOLDER = no
"""


def test_parse_targets_reads_every_section_in_order():
    targets = parse_targets(_INI)

    assert [t.name for t in targets] == ["production", "staging"]
    prod = targets[0]
    assert prod.account == "myorg-prod"
    assert prod.role == "SYSADMIN"
    assert prod.ddl_in_separate_folder is True
    assert prod.ddl_folder == "production/ddl"
    assert targets[1].ddl_folder == "staging"
    assert targets[1].password == "other%secret"


def test_password_is_not_shown_in_repr():
    assert "secret" not in repr(parse_targets(_INI)[0])


@pytest.mark.parametrize("key", ["DBACCOUNT", "DBSCHEMA", "DDLSEPARATEFOLDER"])
def test_missing_key_is_a_config_error(key: str):
    text = "\n".join(line for line in _INI.splitlines() if not line.startswith(key))

    with pytest.raises(ConfigError, match=rf"\[{key}\] not found in section \[production\]"):
        parse_targets(text)


def test_invalid_boolean_is_a_config_error():
    text = _INI.replace("DDLSEPARATEFOLDER = true", "DDLSEPARATEFOLDER = maybe")

    with pytest.raises(ConfigError, match="not a boolean"):
        parse_targets(text)


def test_empty_config_is_a_config_error():
    with pytest.raises(ConfigError, match="No sections"):
        parse_targets("")


def test_password_can_come_from_environment(monkeypatch):
    text = "\n".join(line for line in _INI.splitlines() if "other%secret" not in line)
    monkeypatch.setenv(password_env_var("staging"), "from-env")

    staging = parse_targets(text)[1]

    assert staging.password == "from-env"


def test_password_env_var_name():
    assert password_env_var("prod-eu.1") == "SFDUMP_PROD_EU_1_PASSWORD"


def test_load_targets_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Could not read config file"):
        load_targets(tmp_path / "nope.ini")


def test_load_targets_from_env_path(tmp_path, monkeypatch):
    path = tmp_path / "targets.ini"
    path.write_text(_INI)
    monkeypatch.setenv("SFDUMP_CONFIG", str(path))

    assert resolve_config_path(None) == path
    assert len(load_targets()) == 2


def test_select_targets_defaults_to_all_and_rejects_unknown():
    targets = parse_targets(_INI)

    assert select_targets(targets, []) == targets
    assert select_targets(targets, ["staging"]) == [targets[1]]
    with pytest.raises(ConfigError, match="Unknown target"):
        select_targets(targets, ["qa"])
