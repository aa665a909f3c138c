from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from sfdump.core.catalog import build_objects_query, quote_identifier  # noqa: E402
from sfdump.core.ddl import build_ddl_query  # noqa: E402
from sfdump.core.errors import QueryError  # noqa: E402
from sfdump.core.objects import SchemaObjectDescriptor, Target  # noqa: E402


class FakeWarehouse:
    """
    In-memory stand-in for a Snowflake connection.

    `catalog` maps database -> schema -> list of (name, signature, kind, ddl).
    Queries are answered by exact text, built with the production query
    builders. Any query containing one of `fail_on` raises QueryError.
    """

    def __init__(self, catalog, *, fail_on=()):
        self.catalog = catalog
        self.fail_on = list(fail_on)
        self.queries: list[str] = []
        self.closed = False
        self._lock = threading.Lock()
        self._answers: dict[str, list[tuple]] = {
            "show databases": [("2024-01-01", db, "", "") for db in catalog],
        }
        for db, schemas in catalog.items():
            self._answers[f"show schemas in database {quote_identifier(db)}"] = [
                ("2024-01-01", schema, "", "") for schema in schemas
            ]
            for schema, objects in schemas.items():
                self._answers[build_objects_query(db, schema)] = [
                    (name, sig, kind) for name, sig, kind, _ in objects
                ]
                for name, sig, kind, ddl in objects:
                    obj = SchemaObjectDescriptor.from_row(name, kind, sig)
                    rows = [] if ddl is None else [(ddl,)]
                    self._answers[build_ddl_query(db, schema, obj)] = rows

    def query(self, text: str) -> list[tuple]:
        with self._lock:
            self.queries.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise QueryError(f"injected failure on {marker}")
        if text not in self._answers:
            raise QueryError(f"unexpected query: {text}")
        return self._answers[text]

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_target():
    def _make(name: str = "prod", *, separate: bool = False) -> Target:
        return Target(
            name=name,
            account="myorg-prod",
            user="dumper",
            password="secret",
            role="SYSADMIN",
            warehouse="COMPUTE_WH",
            database="ANALYTICS",
            schema="PUBLIC",
            ddl_in_separate_folder=separate,
        )

    return _make


@pytest.fixture
def fake_warehouse():
    return FakeWarehouse
