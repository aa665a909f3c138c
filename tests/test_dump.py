from pathlib import Path

import pytest

from sfdump.core.dump import DumpListener, DumpOptions, dump_target, dump_targets
from sfdump.core.errors import (
    ConnectError,
    EnumerationError,
    FolderAlreadyExistsError,
    RetrievalError,
)
from sfdump.core.paths import PathAllocator


def _sql_files(root: Path) -> list[str]:
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*.sql"))


class _RecordingListener(DumpListener):
    def __init__(self):
        self.written: list[tuple[str, str, str]] = []
        self.failures = []
        self.done = []

    def object_written(self, target, database, schema, obj, path):
        self.written.append((database, schema, obj.name + obj.signature))

    def failure_recorded(self, failure):
        self.failures.append(failure)

    def target_done(self, report):
        self.done.append(report.target)


def test_dump_writes_one_file_per_object_including_overloads(
    tmp_path, make_target, fake_warehouse
):
    warehouse = fake_warehouse(
        {
            "SALES": {
                "PUBLIC": [
                    ("T", "", "TABLE", "create table T"),
                    ("V", "", "VIEW", "create view V"),
                    ("F", "(X NUMBER)", "FUNCTION", "create function F(X NUMBER)"),
                    ("F", "(X VARCHAR)", "FUNCTION", "create function F(X VARCHAR)"),
                ]
            }
        }
    )

    report = dump_target(make_target("prod"), warehouse, PathAllocator(tmp_path))

    schema_dir = tmp_path / "prod" / "sales" / "public"
    assert _sql_files(schema_dir) == [
        "functions/f(number).sql",
        "functions/f(varchar).sql",
        "tables/t.sql",
        "views/v.sql",
    ]
    assert (schema_dir / "functions" / "f(varchar).sql").read_text() == (
        "create function F(X VARCHAR)"
    )
    assert (schema_dir / "tables" / "t.sql").read_text() == "create table T"
    assert report.ok
    assert report.databases == 1
    assert report.schemas == 1
    assert report.objects_written == 4
    assert report.ddl_folder == str(tmp_path / "prod")


def test_dump_uses_separate_ddl_folder_when_configured(
    tmp_path, make_target, fake_warehouse
):
    warehouse = fake_warehouse({"DB": {"S": [("T", "", "TABLE", "ddl")]}})

    dump_target(make_target("Prod", separate=True), warehouse, PathAllocator(tmp_path))

    assert _sql_files(tmp_path) == ["prod/ddl/db/s/tables/t.sql"]


def test_dump_never_enters_the_system_schema(tmp_path, make_target, fake_warehouse):
    warehouse = fake_warehouse(
        {
            "DB": {
                "INFORMATION_SCHEMA": [("TABLES", "", "VIEW", "create view TABLES")],
                "PUBLIC": [("T", "", "TABLE", "ddl")],
            }
        }
    )

    report = dump_target(make_target(), warehouse, PathAllocator(tmp_path))

    assert _sql_files(tmp_path) == ["prod/db/public/tables/t.sql"]
    assert not (tmp_path / "prod" / "db" / "information_schema").exists()
    assert not any("TABLE_SCHEMA = 'INFORMATION_SCHEMA'" in q for q in warehouse.queries)
    assert report.schemas == 1


def test_dump_spans_many_databases_and_schemas_in_parallel(
    tmp_path, make_target, fake_warehouse
):
    catalog = {
        f"DB{d}": {
            f"S{s}": [(f"T{t}", "", "TABLE", f"ddl {d}.{s}.{t}") for t in range(3)]
            for s in range(4)
        }
        for d in range(5)
    }
    warehouse = fake_warehouse(catalog)
    listener = _RecordingListener()

    report = dump_target(
        make_target(),
        warehouse,
        PathAllocator(tmp_path),
        options=DumpOptions(max_parallel=3),
        listener=listener,
    )

    assert report.objects_written == 5 * 4 * 3
    assert report.schemas == 20
    assert len(_sql_files(tmp_path)) == 60
    assert (tmp_path / "prod/db4/s3/tables/t2.sql").read_text() == "ddl 4.3.2"
    assert listener.done == ["prod"]


def test_objects_within_a_schema_follow_catalog_order(
    tmp_path, make_target, fake_warehouse
):
    names = ["ZETA", "ALPHA", "MID"]
    warehouse = fake_warehouse(
        {"DB": {"S": [(n, "", "TABLE", f"ddl {n}") for n in names]}}
    )
    listener = _RecordingListener()

    dump_target(make_target(), warehouse, PathAllocator(tmp_path), listener=listener)

    assert [name for _, _, name in listener.written] == names


def test_enumeration_failure_stops_the_run(tmp_path, make_target, fake_warehouse):
    warehouse = fake_warehouse(
        {
            "A_DB": {"S": [("T", "", "TABLE", "ddl")]},
            "B_DB": {"S": [("T", "", "TABLE", "ddl")]},
            "C_DB": {"S": [("T", "", "TABLE", "ddl")]},
        },
        fail_on=['show schemas in database "A_DB"'],
    )

    with pytest.raises(EnumerationError, match=r"\[A_DB\]"):
        dump_target(
            make_target(),
            warehouse,
            PathAllocator(tmp_path),
            options=DumpOptions(max_parallel=1),
        )

    assert _sql_files(tmp_path) == []


def test_retrieval_failure_stops_remaining_objects(
    tmp_path, make_target, fake_warehouse
):
    warehouse = fake_warehouse(
        {
            "DB": {
                "S": [
                    ("A", "", "TABLE", "ddl a"),
                    ("B", "", "TABLE", None),
                    ("C", "", "TABLE", "ddl c"),
                ]
            },
            "ZZ": {"S": [("T", "", "TABLE", "ddl")]},
        }
    )

    with pytest.raises(RetrievalError, match="no definition"):
        dump_target(
            make_target(),
            warehouse,
            PathAllocator(tmp_path),
            options=DumpOptions(max_parallel=1),
        )

    assert _sql_files(tmp_path) == ["prod/db/s/tables/a.sql"]


def test_best_effort_records_failures_and_keeps_going(
    tmp_path, make_target, fake_warehouse
):
    warehouse = fake_warehouse(
        {
            "DB": {
                "S": [
                    ("A", "", "TABLE", "ddl a"),
                    ("B", "", "TABLE", None),
                    ("C", "", "TABLE", "ddl c"),
                ]
            },
            "BROKEN": {"S": [("T", "", "TABLE", "ddl")]},
        },
        fail_on=['show schemas in database "BROKEN"'],
    )
    listener = _RecordingListener()

    report = dump_target(
        make_target(),
        warehouse,
        PathAllocator(tmp_path),
        options=DumpOptions(max_parallel=2, fail_fast=False),
        listener=listener,
    )

    assert _sql_files(tmp_path) == ["prod/db/s/tables/a.sql", "prod/db/s/tables/c.sql"]
    assert report.objects_written == 2
    assert not report.ok
    assert sorted(f.operation for f in report.failures) == ["dump database", "dump object"]
    assert len(listener.failures) == 2


def test_target_folder_clash_is_reported(tmp_path, make_target, fake_warehouse):
    paths = PathAllocator(tmp_path)
    dump_target(make_target("prod"), fake_warehouse({}), paths)

    with pytest.raises(FolderAlreadyExistsError):
        dump_target(make_target("PROD"), fake_warehouse({}), paths)


def test_dump_targets_closes_each_connection(tmp_path, make_target, fake_warehouse):
    opened = {}

    def _connect(target):
        opened[target.name] = fake_warehouse(
            {"DB": {"S": [("T", "", "TABLE", f"ddl {target.name}")]}}
        )
        return opened[target.name]

    reports = dump_targets(
        [make_target("dev"), make_target("prod")], _connect, PathAllocator(tmp_path)
    )

    assert [r.target for r in reports] == ["dev", "prod"]
    assert all(w.closed for w in opened.values())
    assert (tmp_path / "prod/db/s/tables/t.sql").read_text() == "ddl prod"


def test_dump_targets_closes_connection_on_failure(
    tmp_path, make_target, fake_warehouse
):
    warehouse = fake_warehouse({"DB": {}}, fail_on=["show databases"])

    with pytest.raises(EnumerationError):
        dump_targets([make_target()], lambda t: warehouse, PathAllocator(tmp_path))

    assert warehouse.closed


def test_dump_targets_connect_failure(tmp_path, make_target, fake_warehouse):
    def _connect(target):
        if target.name == "down":
            raise ConnectError("unreachable")
        return fake_warehouse({"DB": {"S": [("T", "", "TABLE", "ddl")]}})

    targets = [make_target("down"), make_target("up")]

    with pytest.raises(ConnectError):
        dump_targets(targets, _connect, PathAllocator(tmp_path / "strict"))

    reports = dump_targets(
        targets,
        _connect,
        PathAllocator(tmp_path / "lenient"),
        options=DumpOptions(fail_fast=False),
    )
    assert [r.ok for r in reports] == [False, True]
    assert reports[0].failures[0].operation == "connect"
    assert _sql_files(tmp_path / "lenient") == ["up/db/s/tables/t.sql"]


@pytest.mark.parametrize("value", [0, -1])
def test_dump_options_reject_non_positive_parallel(value: int):
    with pytest.raises(ValueError, match="max_parallel"):
        DumpOptions(max_parallel=value)
