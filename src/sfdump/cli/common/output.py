"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {escape(msg)}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {escape(msg)}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {escape(msg)}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {escape(msg)}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{escape(title)}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {escape(str(v))}")

    def targets_table(self, targets: Iterable[Any], title: str = "Targets") -> None:
        """
        Expects objects with .name .account .user .role .warehouse .ddl_folder
        (like sfdump.core.objects.Target)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Target", style="ok", no_wrap=True)
        t.add_column("Account")
        t.add_column("User", style="meta")
        t.add_column("Role", style="meta")
        t.add_column("Warehouse", style="meta")
        t.add_column("DDL folder")

        for target in targets:
            t.add_row(
                escape(target.name),
                escape(target.account),
                escape(target.user),
                escape(target.role),
                escape(target.warehouse),
                escape(target.ddl_folder),
            )

        console.print(t)

    def names_table(self, names: Iterable[str], title: str, column: str) -> None:
        """Render a single-column table of catalog names (databases/schemas)."""
        t = Table(title=title, show_lines=False)
        t.add_column(column, style="ok")

        for name in names:
            t.add_row(escape(str(name)))

        console.print(t)

    def objects_table(self, objects: Iterable[Any], title: str = "Objects") -> None:
        """
        Render schema objects.

        Expects objects with `.name`, `.kind`, `.signature` and
        `.original_signature` (like sfdump.core.objects.SchemaObjectDescriptor).
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Name", style="ok")
        t.add_column("Kind")
        t.add_column("Signature")
        t.add_column("Catalog signature", style="meta")

        for obj in objects:
            kind = obj.kind.value if hasattr(obj.kind, "value") else str(obj.kind)
            t.add_row(
                escape(obj.name),
                kind,
                escape(obj.signature),
                escape(obj.original_signature),
            )

        console.print(t)

    def reports_table(self, reports: Iterable[Any], title: str = "Dump results") -> None:
        """
        Expects objects with .target .databases .schemas .objects_written
        .failures (like sfdump.core.objects.DumpReport)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Target", style="ok", no_wrap=True)
        t.add_column("Databases", justify="right")
        t.add_column("Schemas", justify="right")
        t.add_column("Objects", justify="right")
        t.add_column("Result")

        for r in reports:
            failures = len(r.failures)
            result = "[ok]OK[/]" if not failures else f"[err]FAIL[/] {failures} failure(s)"
            t.add_row(
                escape(r.target),
                str(r.databases),
                str(r.schemas),
                str(r.objects_written),
                result,
            )

        console.print(t)

    def failures_table(self, failures: Iterable[Any], title: str = "Failures") -> None:
        """Render failures recorded in best-effort mode."""
        t = Table(title=title, show_lines=False)
        t.add_column("Target", style="ok", no_wrap=True)
        t.add_column("Operation", style="meta")
        t.add_column("Location")
        t.add_column("Error", style="err")

        for f in failures:
            t.add_row(
                escape(f.target), f.operation, escape(f.location), escape(f.error)
            )

        console.print(t)


out = Out()
