"""Terminal UI utilities for picking dump targets."""

from __future__ import annotations

import questionary

from sfdump.cli.common.tui_style import QUESTIONARY_STYLE_SELECT
from sfdump.core.objects import Target

_MAX_TARGET_NAME_WIDTH = 48


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _target_choice_title(target: Target, *, name_width: int) -> str:
    """Format one target as `<name>  (<account>)` with aligned account column."""
    short_name = _truncate(target.name, _MAX_TARGET_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  ({target.account})"


def select_targets(targets: list[Target]) -> list[Target]:
    """Display a checkbox prompt to select targets to dump.

    Args:
        targets: Configured targets to choose from.

    Returns:
        The selected targets in configuration order, or an empty list.
    """
    shown_names = [_truncate(t.name, _MAX_TARGET_NAME_WIDTH) for t in targets]
    name_width = max((len(name) for name in shown_names), default=0)

    choices = [
        questionary.Choice(
            title=_target_choice_title(target, name_width=name_width),
            value=target,
            checked=True,
        )
        for target in targets
    ]

    picked = (
        questionary.checkbox(
            "Select targets to dump:",
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
        ).ask()
        or []
    )
    return [t for t in targets if t in picked]
