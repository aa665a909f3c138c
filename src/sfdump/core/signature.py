"""Argument signature normalization for callables.

Snowflake reports the argument signature of functions and procedures with
parameter names, e.g. `(A NUMBER, B VARCHAR)`. Overloads are identified by
their argument types only, so GET_DDL and the output file names need the
type-only form `(NUMBER, VARCHAR)`.

Expected shapes:

    signature := "(" [ param { "," param } ] ")"
    param     := [ name WS ] type
    name      := identifier | '"' quoted identifier '"'
    type      := token { WS token }

Commas and whitespace inside parentheses (`NUMBER(38, 0)`) or double quotes
do not separate anything. Anything that does not fit is returned unchanged.
"""

from __future__ import annotations

from typing import Callable

# Bare types made of more than one word. A param equal to one of these has
# no name to strip, which keeps normalization idempotent.
_MULTI_WORD_TYPES = frozenset(
    {
        "DOUBLE PRECISION",
        "CHAR VARYING",
        "CHARACTER VARYING",
        "NATIONAL CHAR",
        "NATIONAL CHARACTER",
        "NATIONAL CHAR VARYING",
        "NATIONAL CHARACTER VARYING",
        "TIME WITH TIME ZONE",
        "TIME WITHOUT TIME ZONE",
        "TIMESTAMP WITH TIME ZONE",
        "TIMESTAMP WITHOUT TIME ZONE",
        "TIMESTAMP WITH LOCAL TIME ZONE",
    }
)


def _split_top_level(text: str, is_sep: Callable[[str], bool]) -> list[str] | None:
    """
    Split text on separator characters outside parentheses and quotes.

    Returns None when parentheses or quotes are unbalanced.
    """
    parts: list[str] = []
    buf: list[str] = []
    depth = 0
    quoted = False

    for ch in text:
        if ch == '"':
            quoted = not quoted
        elif not quoted:
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth < 0:
                    return None
            elif depth == 0 and is_sep(ch):
                parts.append("".join(buf))
                buf = []
                continue
        buf.append(ch)

    if depth or quoted:
        return None
    parts.append("".join(buf))
    return parts


def _param_type(tokens: list[str]) -> str:
    """Return the type part of a tokenized parameter."""
    if len(tokens) == 1:
        return tokens[0]
    phrase = " ".join(tokens)
    if phrase.upper() in _MULTI_WORD_TYPES:
        return phrase
    return " ".join(tokens[1:])


def normalize_signature(raw: str | None) -> str:
    """
    Strip parameter names from a callable's argument signature.

    `(A NUMBER, B VARCHAR)` becomes `(NUMBER, VARCHAR)`. An empty signature
    stays empty (it is never turned into `()`), parameter order is kept, and
    normalizing an already normalized signature returns it unchanged.
    Unexpected shapes are returned as-is (stripped) instead of raising.
    """
    text = (raw or "").strip()
    if not text:
        return ""
    if not (text.startswith("(") and text.endswith(")")):
        return text

    params = _split_top_level(text[1:-1], lambda ch: ch == ",")
    if params is None:
        return text
    if len(params) == 1 and not params[0].strip():
        return "()"

    types: list[str] = []
    for param in params:
        tokens = _split_top_level(param.strip(), str.isspace)
        tokens = [t for t in tokens or [] if t]
        if not tokens:
            return text
        types.append(_param_type(tokens))

    return "(" + ", ".join(types) + ")"
