"""Scanner for the SPF macro-string grammar (RFC 7208 section 7.1)."""

from typing import Iterable, Union

from spf_macro.macro.tokens import DELIMITERS, DIGITS, MACRO_LETTERS, MacroToken
from spf_macro.utils.exceptions import (
    InvalidEscapeError,
    MalformedMacroError,
    UnterminatedMacroError,
)

Piece = Union[str, MacroToken]

# Single-character escapes after '%'
ESCAPES = {
    "%": "%",
    "_": " ",
    "-": "%20",
}


def scan(value: str, letters: Iterable[str] = MACRO_LETTERS) -> list[Piece]:
    """
    Split a macro string into literal text and parsed macro tokens.

    Escapes are already resolved in the literal pieces. The whole string
    is checked before anything is returned, so a malformed macro anywhere
    raises without producing output.
    """
    allowed = frozenset(letters)
    pieces: list[Piece] = []
    literal: list[str] = []
    pos = 0
    length = len(value)

    while pos < length:
        char = value[pos]

        if char != "%":
            literal.append(char)
            pos += 1
            continue

        if pos + 1 >= length:
            raise InvalidEscapeError("Dangling '%'", value, pos)

        follower = value[pos + 1]

        if follower in ESCAPES:
            literal.append(ESCAPES[follower])
            pos += 2
            continue

        if follower != "{":
            raise InvalidEscapeError(f"Invalid escape '%{follower}'", value, pos)

        token, pos = _parse_expression(value, pos + 2, allowed)

        if literal:
            pieces.append("".join(literal))
            literal = []

        pieces.append(token)

    if literal:
        pieces.append("".join(literal))

    return pieces


def _parse_expression(value: str, pos: int, allowed: frozenset) -> tuple[MacroToken, int]:
    """Parse the body of a %{...} expression starting just after '{'."""
    length = len(value)

    if pos >= length:
        raise UnterminatedMacroError("Unterminated macro", value, pos)

    letter = value[pos]

    if letter == "}":
        raise MalformedMacroError("Empty macro", value, pos)

    if letter.lower() not in MACRO_LETTERS:
        raise MalformedMacroError(f"Unknown macro letter {letter!r}", value, pos)

    if letter.lower() not in allowed:
        raise MalformedMacroError(
            f"Macro letter {letter!r} is only allowed in explanations", value, pos
        )

    pos += 1
    start = pos

    while pos < length and value[pos] in DIGITS:
        pos += 1

    truncation = None

    if pos > start:
        truncation = int(value[start:pos])

        if truncation == 0:
            raise MalformedMacroError("Truncation count must be nonzero", value, start)

    reverse = False

    if pos < length and value[pos] in "rR":
        reverse = True
        pos += 1

    start = pos

    while pos < length and value[pos] in DELIMITERS:
        pos += 1

    delimiters = value[start:pos]

    if pos >= length:
        raise UnterminatedMacroError("Unterminated macro", value, pos)

    if value[pos] != "}":
        raise MalformedMacroError(
            f"Unexpected {value[pos]!r} in macro", value, pos
        )

    token = MacroToken(
        letter=letter.lower(),
        truncation=truncation,
        reverse=reverse,
        delimiters=delimiters or ".",
        url_encode=letter.isupper(),
    )

    return token, pos + 1
