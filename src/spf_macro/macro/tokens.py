"""Value types for SPF terms and parsed macro expressions."""

import re
import urllib.parse
from dataclasses import dataclass
from typing import Optional

# Macro letters (RFC 7208 section 7.2)
MACRO_LETTERS = frozenset("slodiphcrtv")

# Letters only valid inside explanation text
EXPLANATION_ONLY_LETTERS = frozenset("crt")

DOMAIN_SPEC_LETTERS = MACRO_LETTERS - EXPLANATION_ONLY_LETTERS

DELIMITERS = frozenset(".-+,/_=")

DIGITS = frozenset("0123456789")

DEFAULT_DELIMITERS = "."

JOIN_CHARACTER = "."

EXPLANATION_MECHANISM = "exp"


@dataclass(frozen=True)
class Term:
    """A qualifier/mechanism/value triple produced by the record parser."""

    qualifier: str
    mechanism: str
    value: str

    @property
    def is_explanation(self) -> bool:
        return self.mechanism.lower() == EXPLANATION_MECHANISM


@dataclass(frozen=True)
class MacroToken:
    """
    One parsed ``%{...}`` expression.

    ``truncation`` is the number of right-hand parts to keep (None keeps
    all of them). ``delimiters`` holds the split characters; parts are
    always rejoined with a dot.
    """

    letter: str
    truncation: Optional[int] = None
    reverse: bool = False
    delimiters: str = DEFAULT_DELIMITERS
    url_encode: bool = False

    def split(self, value: str) -> list[str]:
        if len(self.delimiters) == 1:
            return value.split(self.delimiters)

        return re.split(f"[{re.escape(self.delimiters)}]", value)

    def transform(self, value: str) -> str:
        """Split, reverse, truncate and rejoin a resolved macro value."""
        parts = self.split(value)

        # Reversal happens before truncation
        if self.reverse:
            parts.reverse()

        if self.truncation is not None:
            parts = parts[-self.truncation :]

        result = JOIN_CHARACTER.join(parts)

        if self.url_encode:
            # Everything outside the RFC 3986 unreserved set
            result = urllib.parse.quote(result, safe="")

        return result
