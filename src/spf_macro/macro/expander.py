"""SPF macro expansion (RFC 7208 section 7)."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from spf_macro.core.cache import CacheManager, get_cache_manager
from spf_macro.core.config import Settings, get_settings
from spf_macro.core.ptr import DefaultDNSResolver, DNSResolver, PTRValidator
from spf_macro.core.session import SessionContext
from spf_macro.dns.addresses import dotted_form, readable_form, version_label
from spf_macro.macro.scanner import scan
from spf_macro.macro.tokens import DOMAIN_SPEC_LETTERS, MACRO_LETTERS, MacroToken, Term
from spf_macro.utils.decorators import sentry_exception_catcher
from spf_macro.utils.exceptions import (
    DNSResolutionError,
    MacroError,
    MacroResolutionError,
    MalformedMacroError,
    UnboundMacroError,
)

logger = logging.getLogger(__name__)

# Letters answered straight from the session, without any I/O
SESSION_BINDINGS: dict[str, Callable[[SessionContext], Optional[str]]] = {
    "s": lambda session: session.sender,
    "l": lambda session: session.local_part,
    "o": lambda session: session.sender_domain,
    "d": lambda session: session.current_domain,
    "i": lambda session: dotted_form(session.client_ip),
    "v": lambda session: version_label(session.client_ip),
    "h": lambda session: session.helo_domain,
    "c": lambda session: readable_form(session.client_ip),
    "t": lambda session: str(session.timestamp),
}


def _shorten_domain(domain: str, limit: int) -> str:
    """Drop left-hand labels until ``domain`` is at most ``limit`` long."""
    while len(domain) > limit and "." in domain:
        domain = domain.split(".", 1)[1]

    return domain


@dataclass
class MacroExpander:
    """
    Expands macro strings against a session context.

    Only %{p} touches the network; everything else is read from the
    session. A string is scanned in full before any letter is resolved,
    so a syntax error never leaves a partial result behind.
    """

    settings: Settings = field(default_factory=get_settings)
    resolver: DNSResolver = field(default_factory=DefaultDNSResolver)
    cache: CacheManager = field(default_factory=get_cache_manager)
    ptr: Optional[PTRValidator] = None

    def __post_init__(self):
        if self.ptr is None:
            self.ptr = PTRValidator(
                settings=self.settings, resolver=self.resolver, cache=self.cache
            )

    async def resolve(self, session: SessionContext, letter: str) -> str:
        """Return the raw, untransformed value of one macro letter."""
        if letter == "p":
            try:
                return await self.ptr.validated_domain(
                    session.client_ip, session.current_domain
                )
            except DNSResolutionError as e:
                raise MacroResolutionError(str(e)) from e

        if letter == "r":
            return session.receiving_host or self.settings.receiving_host_name

        value = SESSION_BINDINGS[letter](session)

        if value is None:
            raise UnboundMacroError(f"No value bound for macro letter {letter!r}")

        return value

    async def expand(
        self,
        session: SessionContext,
        value: str,
        letters: Iterable[str] = MACRO_LETTERS,
    ) -> str:
        """
        Expand every escape and macro in ``value``.

        Raises a MacroError subclass on malformed input or when a letter
        cannot be resolved; nothing is returned in that case.
        """
        try:
            pieces = scan(value, letters)
        except MacroError as e:
            logger.debug("Rejected macro string: %s", e)
            raise

        output: list[str] = []

        for piece in pieces:
            if isinstance(piece, MacroToken):
                raw = await self.resolve(session, piece.letter)
                output.append(piece.transform(raw))
            else:
                output.append(piece)

        return "".join(output)

    async def expand_domain_spec(self, session: SessionContext, value: str) -> str:
        """
        Expand a domain-spec (mechanism or redirect target).

        The explanation-only letters c, r and t are rejected. Over-long
        results lose left-hand labels until they fit; a single label that
        is still too long raises MalformedMacroError.
        """
        result = await self.expand(session, value, DOMAIN_SPEC_LETTERS)
        result = result.rstrip(".")
        limit = self.settings.max_domain_length

        shortened = _shorten_domain(result, limit)

        if len(shortened) > limit:
            raise MalformedMacroError(
                f"Expanded domain is longer than {limit} characters", value
            )

        if shortened != result:
            logger.debug("Shortened expanded domain %s to %s", result, shortened)

        return shortened

    async def expand_explanation(self, session: SessionContext, value: str) -> str:
        return await self.expand(session, value)

    @sentry_exception_catcher
    async def expand_term(self, session: SessionContext, term: Term) -> str:
        """Expand the value of a parsed term; its qualifier is ignored."""
        if term.is_explanation:
            return await self.expand_explanation(session, term.value)

        return await self.expand_domain_spec(session, term.value)


# Default expander instance
_expander: Optional[MacroExpander] = None


def get_expander() -> MacroExpander:
    """Get or create the default macro expander."""
    global _expander

    if _expander is None:
        _expander = MacroExpander()

    return _expander


def set_expander(expander: MacroExpander) -> None:
    """Set a custom expander (useful for testing)."""
    global _expander

    _expander = expander


def reset_expander() -> None:
    """Reset the expander (useful for testing)."""
    global _expander

    _expander = None


async def expand(session: SessionContext, value: str) -> str:
    """Expand a macro string with the default expander."""
    return await get_expander().expand(session, value)
