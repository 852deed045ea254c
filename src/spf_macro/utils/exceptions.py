"""Custom exceptions and error handling utilities."""

import logging
from typing import Optional

import sentry_sdk

from spf_macro.core.config import get_settings

logger = logging.getLogger(__name__)


class SPFMacroError(Exception):
    """Base exception for SPF macro errors."""


class DNSResolutionError(SPFMacroError):
    """DNS resolution failed unexpectedly."""


class MacroError(SPFMacroError):
    """
    A macro string could not be expanded.

    Carries the raw value being expanded and the offset at which
    scanning stopped. None of these errors are retryable; callers
    treat them as a permanent error for the containing term.
    """

    def __init__(self, message: str, value: str = "", position: int = -1):
        super().__init__(message)
        self.value = value
        self.position = position

    def __str__(self) -> str:
        message = super().__str__()

        if self.position < 0:
            return message

        return f"{message} at offset {self.position} in {self.value!r}"


class MacroSyntaxError(MacroError):
    """The macro string is malformed."""


class InvalidEscapeError(MacroSyntaxError):
    """'%' followed by something other than '%', '_', '-' or '{'."""


class UnterminatedMacroError(MacroSyntaxError):
    """'%{' reached the end of input before a closing '}'."""


class MalformedMacroError(MacroSyntaxError):
    """Empty body, unknown macro letter, or transformers out of order."""


class UnboundMacroError(MacroError):
    """The session has no value for the requested macro letter."""


class MacroResolutionError(MacroError):
    """The reverse lookup behind %{p} failed or timed out."""


def capture_exception(
    exception: Exception,
    context: Optional[dict] = None,
    level: str = "error",
) -> None:
    """
    Capture exception to Sentry if configured, otherwise log it.

    Args:
        exception: The exception to capture
        context: Additional context to include
        level: Log level ('error', 'warning', 'info')
    """
    settings = get_settings()

    log_func = getattr(logger, level, logger.error)
    log_func("%s: %s", type(exception).__name__, exception, exc_info=True)

    if settings.sentry_dsn:
        if context:
            with sentry_sdk.push_scope() as scope:
                for key, value in context.items():
                    scope.set_extra(key, value)
                sentry_sdk.capture_exception(exception)
        else:
            sentry_sdk.capture_exception(exception)
