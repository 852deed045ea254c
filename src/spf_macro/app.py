"""Library startup: logging, Sentry, cache and DNS resolver wiring."""

import logging
import sys

from spf_macro.core.cache import init_cache
from spf_macro.core.config import get_settings
from spf_macro.dns.resolver import configure_resolver
from spf_macro.macro.expander import MacroExpander, get_expander
from spf_macro.utils.decorators import init_sentry

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    """Send package logs to stdout at the configured level."""
    settings = get_settings()

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("spf_macro").setLevel(settings.log_level.upper())


def init_app() -> MacroExpander:
    """Initialize shared services and return the default expander."""
    configure_logging()
    init_sentry()

    settings = get_settings()
    init_cache(settings)
    configure_resolver(settings)

    logger.info("SPF macro expander starting...")
    logger.info(f"Receiving host: {settings.receiving_host_name}")
    logger.info(f"Redis: {'enabled' if settings.use_redis else 'disabled'}")
    logger.info(f"Sentry: {'enabled' if settings.sentry_dsn else 'disabled'}")

    return get_expander()
