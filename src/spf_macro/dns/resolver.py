"""DNS resolution utilities."""

import logging
from typing import Tuple

import dns.asyncresolver
import dns.exception
import dns.resolver

from spf_macro.core.config import Settings
from spf_macro.utils.exceptions import (
    DNSResolutionError,
    capture_exception,
)

logger = logging.getLogger(__name__)

# Module-level resolver instance
resolver = dns.asyncresolver.Resolver()

# Expected DNS errors that shouldn't be reported to Sentry
EXPECTED_DNS_ERRORS = (
    dns.resolver.NoAnswer,
    dns.resolver.NXDOMAIN,
    dns.exception.Timeout,
)

# A missing PTR record is an answer; a timeout is not
NO_RECORD_ERRORS = (
    dns.resolver.NoAnswer,
    dns.resolver.NXDOMAIN,
)


def configure_resolver(settings: Settings) -> None:
    """Apply timeout settings to the shared resolver."""
    resolver.timeout = settings.dns_timeout
    resolver.lifetime = settings.dns_lifetime


async def resolve_ptr(reverse_name: str) -> list[str]:
    """
    Resolve PTR records for a reverse-lookup name.

    Returns the target host names without trailing dots; an empty list
    when the name has no PTR records. Raises DNSResolutionError on
    timeouts and other resolver failures.
    """
    try:
        ans = await resolver.resolve(reverse_name, "PTR")
        return [r.target.to_text(omit_final_dot=True) for r in ans]
    except NO_RECORD_ERRORS:
        return []
    except dns.exception.Timeout as e:
        logger.warning("PTR lookup for %s timed out", reverse_name)
        raise DNSResolutionError(f"PTR lookup for {reverse_name} timed out") from e
    except Exception as e:
        capture_exception(e, {"name": reverse_name, "record_type": "PTR"})
        raise DNSResolutionError(f"PTR lookup for {reverse_name} failed: {e}") from e


async def get_txt_records(domain: str) -> Tuple[list[str], int]:
    """
    Get TXT records for a domain.

    Returns (list of full TXT strings, ttl).
    Joins any <255-char> segments into their logical whole.
    """
    try:
        answer = await resolver.resolve(domain, "TXT")
        full_texts: list[str] = []

        for rdata in answer:
            joined = b"".join(rdata.strings).decode("utf-8")
            full_texts.append(joined)

        return full_texts, answer.rrset.ttl

    except EXPECTED_DNS_ERRORS:
        return [], 0
    except Exception as e:
        capture_exception(e, {"domain": domain, "record_type": "TXT"})
        return [], 0


async def resolve_a(hostname: str) -> Tuple[list[str], int]:
    """Resolve A records for a hostname."""
    try:
        ans = await resolver.resolve(hostname, "A")
        return [r.address for r in ans], ans.rrset.ttl
    except EXPECTED_DNS_ERRORS:
        return [], 0
    except Exception as e:
        capture_exception(e, {"hostname": hostname, "record_type": "A"})
        return [], 0


async def resolve_aaaa(hostname: str) -> Tuple[list[str], int]:
    """Resolve AAAA records for a hostname."""
    try:
        ans = await resolver.resolve(hostname, "AAAA")
        return [r.address for r in ans], ans.rrset.ttl
    except EXPECTED_DNS_ERRORS:
        return [], 0
    except Exception as e:
        capture_exception(e, {"hostname": hostname, "record_type": "AAAA"})
        return [], 0
