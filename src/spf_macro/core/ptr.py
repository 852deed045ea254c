"""Validated client host name lookup behind the %{p} macro."""

# pylint: disable=missing-function-docstring

import ipaddress
import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol, Tuple

from spf_macro.core.cache import CacheManager, get_cache_manager
from spf_macro.core.config import Settings, get_settings
from spf_macro.dns.addresses import IPAddress, reverse_pointer
from spf_macro.dns.resolver import get_txt_records, resolve_a, resolve_aaaa, resolve_ptr

logger = logging.getLogger(__name__)

# Value of %{p} when no PTR name validates (RFC 7208 section 7.3)
UNKNOWN_DOMAIN = "unknown"


class DNSResolver(Protocol):
    """Protocol for DNS resolution operations."""

    async def resolve_ptr(self, reverse_name: str) -> list[str]: ...

    async def resolve_a(self, domain: str) -> Tuple[list[str], Optional[int]]: ...

    async def resolve_aaaa(self, domain: str) -> Tuple[list[str], Optional[int]]: ...

    async def get_txt_records(self, domain: str) -> Tuple[list[str], Optional[int]]: ...


@dataclass
class DefaultDNSResolver:
    """Default DNS resolver using the dns.asyncresolver module."""

    async def resolve_ptr(self, reverse_name: str) -> list[str]:
        return await resolve_ptr(reverse_name)

    async def resolve_a(self, domain: str) -> Tuple[list[str], Optional[int]]:
        return await resolve_a(domain)

    async def resolve_aaaa(self, domain: str) -> Tuple[list[str], Optional[int]]:
        return await resolve_aaaa(domain)

    async def get_txt_records(self, domain: str) -> Tuple[list[str], Optional[int]]:
        return await get_txt_records(domain)


def _is_subdomain(name: str, domain: str) -> bool:
    return name.endswith("." + domain)


@dataclass
class PTRValidator:
    """
    Finds the validated domain name of a client address.

    A PTR name is validated when one of its forward (A or AAAA) addresses
    is the client address itself. Among the validated names, the current
    domain wins, then any of its subdomains, then the first one found.
    """

    settings: Settings = field(default_factory=get_settings)
    resolver: DNSResolver = field(default_factory=DefaultDNSResolver)
    cache: CacheManager = field(default_factory=get_cache_manager)

    async def validated_names(self, ip: IPAddress) -> list[str]:
        """
        Return the PTR names of ``ip`` that resolve back to it.

        Raises DNSResolutionError when the PTR lookup itself fails.
        Failures while resolving individual names only drop that name.
        """
        names = await self.resolver.resolve_ptr(reverse_pointer(ip))
        validated: list[str] = []

        for name in names[: self.settings.max_ptr_names]:
            if ip.version == 4:
                addresses, _ttl = await self.resolver.resolve_a(name)
            else:
                addresses, _ttl = await self.resolver.resolve_aaaa(name)

            for address in addresses:
                try:
                    if ipaddress.ip_address(address) == ip:
                        validated.append(name.rstrip("."))
                        break
                except ValueError:
                    logger.debug("Ignoring bad address %r for %s", address, name)

        return validated

    async def validated_domain(self, ip: IPAddress, domain: str) -> str:
        cache_key = self.cache.key("ptr", ip, domain.lower())

        if cached := await self.cache.get(cache_key):
            return cached

        names = await self.validated_names(ip)
        result = self.choose(names, domain)

        await self.cache.set(cache_key, result, self.settings.ptr_cache_ttl, log=True)
        return result

    @staticmethod
    def choose(names: list[str], domain: str) -> str:
        """Pick the preferred validated name for ``domain``."""
        if not names:
            return UNKNOWN_DOMAIN

        target = domain.lower().rstrip(".")
        lowered = [n.lower() for n in names]

        if target in lowered:
            return names[lowered.index(target)]

        for name, low in zip(names, lowered):
            if _is_subdomain(low, target):
                return name

        return names[0]
