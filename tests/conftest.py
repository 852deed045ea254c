"""Pytest configuration and fixtures."""

# pylint: disable=redefined-outer-name

import os
from dataclasses import dataclass, field
from typing import Optional

import pytest

from spf_macro.core.cache import CacheManager, MemoryCache
from spf_macro.core.config import Settings
from spf_macro.core.session import SessionContext
from spf_macro.macro.expander import MacroExpander

# Keep Sentry out of test runs regardless of the developer's environment
os.environ.pop("SENTRY_DSN", None)


@dataclass
class FakeDNSResolver:
    """Fake DNS resolver for testing with predefined responses."""

    # Map reverse name -> PTR targets
    ptr_records: dict[str, list[str]] = field(default_factory=dict)
    # Map domain -> A records
    a_records: dict[str, list[str]] = field(default_factory=dict)
    # Map domain -> AAAA records
    aaaa_records: dict[str, list[str]] = field(default_factory=dict)
    # Map domain -> TXT records
    txt_records: dict[str, list[str]] = field(default_factory=dict)
    # Raised from resolve_ptr when set
    ptr_error: Optional[Exception] = None
    default_ttl: int = 300
    ptr_calls: int = 0

    async def resolve_ptr(self, reverse_name: str) -> list[str]:
        self.ptr_calls += 1

        if self.ptr_error is not None:
            raise self.ptr_error

        return self.ptr_records.get(reverse_name, [])

    async def resolve_a(self, domain: str) -> tuple[list[str], Optional[int]]:
        records = self.a_records.get(domain, [])
        return records, self.default_ttl if records else None

    async def resolve_aaaa(self, domain: str) -> tuple[list[str], Optional[int]]:
        records = self.aaaa_records.get(domain, [])
        return records, self.default_ttl if records else None

    async def get_txt_records(self, domain: str) -> tuple[list[str], Optional[int]]:
        records = self.txt_records.get(domain, [])
        return records, self.default_ttl if records else None


@pytest.fixture
def test_settings():
    """Settings for testing."""
    return Settings(
        receiving_host=None,
        redis_ip=None,
        sentry_dsn=None,
        _env_file=None,
    )


@pytest.fixture
def test_cache():
    """Fresh cache manager for each test."""
    return CacheManager(backend=MemoryCache())


@pytest.fixture
def fake_resolver():
    return FakeDNSResolver()


@pytest.fixture
def expander(test_settings, fake_resolver, test_cache):
    return MacroExpander(
        settings=test_settings, resolver=fake_resolver, cache=test_cache
    )


@pytest.fixture
def rfc_session():
    """The example session used throughout RFC 7208 section 7.4."""
    return SessionContext.create(
        sender="strong-bad@email.example.com",
        current_domain="email.example.com",
        client_ip="192.0.2.3",
        helo_domain="mx.example.org",
        timestamp=1700000000,
    )


@pytest.fixture
def ipv4_session():
    return SessionContext.create(
        sender="sender@domain.com",
        current_domain="matching.com",
        client_ip="10.11.12.13",
    )
