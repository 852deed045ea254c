"""Per-check bindings for SPF macro letters."""

import dataclasses
import time
from dataclasses import dataclass, field
from typing import Optional, Union

from spf_macro.dns.addresses import IPAddress, parse_client_ip

# RFC 7208 section 4.3
DEFAULT_LOCAL_PART = "postmaster"


@dataclass(frozen=True)
class SessionContext:
    """
    Immutable macro bindings for one SPF check.

    Built once at the start of a check; include and redirect processing
    derive a new context with ``with_domain`` rather than editing this one.
    """

    sender: str
    current_domain: str
    client_ip: IPAddress
    helo_domain: Optional[str] = None
    receiving_host: Optional[str] = None
    timestamp: int = field(default_factory=lambda: int(time.time()))

    @classmethod
    def create(
        cls,
        sender: str,
        current_domain: str,
        client_ip: Union[str, IPAddress],
        helo_domain: Optional[str] = None,
        receiving_host: Optional[str] = None,
        timestamp: Optional[int] = None,
    ) -> "SessionContext":
        """
        Build a context from the raw check parameters.

        An empty local part is replaced with ``postmaster``; a sender
        without '@' raises ValueError, as does an unparseable client IP.
        """
        if "@" not in sender:
            raise ValueError(f"Sender {sender!r} has no domain part")

        local_part, _, domain = sender.rpartition("@")

        if not local_part:
            sender = f"{DEFAULT_LOCAL_PART}@{domain}"

        kwargs = {}

        if timestamp is not None:
            kwargs["timestamp"] = int(timestamp)

        return cls(
            sender=sender,
            current_domain=current_domain.rstrip("."),
            client_ip=parse_client_ip(client_ip),
            helo_domain=helo_domain,
            receiving_host=receiving_host,
            **kwargs,
        )

    def with_domain(self, domain: str) -> "SessionContext":
        """Return a copy evaluating ``domain`` (include/redirect targets)."""
        return dataclasses.replace(self, current_domain=domain.rstrip("."))

    @property
    def local_part(self) -> str:
        return self.sender.rpartition("@")[0]

    @property
    def sender_domain(self) -> str:
        return self.sender.rpartition("@")[2]
