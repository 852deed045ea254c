"""Textual forms of the client address used by the i, v and c macros."""

import ipaddress
from typing import Union

import dns.reversename

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_client_ip(value: Union[str, IPAddress]) -> IPAddress:
    """
    Parse a client address, unwrapping IPv4-mapped IPv6 addresses.

    Raises ValueError for anything that is not an IP address.
    """
    if isinstance(value, str):
        value = ipaddress.ip_address(value.strip())

    if isinstance(value, ipaddress.IPv6Address) and value.ipv4_mapped:
        return value.ipv4_mapped

    return value


def dotted_form(ip: IPAddress) -> str:
    """Return the %{i} form: dotted quad for v4, 32 dotted nibbles for v6."""
    if ip.version == 4:
        return str(ip)

    return ".".join(ip.exploded.replace(":", ""))


def version_label(ip: IPAddress) -> str:
    """Return the %{v} form."""
    return "in-addr" if ip.version == 4 else "ip6"


def readable_form(ip: IPAddress) -> str:
    """Return the %{c} form (compressed notation for v6)."""
    return str(ip)


def reverse_pointer(ip: IPAddress) -> str:
    """Return the PTR query name for an address, without the trailing dot."""
    return dns.reversename.from_address(str(ip)).to_text(omit_final_dot=True)
