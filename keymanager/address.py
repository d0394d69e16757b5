"""Address classification for target hosts."""

import re
from enum import Enum

from .errors import InputError

# Shape checks only: octets are not range-checked and IPv6 is not
# validated against RFC 4291.
IPV4_PATTERN = re.compile(r"^[0-9]+\.[0-9]+\.[0-9]+\.[0-9]+$")
IPV6_PATTERN = re.compile(r"^[0-9a-fA-F:]+:[0-9a-fA-F]+$")


class AddressFamily(Enum):
    """Address family of a target string."""

    IPV4 = "ipv4"
    IPV6 = "ipv6"
    INVALID = "invalid"


def classify(address: str) -> AddressFamily:
    """Return the address family a target string belongs to."""
    if not address:
        return AddressFamily.INVALID
    if IPV4_PATTERN.fullmatch(address):
        return AddressFamily.IPV4
    if IPV6_PATTERN.fullmatch(address):
        return AddressFamily.IPV6
    return AddressFamily.INVALID


def require_valid(address: str) -> AddressFamily:
    """Classify an address, raising InputError if it is not an IP literal."""
    family = classify(address)
    if family is AddressFamily.INVALID:
        raise InputError(f"Invalid IP address format: {address!r}")
    return family
