"""IP address utilities for DNSBL queries."""

import logging
import re

from dnsbl_client.exceptions import InvalidAddress


logger = logging.getLogger(__name__)

# Matches plain IPv4 as well as IPv4-mapped IPv6 (::ffff:a.b.c.d)
IPV4_TAIL = re.compile(r"(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")

ZERO_GROUP = "0000"


def expand_ipv6_address(address: str) -> str:
    """Expand an IPv6 address to eight colon-separated groups of four digits.

    An address containing ``::`` more than once is malformed and is returned
    unchanged.

    Args:
        address: IPv6 address in textual form.

    Returns:
        str: Fully expanded address, e.g. ``0000:0000:...:0001``.

    Examples:
        >>> expand_ipv6_address("2001:db8::1")
        '2001:0db8:0000:0000:0000:0000:0000:0001'
    """
    if address == "::":
        return ":".join([ZERO_GROUP] * 8)

    if "::" in address:
        if address.count("::") > 1:
            logger.warning(
                f"IPv6 address {address} contains '::' more than once; "
                "leaving it unexpanded"
            )
            return address

        if address.startswith("::"):
            address = ZERO_GROUP + address
        if address.endswith("::"):
            address = address + ZERO_GROUP

        colons = address.count(":")
        if colons < 8:
            missing = ":" + (ZERO_GROUP + ":") * (8 - colons)
            address = address.replace("::", missing, 1)

    return ":".join(group.rjust(4, "0") for group in address.split(":"))


def reverse_address(address: str) -> str:
    """Convert an IP address to the reversed form used in DNSBL query names.

    IPv4 octets are reversed; IPv6 addresses are expanded and reversed nibble
    by nibble.

    Args:
        address: IPv4 or IPv6 address in textual form.

    Returns:
        str: Reversed dotted label sequence.

    Raises:
        InvalidAddress: If the address is neither IPv4 nor IPv6.

    Examples:
        >>> reverse_address("127.0.0.2")
        '2.0.0.127'
        >>> reverse_address("::ffff:192.0.2.1")
        '1.2.0.192'
    """
    match = IPV4_TAIL.search(address)
    if match:
        return ".".join(reversed(match.groups()))

    if ":" in address:
        nibbles = expand_ipv6_address(address).replace(":", "")
        return ".".join(reversed(nibbles))

    raise InvalidAddress(f"Unrecognized IP address '{address}'")


def build_dnsbl_query(reversed_address: str, domain: str) -> str:
    """Build DNSBL query hostname for DNS lookup.

    Args:
        reversed_address: Output of reverse_address().
        domain: DNSBL zone domain (e.g., "zen.spamhaus.org").

    Returns:
        str: DNSBL query hostname (e.g., "45.113.0.203.zen.spamhaus.org").

    Raises:
        ValueError: If domain is empty.
    """
    if not domain:
        raise ValueError("DNSBL domain cannot be empty")

    return f"{reversed_address}.{domain}"


def dotted_quad_to_int(text: str) -> int:
    """Convert dotted-quad text to a 32-bit unsigned big-endian integer.

    Raises:
        ValueError: If text is not four dot-separated octets in 0..255.
    """
    octets = text.split(".")
    if len(octets) != 4:
        raise ValueError(f"Not a dotted-quad address: {text!r}")

    value = 0
    for octet in octets:
        if not (octet.isascii() and octet.isdigit()) or int(octet) > 255:
            raise ValueError(f"Not a dotted-quad address: {text!r}")
        value = (value << 8) | int(octet)
    return value


def parse_mask(data: int | str) -> int:
    """Convert mask check data to a 32-bit integer.

    A bare integer n (1-255) means 0.0.0.n; anything else must be a dotted quad.

    Raises:
        ValueError: If the data is neither form.

    Examples:
        >>> parse_mask(8) == parse_mask("0.0.0.8")
        True
    """
    if isinstance(data, bool):
        raise ValueError(f"Invalid mask: {data!r}")

    if isinstance(data, int) or (
        isinstance(data, str) and data.isascii() and data.isdigit()
    ):
        n = int(data)
        if not 1 <= n <= 255:
            raise ValueError(f"Integer mask must be between 1 and 255, got {n}")
        return n

    if not isinstance(data, str):
        raise ValueError(f"Invalid mask: {data!r}")

    return dotted_quad_to_int(data)
