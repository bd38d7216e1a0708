"""Error types raised by the DNSBL client."""


class DNSBLError(Exception):
    """Base class for all DNSBL client errors."""


class ConfigurationError(DNSBLError, ValueError):
    """Invalid timeout, unknown option key, or unusable environment setting."""


class UsageError(DNSBLError):
    """Client API called out of order or with missing arguments."""


class InvalidAddress(DNSBLError, ValueError):
    """Address matches neither the IPv4 nor the IPv6 textual form."""


class TransportError(DNSBLError):
    """The resolver could not initiate a query."""


class ReadError(DNSBLError):
    """A reply could not be read off a query handle."""
