"""DNSBL client: query many blacklists for one address concurrently."""

import logging
import time
from typing import Any, Dict, Iterable, List, Mapping

from dnsbl_client.config import DEFAULT_TIMEOUT, validate_timeout
from dnsbl_client.exceptions import ConfigurationError, UsageError
from dnsbl_client.models.check_entry import HitRecord, build_check_table
from dnsbl_client.models.query_state import PendingQuery, QueryState
from dnsbl_client.services.logger import log_query_completed, log_query_dispatched
from dnsbl_client.services.query_dispatcher import send_queries
from dnsbl_client.services.resolver import BackgroundResolver
from dnsbl_client.services.response_collector import collect_results
from dnsbl_client.utils.ip_utils import reverse_address


logger = logging.getLogger(__name__)

CLIENT_OPTIONS = ("timeout", "resolver")
QUERY_OPTIONS = ("early_exit",)


class DNSBLClient:
    """Checks an address against several DNSBLs within a fixed time budget.

    A cycle is started with query_ip(), which sends one query per distinct
    DNSBL domain and returns immediately, and finished with get_answers(),
    which waits for replies and returns the hits. Only one cycle may be in
    flight at a time.

    Example:
        >>> client = DNSBLClient(timeout=3)
        >>> client.query_ip("127.0.0.2", [
        ...     {"domain": "zen.spamhaus.org"},
        ...     {"domain": "bl.example.org", "type": "mask", "data": "0.0.0.4"},
        ... ])
        >>> hits = client.get_answers()
    """

    def __init__(self, timeout: Any = DEFAULT_TIMEOUT, resolver: Any = None):
        """Initialize the client.

        Args:
            timeout: Positive integer number of seconds for get_answers().
            resolver: Object with send_query(), wait_readable(), read_reply()
                and close(); a BackgroundResolver using the system
                nameservers is created if omitted.

        Raises:
            ConfigurationError: If timeout is not a positive integer.
        """
        self._timeout = validate_timeout(timeout)
        self._resolver = resolver if resolver is not None else BackgroundResolver()
        self._state = QueryState.IDLE
        self._early_exit = False
        self._address: str | None = None
        self._pending: Dict[Any, PendingQuery] = {}

    def get_resolver(self) -> Any:
        return self._resolver

    def get_timeout(self) -> int:
        return self._timeout

    def set_timeout(self, seconds: Any) -> int:
        """Set the collection timeout.

        Raises:
            ConfigurationError: If seconds is not a positive integer. The
                current timeout is left unchanged.
        """
        self._timeout = validate_timeout(seconds)
        return self._timeout

    timeout = property(get_timeout, set_timeout)

    def query_is_in_flight(self) -> bool:
        return self._state is QueryState.IN_FLIGHT

    def query_ip(
        self,
        address: str,
        checks: Iterable[Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
    ) -> None:
        """Send DNSBL queries for an address without waiting for replies.

        Args:
            address: IPv4 or IPv6 address in textual form.
            checks: DNSBL entries, each a mapping with "domain" and optional
                "type" (normal, match or mask), "data" and "userdata".
            options: Optional {"early_exit": bool}.

        Raises:
            UsageError: If a query is already in flight, or an argument is
                missing or malformed.
            InvalidAddress: If the address is not IPv4 or IPv6.
            TransportError: If a query could not be sent.
        """
        if self._state is QueryState.IN_FLIGHT:
            raise UsageError("Cannot issue new query while one is in flight")
        if not address:
            raise UsageError("First argument (ip address) is required")
        if not checks:
            raise UsageError("Second argument (dnsbl list) is required")

        options = dict(options or {})
        unknown = sorted(set(options) - set(QUERY_OPTIONS))
        if unknown:
            raise UsageError(f"Unknown query options: {', '.join(unknown)}")
        self._early_exit = bool(options.get("early_exit", False))

        reversed_address = reverse_address(address)
        table = build_check_table(checks)

        self._pending = send_queries(self._resolver, reversed_address, table)
        self._address = address
        self._state = QueryState.IN_FLIGHT

        log_query_dispatched(address, sorted(table), self._early_exit)

    def get_answers(self) -> List[HitRecord]:
        """Wait for replies to the in-flight queries and return the hits.

        The client is no longer in flight when this returns, even if no
        hits were found or collection failed.

        Returns:
            List[HitRecord]: Satisfied checks, in no guaranteed order.

        Raises:
            UsageError: If no query is in flight.
        """
        if self._state is not QueryState.IN_FLIGHT:
            raise UsageError("Cannot call get_answers unless a query is in flight")

        started = time.monotonic()
        try:
            hits = collect_results(
                self._resolver, self._pending, self._timeout, self._early_exit
            )
            log_query_completed(
                self._address,
                hit_domains=[hit.domain for hit in hits],
                unanswered_domains=sorted(q.domain for q in self._pending.values()),
                duration_ms=int((time.monotonic() - started) * 1000),
            )
            return hits
        finally:
            self._teardown()

    def _teardown(self) -> None:
        for handle in self._pending:
            self._resolver.close(handle)
        self._pending = {}
        self._address = None
        self._state = QueryState.IDLE


def configure(options: Mapping[str, Any] | None = None, **kwargs: Any) -> DNSBLClient:
    """Create a client from an options mapping and/or keyword arguments.

    Raises:
        ConfigurationError: On unknown option keys or an invalid timeout.

    Example:
        >>> client = configure({"timeout": 5})
    """
    merged = dict(options or {})
    merged.update(kwargs)

    unknown = sorted(set(merged) - set(CLIENT_OPTIONS))
    if unknown:
        raise ConfigurationError(f"Unknown arguments to configure: {', '.join(unknown)}")

    return DNSBLClient(**merged)
