"""Non-blocking DNS resolver built on dnspython.

Provides the three primitives the DNSBL client needs: send a query without
waiting for its reply, wait for any of several queries to become readable,
and read a single decoded reply off a query handle.
"""

import logging
import selectors
import socket
import time
from dataclasses import dataclass
from typing import Iterable, List, Sequence

import dns.exception
import dns.inet
import dns.message
import dns.query
import dns.rdatatype
import dns.resolver

from dnsbl_client.exceptions import ConfigurationError, ReadError, TransportError


logger = logging.getLogger(__name__)

# Upper bound for reading a datagram off a socket already reported readable
READ_TIMEOUT = 1.0


@dataclass(eq=False)
class QueryHandle:
    """One query in flight on its own UDP socket.

    Attributes:
        qname: Name that was queried.
        query: The query message, used to match the reply.
        sock: Non-blocking UDP socket the query was sent on.
        destination: Low-level address tuple of the nameserver.
    """

    qname: str
    query: dns.message.Message
    sock: socket.socket
    destination: tuple

    def fileno(self) -> int:
        return self.sock.fileno()


class BackgroundResolver:
    """Sends DNS queries in the background and collects replies on demand.

    Example:
        >>> resolver = BackgroundResolver(nameservers=["127.0.0.1"])
        >>> handle = resolver.send_query("2.0.0.127.zen.spamhaus.org")
        >>> if resolver.wait_readable([handle], timeout=5):
        ...     reply = resolver.read_reply(handle)
    """

    def __init__(
        self,
        nameservers: Sequence[str] | None = None,
        port: int | None = None,
        resolver: dns.resolver.Resolver | None = None,
    ):
        """Initialize from explicit nameservers or the system configuration.

        Args:
            nameservers: Nameserver addresses; the first one is queried.
            port: Nameserver port (default: the system resolver's, usually 53).
            resolver: dnspython resolver to take the configuration from.

        Raises:
            ConfigurationError: If the system resolver configuration is unusable.
        """
        if nameservers is None:
            try:
                system = resolver or dns.resolver.Resolver()
            except dns.exception.DNSException as e:
                raise ConfigurationError(
                    f"Cannot read system resolver configuration: {e}"
                ) from e
            nameservers = [getattr(ns, "address", ns) for ns in system.nameservers]
            if port is None:
                port = system.port

        self.nameservers: List[str] = list(nameservers)
        self.port: int = port if port is not None else 53
        self.errorstring: str = ""

    def send_query(self, qname: str, rdtype: str = "A") -> QueryHandle:
        """Send a query and return immediately.

        Raises:
            TransportError: If the query cannot be built or sent.
        """
        if not self.nameservers:
            self.errorstring = "no nameservers configured"
            raise TransportError(self.errorstring)

        nameserver = self.nameservers[0]
        sock = None
        try:
            query = dns.message.make_query(qname, dns.rdatatype.from_text(rdtype))
            af = dns.inet.af_for_address(nameserver)
            destination = dns.inet.low_level_address_tuple((nameserver, self.port), af)
            sock = socket.socket(af, socket.SOCK_DGRAM)
            sock.setblocking(False)
            dns.query.send_udp(sock, query, destination)
        except (dns.exception.DNSException, OSError, ValueError) as e:
            if sock is not None:
                sock.close()
            self.errorstring = f"query for {qname} to {nameserver}: {e}"
            raise TransportError(self.errorstring) from e

        logger.debug(f"Sent {rdtype} query for {qname} to {nameserver}:{self.port}")
        return QueryHandle(qname=qname, query=query, sock=sock, destination=destination)

    def read_reply(self, handle: QueryHandle) -> dns.message.Message:
        """Read and decode the reply waiting on a handle.

        Raises:
            ReadError: If nothing valid could be read.
        """
        try:
            reply, _ = dns.query.receive_udp(
                handle.sock,
                handle.destination,
                expiration=time.time() + READ_TIMEOUT,
            )
        except (dns.exception.DNSException, OSError, ValueError) as e:
            raise ReadError(f"reply for {handle.qname}: {e}") from e

        if not handle.query.is_response(reply):
            raise ReadError(f"reply for {handle.qname} does not match the query")

        return reply

    def wait_readable(
        self, handles: Iterable[QueryHandle], timeout: float
    ) -> List[QueryHandle]:
        """Wait until at least one handle has a reply to read.

        Returns:
            List[QueryHandle]: Readable handles, empty if the timeout expired.
        """
        with selectors.DefaultSelector() as selector:
            for handle in handles:
                selector.register(handle, selectors.EVENT_READ)
            events = selector.select(timeout)
        return [key.fileobj for key, _ in events]

    def close(self, handle: QueryHandle) -> None:
        handle.sock.close()
