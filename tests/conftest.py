"""pytest fixtures for testing."""

import socket
import threading

import dns.message
import dns.rcode
import dns.rrset
import pytest

from dnsbl_client.exceptions import TransportError


def build_reply(qname, addresses=(), rcode=dns.rcode.NOERROR, rdtype="A"):
    """Build a decoded dnspython reply for qname with the given records."""
    query = dns.message.make_query(qname, "A")
    reply = dns.message.make_response(query)
    reply.set_rcode(rcode)
    if addresses:
        reply.answer.append(dns.rrset.from_text(qname, 300, "IN", rdtype, *addresses))
    return reply


class FakeHandle:
    """Stand-in for a query handle."""

    def __init__(self, qname):
        self.qname = qname

    def __repr__(self):
        return f"FakeHandle({self.qname!r})"


class FakeResolver:
    """Scripted resolver.

    replies maps a query name to a reply message, None, or an exception to
    raise from read_reply(). Names without an entry never become readable.
    batches, if given, lists the names reported readable by each successive
    wait; waits past the end of the list time out.
    """

    def __init__(self, replies=None, batches=None, fail_on=None):
        self.replies = replies or {}
        self.batches = batches
        self.fail_on = fail_on
        self.sent = []
        self.closed = []
        self.waits = []

    def send_query(self, qname, rdtype="A"):
        if self.fail_on and qname.endswith(self.fail_on):
            raise TransportError(f"cannot send {qname}")
        self.sent.append((qname, rdtype))
        return FakeHandle(qname)

    def wait_readable(self, handles, timeout):
        self.waits.append(timeout)
        if self.batches is None:
            ready = set(self.replies)
        elif len(self.waits) <= len(self.batches):
            ready = set(self.batches[len(self.waits) - 1])
        else:
            ready = set()
        return [h for h in handles if h.qname in ready]

    def read_reply(self, handle):
        reply = self.replies[handle.qname]
        if isinstance(reply, Exception):
            raise reply
        return reply

    def close(self, handle):
        self.closed.append(handle)


@pytest.fixture
def make_reply():
    """Factory for decoded DNS replies."""
    return build_reply


@pytest.fixture
def fake_resolver():
    """Factory for scripted resolvers."""
    return FakeResolver


@pytest.fixture
def dns_responder():
    """In-process UDP DNS server on 127.0.0.1.

    Yields (port, zones) where zones maps a query name to (rcode, addresses).
    Queries for names not in zones are ignored.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(0.1)
    port = sock.getsockname()[1]
    zones = {}
    stop = threading.Event()

    def serve():
        while not stop.is_set():
            try:
                wire, peer = sock.recvfrom(65535)
            except TimeoutError:
                continue
            except OSError:
                break
            query = dns.message.from_wire(wire)
            qname = query.question[0].name.to_text(omit_final_dot=True)
            if qname not in zones:
                continue
            rcode, addresses = zones[qname]
            reply = dns.message.make_response(query)
            reply.set_rcode(rcode)
            if addresses:
                reply.answer.append(
                    dns.rrset.from_text(query.question[0].name, 60, "IN", "A", *addresses)
                )
            sock.sendto(reply.to_wire(), peer)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()

    yield port, zones

    stop.set()
    thread.join()
    sock.close()
