"""Reply collection for in-flight DNSBL queries."""

import logging
import time
from typing import Any, Callable, Dict, List

import dns.rcode

from dnsbl_client.exceptions import ReadError
from dnsbl_client.models.check_entry import HitRecord
from dnsbl_client.models.query_state import PendingQuery
from dnsbl_client.services.hit_classifier import classify_reply


logger = logging.getLogger(__name__)

# Negative replies: the address is not listed (or the list is unusable)
NEGATIVE_RCODES = (dns.rcode.SERVFAIL, dns.rcode.NXDOMAIN)

MIN_WAIT = 1


def collect_results(
    resolver: Any,
    pending: Dict[Any, PendingQuery],
    timeout: int,
    early_exit: bool = False,
    clock: Callable[[], float] = time.monotonic,
) -> List[HitRecord]:
    """Wait for replies until all arrived, the deadline passed, or early exit.

    Each wait is bounded by the time left until the deadline, but never less
    than MIN_WAIT seconds. A wait that returns nothing ends collection at once
    with whatever has been gathered. Every handle reported readable is removed
    from ``pending`` and closed, whether or not its reply was usable; handles
    still in ``pending`` on return were never answered.

    Args:
        resolver: Object providing wait_readable(), read_reply() and close().
        pending: Query handle to PendingQuery; modified in place.
        timeout: Collection budget in seconds.
        early_exit: Return as soon as a batch of replies produced a hit.
        clock: Monotonic time source.

    Returns:
        List[HitRecord]: Hits gathered, possibly empty.
    """
    hits: List[HitRecord] = []
    deadline = clock() + timeout

    while clock() <= deadline and pending:
        remaining = max(deadline - clock(), MIN_WAIT)
        ready = resolver.wait_readable(list(pending), remaining)

        if not ready:
            logger.debug(
                f"No reply within {remaining:.1f}s, {len(pending)} queries unanswered"
            )
            return hits

        for handle in ready:
            query = pending.pop(handle)
            try:
                reply = resolver.read_reply(handle)
            except ReadError as e:
                logger.debug(f"Unreadable reply from {query.domain}: {e}")
                continue
            finally:
                resolver.close(handle)

            if reply is None:
                logger.debug(f"Empty reply from {query.domain}")
                continue

            rcode = reply.rcode()
            if rcode in NEGATIVE_RCODES:
                logger.debug(f"{query.qname}: {dns.rcode.to_text(rcode)}")
                continue

            for entry in classify_reply(reply.answer, query.checks):
                hits.append(HitRecord.from_entry(entry))

        if early_exit and hits:
            logger.debug(f"Early exit with {len(pending)} queries still outstanding")
            return hits

    return hits
