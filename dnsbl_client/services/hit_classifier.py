"""Hit classification for DNSBL replies."""

import logging
from typing import Callable, Dict, Iterable, Iterator, List

import dns.rdatatype
import dns.rrset

from dnsbl_client.models.check_entry import CheckEntry, CheckType
from dnsbl_client.utils.ip_utils import dotted_quad_to_int, parse_mask


logger = logging.getLogger(__name__)


def _normal(entry: CheckEntry, address: str) -> bool:
    return True


def _match(entry: CheckEntry, address: str) -> bool:
    return address == entry.data


def _mask(entry: CheckEntry, address: str) -> bool:
    try:
        mask = parse_mask(entry.data)
        got = dotted_quad_to_int(address)
    except ValueError as e:
        logger.warning(f"Skipping mask check on {entry.domain}: {e}")
        return False
    return (got & mask) != 0


EVALUATORS: Dict[CheckType, Callable[[CheckEntry, str], bool]] = {
    CheckType.NORMAL: _normal,
    CheckType.MATCH: _match,
    CheckType.MASK: _mask,
}


def a_record_addresses(answer: Iterable[dns.rrset.RRset]) -> Iterator[str]:
    """Yield A record addresses from an answer section, in delivered order."""
    for rrset in answer:
        if rrset.rdtype != dns.rdatatype.A:
            continue
        for rdata in rrset:
            yield rdata.address


def classify_reply(
    answer: Iterable[dns.rrset.RRset], checks: List[CheckEntry]
) -> List[CheckEntry]:
    """Evaluate one domain's reply against its checks.

    Each A record is tried against every check that has not been hit yet, so
    a check is satisfied by the first qualifying record.

    Args:
        answer: Answer section of the decoded reply.
        checks: The domain's checks, in caller order.

    Returns:
        List[CheckEntry]: Checks that became hits, in the order they were hit.
    """
    hits: List[CheckEntry] = []

    for address in a_record_addresses(answer):
        for entry in checks:
            if entry.hit:
                continue
            if EVALUATORS[entry.type](entry, address):
                entry.mark_hit(address)
                hits.append(entry)

    return hits
