"""Query cycle state models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from dnsbl_client.models.check_entry import CheckEntry


class QueryState(Enum):
    """Client lifecycle between query_ip() and get_answers()."""

    IDLE = "IDLE"
    IN_FLIGHT = "IN_FLIGHT"


@dataclass
class PendingQuery:
    """An outstanding DNSBL query and the checks waiting on its reply.

    Attributes:
        domain: DNSBL zone domain the query was sent for.
        qname: Full query name (reversed address + domain).
        checks: Checks registered for this domain, in caller order.
    """

    domain: str
    qname: str
    checks: List[CheckEntry] = field(default_factory=list)
