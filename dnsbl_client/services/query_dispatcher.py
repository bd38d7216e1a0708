"""Query dispatch: one background query per DNSBL domain."""

import logging
from typing import Any, Dict, List

from dnsbl_client.exceptions import TransportError
from dnsbl_client.models.check_entry import CheckEntry
from dnsbl_client.models.query_state import PendingQuery
from dnsbl_client.utils.ip_utils import build_dnsbl_query


logger = logging.getLogger(__name__)


def send_queries(
    resolver: Any,
    reversed_address: str,
    table: Dict[str, List[CheckEntry]],
) -> Dict[Any, PendingQuery]:
    """Send an A query for every domain in the check table.

    Args:
        resolver: Object providing send_query() and close().
        reversed_address: Output of reverse_address().
        table: Domain to checks mapping from build_check_table().

    Returns:
        Dict[Any, PendingQuery]: Query handle to the query it belongs to.

    Raises:
        TransportError: If any query cannot be sent. Handles opened before
            the failure are closed.
    """
    pending: Dict[Any, PendingQuery] = {}

    for domain, checks in table.items():
        qname = build_dnsbl_query(reversed_address, domain)
        try:
            handle = resolver.send_query(qname, "A")
        except TransportError:
            logger.error(f"Could not send query for {qname}, aborting cycle")
            for opened in pending:
                resolver.close(opened)
            raise
        pending[handle] = PendingQuery(domain=domain, qname=qname, checks=checks)

    return pending
