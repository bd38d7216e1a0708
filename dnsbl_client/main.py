"""Main entry point: check one address against the configured DNSBLs.

Usage: python -m dnsbl_client.main <ip-address>

Exit codes: 0 not listed, 2 listed, 1 fatal error.
"""

import json
import logging
import sys

from dnsbl_client.config import Config
from dnsbl_client.exceptions import DNSBLError
from dnsbl_client.services.dnsbl_client import DNSBLClient
from dnsbl_client.services.logger import setup_logging
from dnsbl_client.services.resolver import BackgroundResolver


logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_ERROR = 1
EXIT_LISTED = 2


def build_client(config: Config) -> DNSBLClient:
    """Create a client for the configured timeout and nameservers."""
    resolver = BackgroundResolver(nameservers=config.nameservers or None)
    return DNSBLClient(timeout=config.timeout, resolver=resolver)


def main(argv: list[str] | None = None) -> int:
    """Main execution function.

    Returns:
        int: Exit code.
    """
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: dnsbl-client <ip-address>", file=sys.stderr)
        return EXIT_ERROR
    address = args[0]

    try:
        config = Config.from_env()
    except DNSBLError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return EXIT_ERROR

    setup_logging(verbose=config.verbose)
    logger.info(f"Checking {address} against {len(config.dnsbl_checks)} DNSBL checks")

    try:
        client = build_client(config)
        client.query_ip(
            address, config.dnsbl_checks, {"early_exit": config.early_exit}
        )
        hits = client.get_answers()
    except DNSBLError as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return EXIT_ERROR

    report = {"ip": address, "hits": [hit.to_dict() for hit in hits]}
    print(json.dumps(report, indent=2, sort_keys=True, default=str))

    return EXIT_LISTED if hits else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
