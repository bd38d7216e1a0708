"""Structured JSON logging."""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger


# Run ID for correlation across log entries of one process
RUN_ID = str(uuid.uuid4())


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter that adds run_id and standardized fields."""

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: The log record to modify.
            record: The original logging.LogRecord.
            message_dict: Additional fields from the logging call.
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = (
            datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )
        log_record["run_id"] = RUN_ID
        log_record["level"] = record.levelname
        log_record["logger"] = record.name


def setup_logging(verbose: bool = False) -> logging.Logger:
    """Configure structured JSON logging on stderr.

    Args:
        verbose: Log at DEBUG instead of INFO.

    Returns:
        logging.Logger: Configured root logger.
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # stdout carries the hit report
    json_handler = logging.StreamHandler(sys.stderr)
    json_handler.setFormatter(CustomJsonFormatter("%(message)s"))
    logger.addHandler(json_handler)

    return logger


def log_query_dispatched(address: str, domains: list[str], early_exit: bool) -> None:
    """Log the start of a query cycle.

    Args:
        address: Address being checked.
        domains: Distinct DNSBL domains queried.
        early_exit: Whether the cycle stops at the first hit.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "DNSBL queries sent",
        extra={
            "ip": address,
            "domains": domains,
            "query_count": len(domains),
            "early_exit": early_exit,
        },
    )


def log_query_completed(
    address: str | None,
    hit_domains: list[str],
    unanswered_domains: list[str],
    duration_ms: int,
) -> None:
    """Log the outcome of a query cycle.

    Args:
        address: Address that was checked.
        hit_domains: Domain of each hit, one entry per hit.
        unanswered_domains: Domains whose reply never arrived.
        duration_ms: Time spent collecting replies.
    """
    logger = logging.getLogger(__name__)
    logger.info(
        "DNSBL check completed",
        extra={
            "ip": address,
            "listed": bool(hit_domains),
            "hit_domains": hit_domains,
            "unanswered_domains": unanswered_domains,
            "duration_ms": duration_ms,
        },
    )
