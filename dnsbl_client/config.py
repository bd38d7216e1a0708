"""Configuration module for the DNSBL client.

Validates client settings and loads command-line configuration from
environment variables and an optional YAML checks file.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List

import yaml

from dnsbl_client.exceptions import ConfigurationError


DEFAULT_TIMEOUT = 10

TRUE_VALUES = ("true", "1", "yes")


def validate_timeout(value: Any) -> int:
    """Validate a timeout given as an integer or a string of digits.

    Args:
        value: Candidate timeout in seconds.

    Returns:
        int: The timeout as an integer.

    Raises:
        ConfigurationError: If value is not a positive integer.

    Examples:
        >>> validate_timeout("5")
        5
    """
    if isinstance(value, bool):
        raise ConfigurationError("Timeout must be a positive integer")
    if isinstance(value, str) and value.isascii() and value.isdigit():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise ConfigurationError("Timeout must be a positive integer")
    return value


@dataclass
class Config:
    """Command-line configuration loaded from environment variables."""

    dnsbl_checks: List[Dict[str, Any]]
    timeout: int = DEFAULT_TIMEOUT
    nameservers: List[str] = field(default_factory=list)
    early_exit: bool = False
    verbose: bool = False

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables.

        DNSBL_ZONES adds a normal check per zone; DNSBL_CHECKS_FILE adds the
        checks listed in a YAML file. At least one of them must yield a check.

        Raises:
            ConfigurationError: If variables are missing or invalid.

        Returns:
            Config: Validated configuration instance.
        """
        dnsbl_checks: List[Dict[str, Any]] = []

        zones_str = os.getenv("DNSBL_ZONES", "")
        dnsbl_checks.extend(
            {"domain": zone.strip()} for zone in zones_str.split(",") if zone.strip()
        )

        checks_file = os.getenv("DNSBL_CHECKS_FILE")
        if checks_file:
            dnsbl_checks.extend(cls.load_checks_file(checks_file))

        if not dnsbl_checks:
            raise ConfigurationError(
                "DNSBL_ZONES or DNSBL_CHECKS_FILE must provide at least one DNSBL"
            )

        timeout = validate_timeout(os.getenv("DNSBL_TIMEOUT", str(DEFAULT_TIMEOUT)))

        nameservers_str = os.getenv("DNSBL_NAMESERVERS", "")
        nameservers = [ns.strip() for ns in nameservers_str.split(",") if ns.strip()]

        early_exit = os.getenv("EARLY_EXIT", "false").lower() in TRUE_VALUES
        verbose = os.getenv("VERBOSE", "false").lower() in TRUE_VALUES

        return cls(
            dnsbl_checks=dnsbl_checks,
            timeout=timeout,
            nameservers=nameservers,
            early_exit=early_exit,
            verbose=verbose,
        )

    @staticmethod
    def load_checks_file(path: str) -> List[Dict[str, Any]]:
        """Load DNSBL checks from a YAML file.

        The file holds a list of mappings with the keys domain, type, data
        and userdata:

            - domain: zen.spamhaus.org
            - domain: bl.example.org
              type: mask
              data: 0.0.0.4

        Raises:
            ConfigurationError: If the file cannot be read or is malformed.
        """
        try:
            with open(path) as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load DNSBL checks file {path}: {e}") from e

        if not isinstance(loaded, list):
            raise ConfigurationError(f"DNSBL checks file {path} must contain a list")

        for entry in loaded:
            if not isinstance(entry, dict) or not entry.get("domain"):
                raise ConfigurationError(
                    f"Every entry in {path} needs a domain, got {entry!r}"
                )

        return loaded
