"""DNSBL check models.

A check is one caller-supplied rule evaluated against the replies from one
DNSBL domain. Several checks may share a domain; they are grouped so that
each domain is queried only once per cycle.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List

from dnsbl_client.exceptions import UsageError


class CheckType(Enum):
    """How a DNSBL reply is judged to be a hit."""

    NORMAL = "normal"  # Any A record is a hit
    MATCH = "match"  # An A record must equal data exactly
    MASK = "mask"  # An A record ANDed with data must be non-zero

    @classmethod
    def parse(cls, value: "CheckType | str | None") -> "CheckType":
        """Resolve a caller-supplied type, defaulting to NORMAL.

        Raises:
            UsageError: If the value names no known type.
        """
        if value is None or value == "":
            return cls.NORMAL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UsageError(f"Unknown DNSBL type: {value!r}") from None


@dataclass
class CheckEntry:
    """One check registered against a DNSBL domain for the current cycle.

    Attributes:
        domain: DNSBL zone domain to query.
        type: Hit evaluation rule.
        data: Match address or mask, meaning depends on type.
        userdata: Opaque caller value, passed back unchanged.
        hit: Whether the check has been satisfied in this cycle.
        actual_hit: A record address that satisfied the check.
    """

    domain: str
    type: CheckType = CheckType.NORMAL
    data: Any = None
    userdata: Any = None
    hit: bool = False
    actual_hit: str | None = None

    def mark_hit(self, address: str) -> None:
        if self.hit:
            raise UsageError(f"Check on {self.domain} has already been hit")
        self.hit = True
        self.actual_hit = address


@dataclass(frozen=True)
class HitRecord:
    """A satisfied check as returned to the caller."""

    domain: str
    type: CheckType
    data: Any
    userdata: Any
    actual_hit: str

    @classmethod
    def from_entry(cls, entry: CheckEntry) -> "HitRecord":
        return cls(
            domain=entry.domain,
            type=entry.type,
            data=entry.data,
            userdata=entry.userdata,
            actual_hit=entry.actual_hit,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dictionary.

        Returns:
            Dict[str, Any]: domain, type (as its name), data, userdata, actual_hit.
        """
        return {
            "domain": self.domain,
            "type": self.type.value,
            "data": self.data,
            "userdata": self.userdata,
            "actual_hit": self.actual_hit,
        }


def build_check_table(
    checks: Iterable[Mapping[str, Any]],
) -> Dict[str, List[CheckEntry]]:
    """Group check entries by domain.

    Each entry becomes its own CheckEntry, even when an identical
    one was already supplied. Order of checks within a domain is preserved.

    Args:
        checks: Mappings with a required "domain" and optional "type",
            "data" and "userdata" keys.

    Returns:
        Dict[str, List[CheckEntry]]: Domain to its checks, all unhit.

    Raises:
        UsageError: If an entry has no domain or an unknown type.
    """
    table: Dict[str, List[CheckEntry]] = {}

    for check in checks:
        domain = check.get("domain")
        if not domain:
            raise UsageError(f"DNSBL entry has no domain: {dict(check)!r}")

        table.setdefault(domain, []).append(
            CheckEntry(
                domain=domain,
                type=CheckType.parse(check.get("type")),
                data=check.get("data"),
                userdata=check.get("userdata"),
            )
        )

    return table
