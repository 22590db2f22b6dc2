"""
Search query types and query-string parsing.

The façade receives conditions in the upstream query-string grammar:

    conditions=name=admin|viewer,tier=user,label~team
    orderBy=create_time
    reverse=true
    paging=limit=10,page=2

`k=v` items are exact predicates, `k~v` items are fuzzy predicates.
"""

from dataclasses import dataclass, field

from kubesearch.resources.constants import ORDER_BY_NAME, ORDER_BY_VALUES

DEFAULT_LIMIT = 10
DEFAULT_PAGE = 1

_TRUTHY = frozenset({"true", "1", "yes"})


@dataclass(frozen=True)
class Conditions:
    """Exact and fuzzy predicate maps, implicitly conjoined."""

    match: dict[str, str] = field(default_factory=dict)
    fuzzy: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.match and not self.fuzzy


@dataclass(frozen=True)
class Paging:
    """A 1-based page window over an ordered result."""

    limit: int = DEFAULT_LIMIT
    page: int = DEFAULT_PAGE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def apply(self, items: list) -> list:
        return items[self.offset : self.offset + self.limit]


@dataclass(frozen=True)
class Query:
    """A parsed search request against the role snapshot."""

    match: dict[str, str] = field(default_factory=dict)
    fuzzy: dict[str, str] = field(default_factory=dict)
    order_by: str = ORDER_BY_NAME
    reverse: bool = False

    def __post_init__(self) -> None:
        # Unknown ordering keys fall back to name ordering
        if self.order_by not in ORDER_BY_VALUES:
            object.__setattr__(self, "order_by", ORDER_BY_NAME)

    @property
    def conditions(self) -> Conditions:
        return Conditions(match=self.match, fuzzy=self.fuzzy)

    @classmethod
    def from_params(
        cls,
        conditions: str | None = None,
        order_by: str | None = None,
        reverse: str | bool | None = None,
    ) -> "Query":
        """Build a Query from raw query-string values."""
        parsed = parse_conditions(conditions)
        return cls(
            match=parsed.match,
            fuzzy=parsed.fuzzy,
            order_by=order_by or ORDER_BY_NAME,
            reverse=parse_reverse(reverse),
        )


def parse_conditions(raw: str | None) -> Conditions:
    """
    Parse a comma-separated conditions string.

    The first operator character in an item decides its kind: `~` before `=`
    makes a fuzzy predicate, otherwise `=` makes an exact one. Items without
    an operator or with an empty key are skipped. Keys and values are taken
    literally (the query string is already decoded) and later duplicates
    override earlier ones.
    """
    match: dict[str, str] = {}
    fuzzy: dict[str, str] = {}
    if not raw:
        return Conditions(match=match, fuzzy=fuzzy)

    for item in raw.split(","):
        eq = item.find("=")
        tilde = item.find("~")
        if tilde != -1 and (eq == -1 or tilde < eq):
            key, value, target = item[:tilde], item[tilde + 1 :], fuzzy
        elif eq != -1:
            key, value, target = item[:eq], item[eq + 1 :], match
        else:
            continue

        key = key.strip()
        if not key:
            continue
        target[key] = value

    return Conditions(match=match, fuzzy=fuzzy)


def parse_reverse(raw: str | bool | None) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY


def _parse_positive(raw: str, default: int) -> int:
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def parse_paging(raw: str | None) -> Paging | None:
    """Parse `limit=N,page=M`. Returns None when no paging was requested."""
    if not raw:
        return None

    limit, page = DEFAULT_LIMIT, DEFAULT_PAGE
    for item in raw.split(","):
        key, sep, value = item.partition("=")
        if not sep:
            continue
        match key.strip():
            case "limit":
                limit = _parse_positive(value.strip(), DEFAULT_LIMIT)
            case "page":
                page = _parse_positive(value.strip(), DEFAULT_PAGE)

    return Paging(limit=limit, page=page)
