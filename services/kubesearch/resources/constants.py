"""Reserved query keys shared between the search engine and its façade.

Any match key not listed here is a label key; any fuzzy key not listed here
targets both labels and annotations under that key.
"""

# Match and fuzzy predicate keys
NAME = "name"
KEYWORD = "keyword"
OWNER_KIND = "owner_kind"
OWNER_NAME = "owner_name"
USER_FACING = "userfacing"
LABEL = "label"
ANNOTATION = "annotation"

MATCH_KEYS: frozenset[str] = frozenset({NAME, KEYWORD, OWNER_KIND, OWNER_NAME, USER_FACING})

# Ordering keys
ORDER_BY_CREATE_TIME = "create_time"
ORDER_BY_NAME = "name"

ORDER_BY_VALUES: frozenset[str] = frozenset({ORDER_BY_CREATE_TIME, ORDER_BY_NAME})


def is_reserved_match_key(key: str) -> bool:
    """Check if a match key has engine-defined semantics rather than being a label key."""
    return key in MATCH_KEYS
