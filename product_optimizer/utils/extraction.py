"""
Field extraction and normalization helpers for Selling Partner payloads.

Catalog responses do not share one shape, so each field is read from a
prioritized list of paths. The first path that is present wins; when none
is, a fixed default is used.
"""

import hashlib
import random
import re
from typing import Any, Iterable, Optional, Sequence, Union

PathSegment = Union[str, int]
Path = Sequence[PathSegment]

DEFAULT_PRICE = 99.99
DEFAULT_RATING = 4.5
DEFAULT_REVIEW_COUNT = 250
DEFAULT_CATEGORY_ID = "electronics"
DEFAULT_CATEGORY_NAME = "Electronics"
DEFAULT_KEYWORDS = ("quality", "value", "popular", "reliable")

PRICE_PATHS: tuple[Path, ...] = (
    ("price", "amount"),
    ("offers", 0, "price", "amount"),
    ("attributes", "listPrice", "value"),
)
RATING_PATHS: tuple[Path, ...] = (
    ("rating",),
    ("customerReviews", "starRating"),
    ("attributes", "customerReviews", "starRating", "value"),
)
REVIEW_COUNT_PATHS: tuple[Path, ...] = (
    ("reviewCount",),
    ("customerReviews", "count"),
    ("attributes", "customerReviews", "count", "value"),
)
CATEGORY_ID_PATHS: tuple[Path, ...] = (
    ("browseNodeId",),
    ("browseNodes", 0, "id"),
    ("attributes", "browseClassification", "id"),
)
CATEGORY_NAME_PATHS: tuple[Path, ...] = (
    ("browseNodeName",),
    ("browseNodes", 0, "name"),
    ("attributes", "browseClassification", "displayName"),
)
TITLE_PATHS: tuple[Path, ...] = (
    ("item", "title"),
    ("itemName",),
    ("title",),
)
KEYWORD_PATHS: tuple[Path, ...] = (
    ("keywords",),
    ("attributes", "keywords", "value"),
)

STOP_WORDS = frozenset(
    {"the", "and", "for", "with", "this", "that", "from", "your", "have", "will"}
)
_TITLE_SPLIT = re.compile(r"[\s,\-]+")

_MISSING = object()


def dig(data: Any, path: Path) -> Any:
    """Follow a path of keys/indexes; return _MISSING if any hop is absent."""
    current = data
    for segment in path:
        if isinstance(segment, int):
            if not isinstance(current, (list, tuple)) or len(current) <= segment:
                return _MISSING
            current = current[segment]
        else:
            if not isinstance(current, dict) or segment not in current:
                return _MISSING
            current = current[segment]
        if current is None:
            return _MISSING
    return current


def first_present(data: Any, paths: Iterable[Path], default: Any = None) -> Any:
    """Value at the first path that is present and not empty."""
    for path in paths:
        value = dig(data, path)
        if value is not _MISSING and value != "" and value != []:
            return value
    return default


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _first_numeric(data: Any, paths: Iterable[Path], convert) -> Optional[Any]:
    for path in paths:
        value = dig(data, path)
        if value is _MISSING:
            continue
        converted = convert(value)
        if converted is not None:
            return converted
    return None


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def extract_price(data: dict) -> float:
    price = _first_numeric(data, PRICE_PATHS, _to_float)
    if price is None:
        return DEFAULT_PRICE
    return round(max(0.0, price), 2)


def extract_rating(data: dict) -> float:
    rating = _first_numeric(data, RATING_PATHS, _to_float)
    if rating is None:
        return DEFAULT_RATING
    return round(clamp(rating, 0.0, 5.0), 2)


def extract_review_count(data: dict) -> int:
    count = _first_numeric(data, REVIEW_COUNT_PATHS, _to_int)
    if count is None:
        return DEFAULT_REVIEW_COUNT
    return max(0, count)


def extract_category_id(data: dict, default: str = DEFAULT_CATEGORY_ID) -> str:
    return str(first_present(data, CATEGORY_ID_PATHS, default))


def extract_category_name(data: dict, default: str = DEFAULT_CATEGORY_NAME) -> str:
    return str(first_present(data, CATEGORY_NAME_PATHS, default))


def extract_title(data: dict, default: str) -> str:
    return str(first_present(data, TITLE_PATHS, default)).strip() or default


def keywords_from_title(title: Optional[str], limit: int = 4) -> list[str]:
    """Lowercased title words longer than three characters, minus stop words."""
    if not title:
        return list(DEFAULT_KEYWORDS[:3])
    words = [
        word for word in _TITLE_SPLIT.split(title.lower())
        if len(word) > 3 and word not in STOP_WORDS
    ]
    return words[:limit]


def extract_keywords(data: dict, limit: int = 4) -> list[str]:
    keywords = first_present(data, KEYWORD_PATHS)
    if isinstance(keywords, (list, tuple)):
        return [str(k) for k in keywords[:limit]]

    title = first_present(data, (("title",), ("itemName",), ("item", "title")))
    if title:
        return keywords_from_title(str(title), limit)

    return list(DEFAULT_KEYWORDS[:limit])


def extract_rankings(data: dict, category_name: str, estimator: "Estimator") -> dict[str, int]:
    """Sales ranks by ranking category, estimated when the payload has none."""
    sales_ranks = dig(data, ("salesRanks",))
    if isinstance(sales_ranks, list) and sales_ranks:
        rankings = {}
        for rank in sales_ranks:
            if not isinstance(rank, dict):
                continue
            name = rank.get("categoryName") or rank.get("title")
            value = _to_int(rank.get("rank"))
            if name and value is not None:
                rankings[str(name)] = value
        if rankings:
            return rankings

    value = _to_int(first_present(data, (("attributes", "salesRank", "value"),)))
    if value is not None:
        return {category_name: value}

    return {category_name: estimator.rank()}


def price_history_band(price: float) -> tuple[float, float]:
    """Synthesized +/-10% band used when the payload carries no history."""
    return round(price * 0.9, 2), round(price * 1.1, 2)


class Estimator:
    """
    Deterministic sales/share/rank estimates seeded by identifier.

    The same identifier always produces the same estimates, so repeated
    requests for one product agree with each other.
    """

    def __init__(self, identifier: str):
        seed = int.from_bytes(hashlib.sha256(identifier.encode("utf-8")).digest()[:8], "big")
        self._rng = random.Random(seed)

    def estimated_sales(self) -> int:
        return self._rng.randint(500, 10499)

    def market_share(self) -> float:
        return float(self._rng.randint(5, 24))

    def rank(self) -> int:
        return self._rng.randint(1, 200)
