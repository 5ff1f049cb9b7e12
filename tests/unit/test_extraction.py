import pytest

from product_optimizer.utils.extraction import (
    DEFAULT_KEYWORDS,
    Estimator,
    dig,
    extract_category_id,
    extract_category_name,
    extract_keywords,
    extract_price,
    extract_rankings,
    extract_rating,
    extract_review_count,
    extract_title,
    first_present,
    keywords_from_title,
    price_history_band,
)


def test_dig_handles_missing_hops():
    data = {"offers": [{"price": {"amount": 10}}]}
    assert dig(data, ("offers", 0, "price", "amount")) == 10
    assert first_present(data, [("offers", 1, "price"), ("nope",)], "fallback") == "fallback"


def test_price_paths_in_priority_order():
    assert extract_price({"price": {"amount": 12.5}, "offers": [{"price": {"amount": 99}}]}) == 12.5
    assert extract_price({"offers": [{"price": {"amount": "45"}}]}) == 45.0
    assert extract_price({"attributes": {"listPrice": {"value": 7.5}}}) == 7.5
    assert extract_price({}) == 99.99


def test_price_skips_non_numeric_values():
    assert extract_price({"price": {"amount": "n/a"}, "offers": [{"price": {"amount": 30}}]}) == 30.0
    assert extract_price({"price": {"amount": -5}}) == 0.0


def test_rating_defaults_and_clamps():
    assert extract_rating({}) == 4.5
    assert extract_rating({"rating": 7}) == 5.0
    assert extract_rating({"customerReviews": {"starRating": "3.9"}}) == 3.9


def test_review_count():
    assert extract_review_count({}) == 250
    assert extract_review_count({"customerReviews": {"count": "1,200"}}) == 250
    assert extract_review_count({"reviewCount": 42}) == 42


def test_category_defaults():
    assert extract_category_id({}) == "electronics"
    assert extract_category_name({}) == "Electronics"
    assert extract_category_id({"browseNodes": [{"id": 172282, "name": "Tech"}]}) == "172282"
    assert extract_category_name({"browseNodes": [{"id": 172282, "name": "Tech"}]}) == "Tech"


def test_title_paths():
    assert extract_title({"itemName": "Name", "title": "Other"}, default="x") == "Name"
    assert extract_title({"title": "   "}, default="Product B0") == "Product B0"
    assert extract_title({}, default="Product B0") == "Product B0"


def test_keywords_from_title():
    assert keywords_from_title("The Best Wireless Headphones for Travel") == [
        "best", "wireless", "headphones", "travel",
    ]
    assert keywords_from_title("") == list(DEFAULT_KEYWORDS[:3])
    assert keywords_from_title("a an it") == []


def test_extract_keywords_prefers_explicit_list():
    assert extract_keywords({"keywords": ["a", "b", "c", "d", "e"]}) == ["a", "b", "c", "d"]
    assert extract_keywords({"title": "Rugged Outdoor Speaker"}) == ["rugged", "outdoor", "speaker"]
    assert extract_keywords({}) == list(DEFAULT_KEYWORDS)


def test_rankings_from_payload_or_estimate():
    estimator = Estimator("B01DFKC2SO")
    data = {"salesRanks": [{"categoryName": "Electronics", "rank": "12"}, {"title": "Audio", "rank": 3}]}
    assert extract_rankings(data, "Electronics", estimator) == {"Electronics": 12, "Audio": 3}

    estimated = extract_rankings({}, "Electronics", Estimator("B01DFKC2SO"))
    assert list(estimated) == ["Electronics"]
    assert 1 <= estimated["Electronics"] <= 200


def test_price_history_band():
    assert price_history_band(100.0) == (90.0, 110.0)


def test_estimator_is_deterministic_per_identifier():
    first = Estimator("B01DFKC2SO")
    second = Estimator("B01DFKC2SO")
    values = (first.estimated_sales(), first.market_share(), first.rank())

    assert values == (second.estimated_sales(), second.market_share(), second.rank())
    assert 500 <= values[0] <= 10499
    assert 5 <= values[1] <= 24


@pytest.mark.parametrize("identifier", ["B000000001", "B000000002", "B000000003"])
def test_estimator_ranges(identifier):
    estimator = Estimator(identifier)
    for _ in range(20):
        assert 500 <= estimator.estimated_sales() <= 10499
        assert 5 <= estimator.market_share() <= 24
        assert 1 <= estimator.rank() <= 200
