"""
Static fallback catalog.

Built once at import time and exposed as read-only mappings of frozen
records. Product lookups are keyed by exact uppercase identifier with a
"default" entry; competitor lookups are keyed by category id with a
"default" bucket, each bucket holding exactly three records.
"""

from types import MappingProxyType
from typing import Mapping

from product_optimizer.models.schemas import CompetitorRecord, PriceHistory, ProductRecord

DEFAULT_KEY = "default"


def _product(identifier, title, price, rating, reviews, sales, share,
             category_id, category_name, keywords, history, ranks) -> ProductRecord:
    return ProductRecord(
        identifier=identifier,
        title=title,
        price=price,
        rating=rating,
        review_count=reviews,
        estimated_sales=sales,
        market_share=share,
        category_id=category_id,
        category_name=category_name,
        keywords=tuple(keywords),
        price_history=PriceHistory(min=history[0], max=history[1]),
        ranking_info=dict(ranks),
    )


def _competitor(identifier, title, price, rating, reviews, sales, share,
                category_id, category_name, keywords, history, ranks) -> CompetitorRecord:
    return CompetitorRecord(
        identifier=identifier,
        title=title,
        price=price,
        rating=rating,
        review_count=reviews,
        estimated_sales=sales,
        market_share=share,
        category_id=category_id,
        category_name=category_name,
        keywords=tuple(keywords),
        price_history=PriceHistory(min=history[0], max=history[1]),
        ranking_info=dict(ranks),
    )


PRODUCT_TABLE: Mapping[str, ProductRecord] = MappingProxyType({
    "B01DFKC2SO": _product(
        "B01DFKC2SO", "Premium Wireless Headphones", 199.99, 4.7, 3250, 15000, 22,
        "electronics", "Electronics",
        ["noise-cancelling", "wireless", "premium", "long-battery"],
        (179.99, 219.99), {"Electronics": 28, "Headphones": 5},
    ),
    "B07X2LSDM3": _product(
        "B07X2LSDM3", "Smart Coffee Maker", 129.99, 4.5, 1820, 9500, 18,
        "home_kitchen", "Home & Kitchen",
        ["smart-home", "programmable", "sleek-design", "energy-efficient"],
        (119.99, 149.99), {"Home & Kitchen": 45, "Coffee Makers": 8},
    ),
    "B083TF7YD9": _product(
        "B083TF7YD9", "Ultralight Camping Tent", 249.99, 4.8, 950, 4500, 15,
        "sports_outdoors", "Sports & Outdoors",
        ["lightweight", "waterproof", "easy-setup", "durable"],
        (229.99, 269.99), {"Sports & Outdoors": 72, "Camping Tents": 3},
    ),
    # Identifier is replaced with the requested one on lookup
    DEFAULT_KEY: _product(
        "DEFAULT000", "Sample Product", 99.99, 4.5, 250, 1200, 15,
        "electronics", "Electronics",
        ["premium", "reliable", "fast", "innovative"],
        (89.99, 109.99), {"Electronics": 150, "Tech Gadgets": 45},
    ),
})


COMPETITOR_TABLE: Mapping[str, tuple[CompetitorRecord, ...]] = MappingProxyType({
    "electronics": (
        _competitor(
            "B08X7JL3QL", "Budget Wireless Earbuds", 79.99, 4.2, 2100, 12000, 8,
            "electronics", "Electronics",
            ["budget-friendly", "wireless", "waterproof"],
            (69.99, 89.99), {"Electronics": 45, "Headphones": 12},
        ),
        _competitor(
            "B07NDFT2NB", "Premium Over-Ear Headphones", 249.99, 4.8, 3800, 18000, 25,
            "electronics", "Electronics",
            ["studio-quality", "premium", "noise-cancelling"],
            (229.99, 279.99), {"Electronics": 22, "Headphones": 2},
        ),
        _competitor(
            "B09KL7SV1M", "Mid-Range Wireless Headset", 149.99, 4.6, 1950, 9800, 15,
            "electronics", "Electronics",
            ["comfortable", "long-battery", "microphone"],
            (129.99, 159.99), {"Electronics": 38, "Headphones": 8},
        ),
    ),
    "home_kitchen": (
        _competitor(
            "B082VRM1VL", "Basic Coffee Maker", 59.99, 4.3, 1250, 7500, 12,
            "home_kitchen", "Home & Kitchen",
            ["simple", "reliable", "compact"],
            (49.99, 69.99), {"Home & Kitchen": 95, "Coffee Makers": 15},
        ),
        _competitor(
            "B07PCMTW4Y", "Premium Espresso Machine", 299.99, 4.7, 950, 4200, 8,
            "home_kitchen", "Home & Kitchen",
            ["espresso", "premium", "italian-design"],
            (279.99, 349.99), {"Home & Kitchen": 120, "Coffee Makers": 5},
        ),
        _competitor(
            "B09STVN7JG", "Smart Coffee System", 199.99, 4.6, 850, 5100, 10,
            "home_kitchen", "Home & Kitchen",
            ["all-in-one", "app-controlled", "customizable"],
            (189.99, 229.99), {"Home & Kitchen": 75, "Coffee Makers": 3},
        ),
    ),
    "sports_outdoors": (
        _competitor(
            "B07XTLNLCL", "Budget Camping Tent", 89.99, 4.1, 780, 3800, 12,
            "sports_outdoors", "Sports & Outdoors",
            ["affordable", "basic", "starter"],
            (79.99, 99.99), {"Sports & Outdoors": 150, "Camping Tents": 18},
        ),
        _competitor(
            "B08LTRD3VJ", "Family Size Camping Tent", 329.99, 4.5, 620, 2500, 8,
            "sports_outdoors", "Sports & Outdoors",
            ["family-size", "weatherproof", "spacious"],
            (299.99, 349.99), {"Sports & Outdoors": 95, "Camping Tents": 5},
        ),
        _competitor(
            "B09HGYSVTS", "Premium Backpacking Tent", 279.99, 4.9, 450, 2200, 7,
            "sports_outdoors", "Sports & Outdoors",
            ["ultralight", "professional", "expedition"],
            (259.99, 299.99), {"Sports & Outdoors": 110, "Camping Tents": 4},
        ),
    ),
    DEFAULT_KEY: (
        _competitor(
            "B0123COMP1", "Competitor Product 1", 89.99, 4.3, 180, 800, 12,
            "electronics", "Electronics",
            ["budget-friendly", "reliable", "basic"],
            (79.99, 99.99), {"Electronics": 180, "Tech Gadgets": 55},
        ),
        _competitor(
            "B0123COMP2", "Competitor Product 2", 109.99, 4.7, 320, 1500, 18,
            "electronics", "Electronics",
            ["premium", "advanced", "professional"],
            (99.99, 119.99), {"Electronics": 120, "Tech Gadgets": 35},
        ),
        _competitor(
            "B0123COMP3", "Competitor Product 3", 94.99, 4.4, 210, 950, 14,
            "electronics", "Electronics",
            ["mid-range", "quality", "value"],
            (84.99, 104.99), {"Electronics": 165, "Tech Gadgets": 50},
        ),
    ),
})


def lookup_product(identifier: str, table: Mapping[str, ProductRecord] = PRODUCT_TABLE) -> ProductRecord:
    """Exact-match lookup; unknown identifiers get the default record."""
    record = table.get(identifier)
    if record is not None:
        return record
    return table[DEFAULT_KEY].model_copy(update={"identifier": identifier})


def lookup_competitors(
    category_id: str,
    table: Mapping[str, tuple[CompetitorRecord, ...]] = COMPETITOR_TABLE,
) -> tuple[CompetitorRecord, ...]:
    """Bucket for a category id, or the default bucket."""
    return table.get(category_id, table[DEFAULT_KEY])
