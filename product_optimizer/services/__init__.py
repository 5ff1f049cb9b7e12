"""
Services package for the Product Optimizer.

Services:
    - SellingPartnerClient: Catalog lookups against the Selling Partner API
    - AmazonTokenProvider: Login-with-Amazon refresh-token grant
    - ProductResolver: Stage 1, identifier to ProductRecord
    - CompetitorResolver: Stage 2, category to CompetitorRecords
    - ClaudeService: Narrative generation with Anthropic Claude
"""

from product_optimizer.services.sp_api_client import AmazonTokenProvider, SellingPartnerClient
from product_optimizer.services.product_resolver import ProductResolver, product_from_payload
from product_optimizer.services.competitor_resolver import CompetitorResolver, competitor_from_item
from product_optimizer.services.llm_service import ClaudeService, TokenUsage

__all__ = [
    "AmazonTokenProvider",
    "SellingPartnerClient",
    "ProductResolver",
    "product_from_payload",
    "CompetitorResolver",
    "competitor_from_item",
    "ClaudeService",
    "TokenUsage",
]
