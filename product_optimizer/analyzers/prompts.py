"""
Prompt and narrative templates for insight generation.

INSIGHT_SYSTEM_PROMPT / INSIGHT_USER_PROMPT feed Claude. FALLBACK_TEMPLATE
is rendered locally when Claude cannot be reached and must only ever be
filled from the MarketSummary, so the same summary always renders the same
text.
"""

INSIGHT_SYSTEM_PROMPT = """You are an expert in e-commerce competitive analysis for the Amazon marketplace. Analyze the provided market data for products in the {category} category and generate detailed strategic insights.

<analysis_principles>
1. Every insight must reference specific numbers from the market data
2. Compare the target product against the competitor averages and price range
3. Recommendations must be concrete and actionable for a marketplace seller
4. Acknowledge that sales and market share figures are estimates
</analysis_principles>

<output_format>
Plain text with numbered sections: Market Position, Competitive Analysis,
Recommendations, Growth Opportunities, Action Items.
</output_format>"""

INSIGHT_USER_PROMPT = """Analyze this {category} market data and provide strategic insights.

<market_data>
{market_data}
</market_data>"""


FALLBACK_TEMPLATE = """Based on the analysis of your product in the {category} category:

1. Market Position:
   - Your product is positioned in the {segment} segment
   - Price point of ${price:.2f} is {price_position} the market range of ${range_min:.2f}-${range_max:.2f}
   - Current market share of {market_share} indicates {share_strength} presence

2. Competitive Analysis:
   - Rating of {rating:.1f}/5 compared to category average of {average_rating:.1f}
   - {review_count:,} customer reviews show {review_strength} market validation
   - Key differentiators: {keywords}

3. Recommendations:
   - Consider price optimization within ${range_min:.2f}-${range_max:.2f} range
   - Focus on keywords: {top_keywords}
   - Potential to increase market share through targeted marketing

4. Growth Opportunities:
   - Expand product visibility in {category} category
   - Leverage positive ratings for marketing
   - Focus on competitive advantages in {advantages}

5. Action Items:
   - Monitor competitor pricing strategies
   - Enhance product listings with top-performing keywords
   - Focus on maintaining high customer satisfaction"""
