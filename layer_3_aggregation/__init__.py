"""
Layer 3: Aggregation (theme groups, business impact ranking, overall sentiment).
"""
from .aggregator import ThemeAggregator, business_impact
from .sentiment_summary import summarize_overall_sentiment

__all__ = [
    'ThemeAggregator',
    'business_impact',
    'summarize_overall_sentiment',
]
