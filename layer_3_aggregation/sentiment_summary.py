"""
Corpus-wide sentiment counts, independent of themes
"""
from typing import Any, Dict, List, Sequence, Tuple

from models.analysis import SentimentDistribution
from models.comment import Comment
from utils.logger import get_logger
from utils.sentiment import bucket_from_comparative, score_sentiment

logger = get_logger(__name__)

DETAIL_LIMIT = 20
DETAIL_TEXT_LENGTH = 100


def summarize_overall_sentiment(
    comments: Sequence[Comment],
) -> Tuple[SentimentDistribution, List[Dict[str, Any]]]:
    """
    Bucket every comment by its raw comparative score

    Unlike theme sentiment, no trigger phrases are applied here.

    Args:
        comments: Full corpus

    Returns:
        Tuple of (overall counts, details for the first 20 comments)
    """
    counts = {"positive": 0, "negative": 0, "neutral": 0}
    details = []

    for comment in comments:
        score = score_sentiment(comment.text)
        label = bucket_from_comparative(score.comparative)
        counts[label] += 1
        if len(details) < DETAIL_LIMIT:
            details.append({
                "text": comment.text[:DETAIL_TEXT_LENGTH] + "...",
                "score": score.score,
                "comparative": round(score.comparative, 2),
                "classification": label,
            })

    logger.info(
        f"Overall sentiment: {counts['positive']} positive, "
        f"{counts['negative']} negative, {counts['neutral']} neutral"
    )
    return SentimentDistribution(**counts), details
