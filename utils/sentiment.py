"""
Lexical sentiment scoring for individual comments (VADER).
"""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

POSITIVE = "positive"
NEGATIVE = "negative"
NEUTRAL = "neutral"

# Comparative score beyond which a comment counts as positive/negative
COMPARATIVE_THRESHOLD = 0.1

# Short business feedback is often mis-scored by generic lexicons,
# so these phrases win over the comparative threshold. Negative is checked first.
NEGATIVE_TRIGGERS = (
    "expensive", "costly", "overpriced", "disappointed", "terrible",
    "awful", "bad", "worst", "hate",
)
POSITIVE_TRIGGERS = (
    "great", "excellent", "amazing", "love", "perfect", "wonderful",
    "best", "fantastic",
)


@dataclass(frozen=True)
class SentimentScore:
    """Raw lexical score for one text"""
    score: float  # VADER compound, -1 to 1
    comparative: float  # share of positive minus share of negative wording


@lru_cache(maxsize=1)
def _analyzer() -> SentimentIntensityAnalyzer:
    return SentimentIntensityAnalyzer()


def score_sentiment(text: str) -> SentimentScore:
    """Score one text. Pure: the same text always yields the same score."""
    scores = _analyzer().polarity_scores(text or "")
    return SentimentScore(
        score=scores["compound"],
        comparative=scores["pos"] - scores["neg"],
    )


def bucket_from_comparative(comparative: float) -> str:
    """Three-way bucket from the comparative score alone."""
    if comparative > COMPARATIVE_THRESHOLD:
        return POSITIVE
    if comparative < -COMPARATIVE_THRESHOLD:
        return NEGATIVE
    return NEUTRAL


def classify_comment_sentiment(text: str, score: SentimentScore | None = None) -> str:
    """
    Classify a comment as positive, negative or neutral.

    Trigger phrases take precedence over the scorer's comparative threshold.
    """
    lowered = (text or "").lower()
    if any(trigger in lowered for trigger in NEGATIVE_TRIGGERS):
        return NEGATIVE
    if any(trigger in lowered for trigger in POSITIVE_TRIGGERS):
        return POSITIVE
    if score is None:
        score = score_sentiment(text)
    return bucket_from_comparative(score.comparative)
