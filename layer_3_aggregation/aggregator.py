"""
Theme aggregator - groups classified comments by theme and computes
volume, sentiment, confidence and business impact per theme
"""
from collections import defaultdict
from dataclasses import replace
from typing import Dict, List, Sequence

from models.analysis import GroupComment, SentimentDistribution, ThemeGroup, round_half_up
from models.comment import Comment
from models.theme import Classification, Theme
from utils.exceptions import AggregationInvariantError
from utils.logger import get_logger
from utils.sentiment import NEGATIVE, classify_comment_sentiment, score_sentiment

logger = get_logger(__name__)

IMPACT_ORDER = {"high": 3, "medium": 2, "low": 1}

# Negative themes above this share of comments are high impact
HIGH_IMPACT_PERCENTAGE = 10
# Any theme above this share of comments is at least medium impact
MEDIUM_IMPACT_PERCENTAGE = 15


def business_impact(sentiment: str, percentage: int) -> str:
    """
    Priority tier for a theme

    Args:
        sentiment: Theme sentiment classification
        percentage: Theme share of all comments (0-100)

    Returns:
        "high", "medium" or "low"
    """
    if sentiment == NEGATIVE and percentage > HIGH_IMPACT_PERCENTAGE:
        return "high"
    if percentage > MEDIUM_IMPACT_PERCENTAGE:
        return "medium"
    return "low"


class ThemeAggregator:
    """Build ranked theme groups from per-comment classifications"""

    def aggregate(
        self,
        comments: Sequence[Comment],
        themes: Sequence[Theme],
        classifications: Sequence[Classification],
        enhanced_by_ai: bool = True,
    ) -> List[ThemeGroup]:
        """
        Group classifications by theme and rank the groups

        Themes with no comments are dropped. Groups are ordered by business
        impact (high first), then by volume.

        Args:
            comments: Full corpus, looked up by index
            themes: Every theme a classification may reference
            classifications: Exactly one per comment
            enhanced_by_ai: Whether classifications came from Gemini

        Returns:
            Ranked theme groups with topic ids 1..n

        Raises:
            AggregationInvariantError: classifications reference unknown themes
                or comments, or group volumes don't add up to the corpus size
        """
        total = len(comments)
        members: Dict[str, List[Classification]] = defaultdict(list)
        theme_names = {theme.name for theme in themes}
        seen = set()

        for classification in classifications:
            if classification.theme_name not in theme_names:
                raise AggregationInvariantError(
                    f"Comment {classification.comment_index} assigned to unknown theme "
                    f"'{classification.theme_name}'"
                )
            if not 0 <= classification.comment_index < total:
                raise AggregationInvariantError(
                    f"Classification references comment {classification.comment_index}, "
                    f"corpus has {total}"
                )
            if classification.comment_index in seen:
                raise AggregationInvariantError(
                    f"Comment {classification.comment_index} classified more than once"
                )
            seen.add(classification.comment_index)
            members[classification.theme_name].append(classification)

        groups = [
            self._build_group(theme, members[theme.name], comments, enhanced_by_ai)
            for theme in themes
            if members.get(theme.name)
        ]

        grouped_volume = sum(group.volume for group in groups)
        if grouped_volume != total:
            raise AggregationInvariantError(
                f"Theme volumes add up to {grouped_volume}, expected {total} comments"
            )

        # sorted() is stable, so equal groups keep theme order
        ranked = sorted(
            groups,
            key=lambda group: (IMPACT_ORDER[group.business_impact], group.volume),
            reverse=True,
        )
        ranked = [replace(group, topic_id=rank) for rank, group in enumerate(ranked, 1)]
        logger.info(f"Aggregated {total} comments into {len(ranked)} themes")
        return ranked

    def _build_group(
        self,
        theme: Theme,
        classifications: List[Classification],
        comments: Sequence[Comment],
        enhanced_by_ai: bool,
    ) -> ThemeGroup:
        total = len(comments)
        group_comments = []
        comparative_sum = 0.0
        counts = {"positive": 0, "negative": 0, "neutral": 0}

        for classification in sorted(classifications, key=lambda c: c.comment_index):
            comment = comments[classification.comment_index]
            score = score_sentiment(comment.text)
            label = classify_comment_sentiment(comment.text, score)
            counts[label] += 1
            comparative_sum += score.comparative
            group_comments.append(GroupComment(
                index=comment.index,
                text=comment.text,
                confidence=classification.confidence,
                sentiment=label,
            ))

        volume = len(group_comments)
        percentage = round_half_up(volume / total * 100)
        distribution = SentimentDistribution(**counts)
        sentiment = distribution.majority()

        return ThemeGroup(
            theme=theme,
            comments=tuple(group_comments),
            volume=volume,
            percentage=percentage,
            sentiment=sentiment,
            sentiment_score=round(comparative_sum / volume, 2),
            distribution=distribution,
            confidence=round_half_up(sum(c.confidence for c in group_comments) / volume * 100),
            avg_word_count=round_half_up(
                sum(len(c.text.split()) for c in group_comments) / volume
            ),
            business_impact=business_impact(sentiment, percentage),
            enhanced_by_ai=enhanced_by_ai,
        )
