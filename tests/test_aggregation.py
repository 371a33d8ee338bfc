"""
Unit tests for Layer 3: Aggregation
Tests theme grouping, metrics, business impact ranking and overall sentiment
"""
import sys
import os
import random
from unittest.mock import patch

import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layer_3_aggregation.aggregator import ThemeAggregator, business_impact
from layer_3_aggregation.sentiment_summary import summarize_overall_sentiment
from layer_2_theme_extraction.theme_config import UNCATEGORIZED_THEME
from models.analysis import SentimentDistribution
from models.comment import Comment
from models.theme import Classification, Theme
from utils.exceptions import AggregationInvariantError
from utils.sentiment import (
    SentimentScore,
    bucket_from_comparative,
    classify_comment_sentiment,
    score_sentiment,
)

PRICING = Theme("Pricing", "value for money", ("price", "cost"))
STAFF = Theme("Staff", "service from staff", ("staff",))
FOOD = Theme("Food", "restaurant and breakfast", ("food",))
THEMES = [PRICING, STAFF, FOOD, UNCATEGORIZED_THEME]

NEUTRAL_TEXT = "the lobby has chairs"


def build(assignments):
    """assignments: list of (text, theme_name, confidence)"""
    comments = [Comment(i, text) for i, (text, _, _) in enumerate(assignments)]
    classifications = [
        Classification(i, theme, confidence)
        for i, (_, theme, confidence) in enumerate(assignments)
    ]
    return comments, classifications


class TestSentimentScoring:
    """Test the lexical scorer and the trigger phrase override"""

    def test_trigger_overrides_comparative_score(self):
        text = "the room was expensive and the staff was rude"
        assert classify_comment_sentiment(text) == "negative"
        assert classify_comment_sentiment(text, SentimentScore(score=0.9, comparative=0.5)) == "negative"

    def test_positive_trigger_overrides_negative_score(self):
        assert classify_comment_sentiment("the breakfast was the best", SentimentScore(-0.5, -0.5)) == "positive"

    def test_negative_trigger_checked_first(self):
        assert classify_comment_sentiment("great location but awful food") == "negative"

    def test_comparative_threshold(self):
        assert bucket_from_comparative(0.11) == "positive"
        assert bucket_from_comparative(0.1) == "neutral"
        assert bucket_from_comparative(-0.1) == "neutral"
        assert bucket_from_comparative(-0.11) == "negative"

    def test_no_trigger_uses_score(self):
        assert classify_comment_sentiment("checkout", SentimentScore(0.6, 0.4)) == "positive"
        assert classify_comment_sentiment("checkout", SentimentScore(-0.6, -0.4)) == "negative"

    def test_score_is_pure(self):
        assert score_sentiment(NEUTRAL_TEXT) == score_sentiment(NEUTRAL_TEXT)
        assert score_sentiment(NEUTRAL_TEXT).comparative == 0.0
        assert score_sentiment("").score == 0.0


class TestBusinessImpact:
    """Test business impact tiers"""

    @pytest.mark.parametrize("sentiment,percentage,expected", [
        ("negative", 11, "high"),
        ("negative", 10, "low"),
        ("negative", 30, "high"),
        ("positive", 16, "medium"),
        ("positive", 15, "low"),
        ("neutral", 80, "medium"),
        ("neutral", 5, "low"),
    ])
    def test_tiers(self, sentiment, percentage, expected):
        assert business_impact(sentiment, percentage) == expected


class TestSentimentDistribution:
    """Test majority voting"""

    def test_strict_majority(self):
        assert SentimentDistribution(positive=3, negative=1, neutral=1).majority() == "positive"
        assert SentimentDistribution(positive=0, negative=2, neutral=1).majority() == "negative"

    def test_ties_default_to_neutral(self):
        assert SentimentDistribution(positive=2, negative=2, neutral=0).majority() == "neutral"
        assert SentimentDistribution(positive=2, negative=0, neutral=2).majority() == "neutral"
        assert SentimentDistribution().majority() == "neutral"

    def test_percentages(self):
        distribution = SentimentDistribution(positive=1, negative=1, neutral=1).to_dict()
        assert distribution["positive_percentage"] == 33
        assert SentimentDistribution().to_dict()["neutral_percentage"] == 0


class TestThemeAggregator:
    """Test grouping and per-theme metrics"""

    def test_groups_and_metrics(self):
        comments, classifications = build([
            ("terrible price for a small room", "Pricing", 0.9),
            ("awful cost", "Pricing", 0.8),
            ("great staff", "Staff", 0.9),
            ("great staff at the desk", "Staff", 0.9),
            ("great staff and great bar", "Staff", 0.9),
            ("great staff", "Staff", 0.9),
            ("great staff", "Staff", 0.9),
            ("great staff", "Staff", 0.9),
            (NEUTRAL_TEXT, "Food", 0.5),
            (NEUTRAL_TEXT, "Food", 0.5),
        ])

        groups = ThemeAggregator().aggregate(comments, THEMES, classifications)

        assert [g.title for g in groups] == ["Pricing", "Staff", "Food"]
        assert [g.topic_id for g in groups] == [1, 2, 3]

        pricing, staff, food = groups
        assert pricing.volume == 2
        assert pricing.percentage == 20
        assert pricing.sentiment == "negative"
        assert pricing.business_impact == "high"
        assert pricing.confidence == 85
        assert pricing.avg_word_count == 4  # (6 + 2) / 2
        assert pricing.distribution == SentimentDistribution(positive=0, negative=2, neutral=0)

        assert staff.volume == 6
        assert staff.percentage == 60
        assert staff.sentiment == "positive"
        assert staff.business_impact == "medium"

        assert food.sentiment == "neutral"
        assert food.business_impact == "medium"
        assert food.confidence == 50

    def test_empty_themes_are_dropped(self):
        comments, classifications = build([
            ("great staff", "Staff", 0.9),
            (NEUTRAL_TEXT, "Staff", 0.9),
        ])
        groups = ThemeAggregator().aggregate(comments, THEMES, classifications)
        assert [g.title for g in groups] == ["Staff"]
        assert groups[0].percentage == 100

    def test_catch_all_included_when_non_empty(self):
        comments, classifications = build([
            ("great staff", "Staff", 0.9),
            (NEUTRAL_TEXT, "Uncategorized", 0.5),
        ])
        groups = ThemeAggregator().aggregate(comments, THEMES, classifications)
        assert {g.title for g in groups} == {"Staff", "Uncategorized"}

    def test_ties_rank_by_volume_then_theme_order(self):
        comments, classifications = build(
            [(NEUTRAL_TEXT, "Food", 0.5)] * 2
            + [(NEUTRAL_TEXT, "Staff", 0.5)] * 2
            + [(NEUTRAL_TEXT, "Pricing", 0.5)] * 3
        )
        groups = ThemeAggregator().aggregate(comments, THEMES, classifications)
        assert [g.title for g in groups] == ["Pricing", "Staff", "Food"]

    def test_members_keep_text_and_confidence(self):
        comments, classifications = build([
            ("great staff", "Staff", 0.9),
            ("terrible staff", "Staff", 0.4),
        ])
        group = ThemeAggregator().aggregate(comments, THEMES, classifications)[0]
        assert group.sample_quotes == ["great staff", "terrible staff"]
        assert [c.confidence for c in group.comments] == [0.9, 0.4]
        assert [c.sentiment for c in group.comments] == ["positive", "negative"]
        assert group.sentiment == "neutral"  # one each

    def test_to_dict_shape(self):
        comments, classifications = build([("great staff", "Staff", 0.9)])
        topic = ThemeAggregator().aggregate(comments, THEMES, classifications, enhanced_by_ai=False)[0].to_dict()
        assert topic["title"] == "Staff"
        assert topic["words"] == [{"term": "staff", "weight": 1, "probability": 1}]
        assert topic["sentiment"]["distribution"]["positive_percentage"] == 100
        assert topic["enhanced_by_ai"] is False

    def test_unknown_theme_raises(self):
        comments, classifications = build([("great staff", "Parking", 0.9)])
        with pytest.raises(AggregationInvariantError):
            ThemeAggregator().aggregate(comments, THEMES, classifications)

    def test_duplicate_classification_raises(self):
        comments = [Comment(0, "great staff"), Comment(1, "awful food")]
        classifications = [Classification(0, "Staff", 0.9), Classification(0, "Food", 0.9)]
        with pytest.raises(AggregationInvariantError):
            ThemeAggregator().aggregate(comments, THEMES, classifications)

    def test_missing_classification_raises(self):
        comments = [Comment(0, "great staff"), Comment(1, "awful food")]
        with pytest.raises(AggregationInvariantError):
            ThemeAggregator().aggregate(comments, THEMES, [Classification(0, "Staff", 0.9)])

    def test_stray_index_raises(self):
        comments = [Comment(0, "great staff")]
        with pytest.raises(AggregationInvariantError):
            ThemeAggregator().aggregate(comments, THEMES, [Classification(5, "Staff", 0.9)])

    def test_volume_and_percentage_properties(self):
        rng = random.Random(42)
        texts = ["great staff", "terrible price", NEUTRAL_TEXT, "awful food", "best breakfast ever"]
        theme_names = [theme.name for theme in THEMES]

        for _ in range(40):
            total = rng.randint(1, 150)
            comments = [Comment(i, rng.choice(texts)) for i in range(total)]
            classifications = [
                Classification(i, rng.choice(theme_names), round(rng.random(), 2))
                for i in range(total)
            ]
            rng.shuffle(classifications)

            groups = ThemeAggregator().aggregate(comments, THEMES, classifications)

            assert sum(g.volume for g in groups) == total
            assert abs(sum(g.percentage for g in groups) - 100) <= len(groups)
            impacts = [{"high": 3, "medium": 2, "low": 1}[g.business_impact] for g in groups]
            assert impacts == sorted(impacts, reverse=True)


class TestOverallSentiment:
    """Test corpus-wide sentiment counts"""

    def test_counts_cover_every_comment(self):
        comments = [Comment(i, text) for i, text in enumerate(["great staff", "awful food", NEUTRAL_TEXT] * 10)]
        overall, details = summarize_overall_sentiment(comments)
        assert overall.total == 30
        assert len(details) == 20
        assert details[0]["text"] == "great staff..."
        assert set(details[0]) == {"text", "score", "comparative", "classification"}

    def test_no_trigger_override(self):
        comments = [Comment(0, "terrible stay"), Comment(1, "awful food")]
        with patch(
            "layer_3_aggregation.sentiment_summary.score_sentiment",
            return_value=SentimentScore(score=0.6, comparative=0.3),
        ):
            overall, _ = summarize_overall_sentiment(comments)
        assert overall == SentimentDistribution(positive=2, negative=0, neutral=0)
