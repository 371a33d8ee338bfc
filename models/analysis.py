"""
Analysis result data models
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from models.theme import Theme


@dataclass(frozen=True)
class SentimentDistribution:
    """Positive/negative/neutral counts for a group of comments"""
    positive: int = 0
    negative: int = 0
    neutral: int = 0

    @property
    def total(self) -> int:
        return self.positive + self.negative + self.neutral

    def majority(self) -> str:
        """Strict majority label; ties fall back to neutral"""
        if self.positive > self.negative and self.positive > self.neutral:
            return "positive"
        if self.negative > self.positive and self.negative > self.neutral:
            return "negative"
        return "neutral"

    def to_dict(self) -> Dict[str, int]:
        total = self.total

        def _pct(count: int) -> int:
            return round_half_up(count / total * 100) if total else 0

        return {
            "positive": self.positive,
            "negative": self.negative,
            "neutral": self.neutral,
            "positive_percentage": _pct(self.positive),
            "negative_percentage": _pct(self.negative),
            "neutral_percentage": _pct(self.neutral),
        }


@dataclass(frozen=True)
class GroupComment:
    """A member comment of a theme group"""
    index: int
    text: str
    confidence: float
    sentiment: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "text": self.text,
            "confidence": self.confidence,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class ThemeGroup:
    """All comments assigned to one theme plus their computed metrics"""
    theme: Theme
    comments: Tuple[GroupComment, ...]
    volume: int
    percentage: int
    sentiment: str
    sentiment_score: float
    distribution: SentimentDistribution
    confidence: int
    avg_word_count: int
    business_impact: str
    enhanced_by_ai: bool
    topic_id: int = 0

    @property
    def title(self) -> str:
        return self.theme.name

    @property
    def sample_quotes(self) -> List[str]:
        return [comment.text for comment in self.comments]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "topic_id": self.topic_id,
            "title": self.theme.name,
            "description": self.theme.description,
            "words": [
                {"term": keyword, "weight": 1, "probability": 1}
                for keyword in self.theme.keywords
            ],
            "volume": self.volume,
            "percentage": self.percentage,
            "sentiment": {
                "classification": self.sentiment,
                "score": self.sentiment_score,
                "distribution": self.distribution.to_dict(),
            },
            "confidence": self.confidence,
            "avg_word_count": self.avg_word_count,
            "business_impact": self.business_impact,
            "comments": [comment.to_dict() for comment in self.comments],
            "sample_quotes": self.sample_quotes,
            "enhanced_by_ai": self.enhanced_by_ai,
        }


@dataclass
class Diagnostics:
    """How a run was classified, for validation and troubleshooting"""
    enhanced_by_ai: bool = False
    classification_mode: str = "fallback"  # "ai" or "fallback"
    fallback_reason: Optional[str] = None
    record_count: int = 0
    processable_count: int = 0  # records with at least one content word
    classification_count: int = 0
    theme_count: int = 0
    batch_count: int = 0
    repaired_batches: int = 0
    degraded_batches: int = 0
    degraded_records: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enhanced_by_ai": self.enhanced_by_ai,
            "classification_mode": self.classification_mode,
            "fallback_reason": self.fallback_reason,
            "record_count": self.record_count,
            "processable_count": self.processable_count,
            "classification_count": self.classification_count,
            "theme_count": self.theme_count,
            "batch_count": self.batch_count,
            "repaired_batches": self.repaired_batches,
            "degraded_batches": self.degraded_batches,
            "degraded_records": self.degraded_records,
        }


@dataclass
class AnalysisResult:
    """Everything a finished run returns to the caller"""
    total_comments: int
    theme_groups: List[ThemeGroup]
    overall_sentiment: SentimentDistribution
    sentiment_details: List[Dict[str, Any]]
    diagnostics: Diagnostics
    avg_word_count: int = 0
    processing_time: float = 0.0
    coherence_score: float = 0.8

    @property
    def high_priority_count(self) -> int:
        return len([group for group in self.theme_groups if group.business_impact == "high"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_comments": self.total_comments,
            "coherence_score": self.coherence_score,
            "avg_word_count": self.avg_word_count,
            "processing_time": self.processing_time,
            "topics": [group.to_dict() for group in self.theme_groups],
            "metadata": {
                "ai_enhanced": self.diagnostics.enhanced_by_ai,
                "total_topics": len(self.theme_groups),
                "high_priority_count": self.high_priority_count,
            },
            "sentiment": {
                "overall": {
                    "positive": self.overall_sentiment.positive,
                    "negative": self.overall_sentiment.negative,
                    "neutral": self.overall_sentiment.neutral,
                },
                "details": self.sentiment_details,
            },
            "diagnostics": self.diagnostics.to_dict(),
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values, as percentages expect"""
    return int(value + 0.5)
