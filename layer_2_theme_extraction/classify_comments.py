"""
Classification stage: discover themes, then classify every comment

Gemini is tried first (discovery on a sample, then batch classification of
the whole corpus). Whenever that path cannot produce a complete result, the
whole run switches to the offline keyword classifier instead.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence

from models.comment import Comment
from models.theme import Classification, Theme
from layer_2_theme_extraction.classifier import BatchClassifier, ClassificationRun
from layer_2_theme_extraction.discoverer import ThemeDiscoverer
from layer_2_theme_extraction.fallback_classifier import KeywordClassifier
from layer_2_theme_extraction.theme_config import UNCATEGORIZED_THEME
from utils.exceptions import ClassificationCoverageError, ThemeDiscoveryError
from utils.llm_client import LLMClient
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ThemeClassification:
    """Theme set and per-comment classifications produced by one run"""
    themes: List[Theme]  # Includes the catch-all theme, last
    classifications: List[Classification]
    enhanced_by_ai: bool
    fallback_reason: Optional[str] = None
    batch_run: Optional[ClassificationRun] = None


def classify_comments(
    comments: Sequence[Comment],
    discovery_sample_size: int,
    llm_client: Optional[LLMClient] = None,
    discoverer: Optional[ThemeDiscoverer] = None,
    batch_classifier: Optional[BatchClassifier] = None,
    keyword_classifier: Optional[KeywordClassifier] = None,
) -> ThemeClassification:
    """
    Classify all comments into themes

    Args:
        comments: Full corpus
        discovery_sample_size: How many leading comments discovery may see
        llm_client: Gemini client; None runs the keyword fallback directly
        discoverer: Override for the theme discoverer
        batch_classifier: Override for the batch classifier
        keyword_classifier: Override for the keyword fallback

    Returns:
        ThemeClassification covering every comment exactly once
    """
    discoverer = discoverer or ThemeDiscoverer(llm_client)
    keyword_classifier = keyword_classifier or KeywordClassifier()

    logger.info("Step 1: Identifying themes from a sample of comments...")
    try:
        discovered = discoverer.discover(comments, discovery_sample_size)
    except ThemeDiscoveryError as e:
        logger.error(f"LLM theme classification failed: {e}")
        return _classify_with_keywords(comments, keyword_classifier, str(e))

    logger.info("Step 2: Classifying each comment into themes...")
    if batch_classifier is None:
        batch_classifier = BatchClassifier(discoverer.llm_client)
    try:
        batch_run = batch_classifier.classify(comments, discovered)
    except ClassificationCoverageError as e:
        logger.error(f"Batch classification incomplete: {e}")
        return _classify_with_keywords(comments, keyword_classifier, str(e))

    themes = list(discovered)
    if UNCATEGORIZED_THEME.name not in {theme.name for theme in themes}:
        themes.append(UNCATEGORIZED_THEME)

    return ThemeClassification(
        themes=themes,
        classifications=list(batch_run.classifications),
        enhanced_by_ai=True,
        batch_run=batch_run,
    )


def _classify_with_keywords(
    comments: Sequence[Comment],
    keyword_classifier: KeywordClassifier,
    reason: str,
) -> ThemeClassification:
    logger.warning("Using fallback keyword-based theme identification...")
    classifications = keyword_classifier.classify_offline(comments)
    return ThemeClassification(
        themes=keyword_classifier.theme_set,
        classifications=classifications,
        enhanced_by_ai=False,
        fallback_reason=reason,
    )
