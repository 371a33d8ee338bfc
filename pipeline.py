"""
Comment analysis pipeline

Runs the whole analysis for one batch of comments:
1. Prepare the comments (normalise, filter, size checks)
2. Discover themes and classify every comment (Gemini, or keyword fallback)
3. Group comments by theme and rank the themes by business impact
4. Count overall sentiment

Fatal problems (empty or oversized datasets) end the run with a structured
failure. Everything else is absorbed and shows up in the diagnostics.
"""
import time
from typing import Any, Dict, Optional, Sequence

from layer_1_data_import.preparer import (
    PreparedCorpus,
    average_word_count,
    check_corpus_size,
    estimate_tokens,
    prepare_comments,
    processable_comments,
)
from layer_2_theme_extraction.classifier import BatchClassifier
from layer_2_theme_extraction.classify_comments import classify_comments
from layer_3_aggregation.aggregator import ThemeAggregator
from layer_3_aggregation.sentiment_summary import summarize_overall_sentiment
from models.analysis import AnalysisResult, Diagnostics
from models.comment import Comment
from utils.exceptions import AnalysisError, EmptyCorpus
from utils.llm_client import LLMClient, create_llm_client
from utils.logger import get_logger

logger = get_logger(__name__)


def run_classification(
    comments: Sequence[Comment],
    llm_client: Optional[LLMClient] = None,
    use_llm: bool = True,
    batch_classifier: Optional[BatchClassifier] = None,
    corpus: Optional[PreparedCorpus] = None,
) -> AnalysisResult:
    """
    Classify comments into themes and build the themed summary

    Args:
        comments: Prepared comments, indices 0..n-1
        llm_client: Gemini client (built from settings when omitted)
        use_llm: False forces the keyword fallback
        batch_classifier: Override for the batch classifier
        corpus: Preparation results for these comments; size checks and
            word counts are taken from it instead of being recomputed

    Returns:
        AnalysisResult with ranked theme groups, overall sentiment and diagnostics

    Raises:
        EmptyCorpus: no comments were given
        OversizedCorpus: too many comments to send to Gemini
        AggregationInvariantError: theme volumes don't add up to the corpus size
    """
    start_time = time.monotonic()
    if not comments:
        raise EmptyCorpus("No comments to analyze")

    if corpus is None:
        # Checked before any request is made
        is_large = check_corpus_size(len(comments))
        corpus = PreparedCorpus(
            comments=list(comments),
            processable_count=len(processable_comments(comments)),
            estimated_tokens=estimate_tokens(len(comments)),
            avg_word_count=average_word_count(comments),
            is_large=is_large,
        )

    if use_llm and llm_client is None:
        llm_client = create_llm_client()
    if not use_llm:
        llm_client = None

    logger.info("=" * 60)
    logger.info(f"Starting theme classification for {len(comments)} comments")
    logger.info("=" * 60)

    outcome = classify_comments(
        comments,
        corpus.discovery_sample_size,
        llm_client=llm_client,
        batch_classifier=batch_classifier,
    )

    logger.info("Step 3: Grouping comments and calculating percentages...")
    theme_groups = ThemeAggregator().aggregate(
        comments,
        outcome.themes,
        outcome.classifications,
        enhanced_by_ai=outcome.enhanced_by_ai,
    )

    overall, details = summarize_overall_sentiment(comments)

    diagnostics = Diagnostics(
        enhanced_by_ai=outcome.enhanced_by_ai,
        classification_mode="ai" if outcome.enhanced_by_ai else "fallback",
        fallback_reason=outcome.fallback_reason,
        record_count=len(comments),
        processable_count=corpus.processable_count,
        classification_count=len(outcome.classifications),
        theme_count=len(theme_groups),
    )
    if outcome.batch_run is not None:
        diagnostics.batch_count = outcome.batch_run.batch_count
        diagnostics.repaired_batches = outcome.batch_run.repaired_batches
        diagnostics.degraded_batches = outcome.batch_run.degraded_batches
        diagnostics.degraded_records = outcome.batch_run.degraded_records

    processing_time = round(time.monotonic() - start_time, 1)
    logger.info(
        f"Analysis complete! {len(theme_groups)} themes in {processing_time}s "
        f"({diagnostics.classification_mode} classification)"
    )

    return AnalysisResult(
        total_comments=len(comments),
        theme_groups=theme_groups,
        overall_sentiment=overall,
        sentiment_details=details,
        diagnostics=diagnostics,
        avg_word_count=corpus.avg_word_count,
        processing_time=processing_time,
    )


def analyze_comments(
    raw_texts: Sequence[Optional[str]],
    llm_client: Optional[LLMClient] = None,
    use_llm: bool = True,
) -> Dict[str, Any]:
    """
    Prepare raw texts and run the analysis

    Args:
        raw_texts: One raw comment per row
        llm_client: Gemini client (built from settings when omitted)
        use_llm: False forces the keyword fallback

    Returns:
        {"success": True, "data": {...}} or {"success": False, "error": "..."}
    """
    try:
        corpus = prepare_comments(raw_texts)
        result = run_classification(corpus.comments, llm_client=llm_client, use_llm=use_llm, corpus=corpus)
    except AnalysisError as e:
        logger.error(f"Analysis error: {e}")
        return {"success": False, "error": f"Analysis failed: {e}"}

    return {"success": True, "data": result.to_dict()}
