"""
LLM-based batch classifier that assigns every comment to one discovered theme
"""
import math
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from models.comment import Comment
from models.theme import Classification, Theme
from layer_2_theme_extraction.response_parser import ParsedPayload, ParseStatus, parse_payload
from layer_2_theme_extraction.theme_config import DEGRADED_CONFIDENCE, UNCATEGORIZED_THEME
from config.settings import settings
from utils.exceptions import ClassificationCoverageError
from utils.llm_client import LLMClient, is_rate_limit_error
from utils.logger import get_logger

logger = get_logger(__name__)

DEGRADE_TO_FIRST_THEME = "first_theme"
DEGRADE_TO_CATCH_ALL = "catch_all"


class BatchOutcome(Enum):
    CLASSIFIED = "classified"
    REPAIRED = "repaired"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class BatchResult:
    """Classifications for one batch and how they were obtained"""
    classifications: Tuple[Classification, ...]
    outcome: BatchOutcome
    degraded_count: int = 0


@dataclass(frozen=True)
class ClassificationRun:
    """
    Accumulated classifications across batches.

    Each batch step returns a new run; nothing is mutated in place.
    """
    classifications: Tuple[Classification, ...] = ()
    batch_count: int = 0
    repaired_batches: int = 0
    degraded_batches: int = 0
    degraded_records: int = 0

    def add(self, result: BatchResult) -> "ClassificationRun":
        return replace(
            self,
            classifications=self.classifications + result.classifications,
            batch_count=self.batch_count + 1,
            repaired_batches=self.repaired_batches + (result.outcome is BatchOutcome.REPAIRED),
            degraded_batches=self.degraded_batches + (result.outcome is BatchOutcome.DEGRADED),
            degraded_records=self.degraded_records + result.degraded_count,
        )


def plan_batches(total: int, min_batch_size: int, max_batches: int) -> List[range]:
    """
    Split comment positions into contiguous batches

    batch size = max(min_batch_size, ceil(total / max_batches)); the last
    batch may be smaller.

    Args:
        total: Number of comments
        min_batch_size: Floor on the batch size
        max_batches: Target maximum number of batches

    Returns:
        List of position ranges covering 0..total-1 exactly once
    """
    if total <= 0:
        return []
    batch_size = max(min_batch_size, math.ceil(total / max(1, max_batches)), 1)
    return [range(start, min(start + batch_size, total)) for start in range(0, total, batch_size)]


def verify_coverage(classifications: Iterable[Classification], total: int) -> None:
    """
    Check that classifications cover indices 0..total-1 exactly once

    Raises:
        ClassificationCoverageError: on any duplicate, gap or stray index
    """
    indices = [c.comment_index for c in classifications]
    if len(indices) != total or set(indices) != set(range(total)):
        missing = sorted(set(range(total)) - set(indices))
        duplicates = len(indices) - len(set(indices))
        raise ClassificationCoverageError(
            f"Classifications cover {len(set(indices))}/{total} comments "
            f"(missing {missing[:10]}, {duplicates} duplicates)"
        )


class BatchClassifier:
    """Classify the full corpus against a theme set in bounded, throttled batches"""

    def __init__(
        self,
        llm_client: LLMClient,
        sleep: Callable[[float], None] = time.sleep,
        min_batch_size: Optional[int] = None,
        max_batches: Optional[int] = None,
        batch_delay: Optional[float] = None,
        rate_limit_delay: Optional[float] = None,
        degraded_policy: Optional[str] = None,
    ):
        """
        Initialize classifier

        Args:
            llm_client: LLM client used for every batch request
            sleep: Function used for throttle and cooldown waits
            min_batch_size: Floor batch size (defaults to settings)
            max_batches: Target maximum number of batches (defaults to settings)
            batch_delay: Seconds between batches (defaults to settings)
            rate_limit_delay: Seconds to cool down after a rate limit (defaults to settings)
            degraded_policy: "first_theme" or "catch_all" (defaults to settings)
        """
        self.llm_client = llm_client
        self.sleep = sleep
        self.min_batch_size = min_batch_size if min_batch_size is not None else settings.CLASSIFY_MIN_BATCH_SIZE
        self.max_batches = max_batches if max_batches is not None else settings.CLASSIFY_MAX_BATCHES
        self.batch_delay = batch_delay if batch_delay is not None else settings.LLM_BATCH_DELAY
        self.rate_limit_delay = rate_limit_delay if rate_limit_delay is not None else settings.LLM_RATE_LIMIT_DELAY
        self.degraded_policy = degraded_policy or settings.DEGRADED_THEME_POLICY
        if self.degraded_policy not in (DEGRADE_TO_FIRST_THEME, DEGRADE_TO_CATCH_ALL):
            raise ValueError(f"Unknown degraded theme policy: {self.degraded_policy}")

    def classify(self, comments: Sequence[Comment], themes: Sequence[Theme]) -> ClassificationRun:
        """
        Classify every comment into one of the themes

        Batches run strictly in order with a fixed delay between them.

        Args:
            comments: Full corpus, indices 0..n-1
            themes: Discovered themes

        Returns:
            ClassificationRun with exactly one classification per comment
        """
        batches = plan_batches(len(comments), self.min_batch_size, self.max_batches)
        logger.info(
            f"Classifying {len(comments)} comments in {len(batches)} batches "
            f"of up to {len(batches[0]) if batches else 0}"
        )

        run = ClassificationRun()
        for batch_number, positions in enumerate(batches, 1):
            batch_label = f"batch {batch_number}/{len(batches)}"
            if batch_number > 1:
                logger.info(f"Waiting {self.batch_delay}s before {batch_label} to avoid rate limits...")
                self.sleep(self.batch_delay)

            batch = comments[positions.start:positions.stop]
            result = self._classify_batch_with_retry(batch, themes, batch_label)
            run = run.add(result)
            logger.info(f"Classified {batch_label}: {len(result.classifications)} comments ({result.outcome.value})")

        verify_coverage(run.classifications, len(comments))
        logger.info(f"Classified {len(run.classifications)} comments into themes")
        return run

    def _classify_batch_with_retry(
        self,
        batch: Sequence[Comment],
        themes: Sequence[Theme],
        batch_label: str,
    ) -> BatchResult:
        """
        Request classifications for one batch

        first attempt -> success
                      -> rate limited -> cooldown -> retry -> success | degraded
                      -> other failure -> degraded
        """
        prompt = self._build_classification_prompt(batch, themes)

        try:
            raw_response = self._request(prompt)
        except Exception as e:
            if not is_rate_limit_error(e):
                logger.warning(f"Classification failed for {batch_label}: {e}. Using degraded classifications")
                return self._degrade(batch, themes)

            logger.warning(f"Rate limit hit for {batch_label}, waiting {self.rate_limit_delay}s before retrying once...")
            self.sleep(self.rate_limit_delay)
            try:
                raw_response = self._request(prompt)
            except Exception as retry_error:
                logger.warning(f"Retry also failed for {batch_label}: {retry_error}. Using degraded classifications")
                return self._degrade(batch, themes)
            logger.info(f"Retry successful for {batch_label}")

        parsed = parse_payload(raw_response, "classifications")
        if parsed.status is ParseStatus.MALFORMED:
            logger.warning(f"JSON parsing failed for {batch_label}. Using degraded classifications")
            return self._degrade(batch, themes)
        return self._validate_classifications(parsed, batch, themes, batch_label)

    def _request(self, prompt: str) -> str:
        return self.llm_client.generate(
            prompt,
            max_output_tokens=settings.CLASSIFY_MAX_OUTPUT_TOKENS,
            temperature=settings.CLASSIFY_TEMPERATURE,
        )

    def _build_classification_prompt(self, batch: Sequence[Comment], themes: Sequence[Theme]) -> str:
        """
        Build the batch classification prompt

        Comments are numbered 1-based within the whole corpus.
        """
        theme_block = "\n".join(
            f"{position}. {theme.name}: {theme.description}"
            for position, theme in enumerate(themes, 1)
        )
        comments_block = "\n".join(f"{comment.index + 1}. {comment.text}" for comment in batch)

        return f"""Classify each of these comments into one of the identified themes. Each comment should be assigned to exactly one theme.

Available themes:
{theme_block}

Comments to classify:
{comments_block}

Respond in JSON format with an array of classifications:
{{
  "classifications": [
    {{
      "commentIndex": 1,
      "themeName": "Exact theme name from above",
      "confidence": 0.9
    }}
  ]
}}

Return ONLY valid JSON, no markdown or additional text."""

    def _validate_classifications(
        self,
        parsed: ParsedPayload,
        batch: Sequence[Comment],
        themes: Sequence[Theme],
        batch_label: str,
    ) -> BatchResult:
        """
        Turn parsed entries into exactly one classification per batch comment

        Entries outside the batch and duplicates are ignored, unknown theme
        names go to the catch-all theme, and comments the response skipped
        get degraded classifications.
        """
        theme_lookup = {theme.name.lower(): theme.name for theme in themes}
        batch_indices = {comment.index for comment in batch}
        accepted: Dict[int, Classification] = {}

        for entry in parsed.entries("classifications"):
            index = _entry_index(entry)
            if index is None or index not in batch_indices or index in accepted:
                continue
            theme_name = str(entry.get("themeName") or "").strip()
            resolved = theme_lookup.get(theme_name.lower(), UNCATEGORIZED_THEME.name)
            if resolved == UNCATEGORIZED_THEME.name and theme_name.lower() != UNCATEGORIZED_THEME.name.lower():
                logger.debug(f"Unknown theme '{theme_name}' for comment {index + 1}, using {resolved}")
            accepted[index] = Classification(
                comment_index=index,
                theme_name=resolved,
                confidence=_entry_confidence(entry),
            )

        missing = [comment for comment in batch if comment.index not in accepted]
        if missing:
            logger.warning(
                f"{len(missing)} comments missing from {batch_label} response, using degraded classifications"
            )
        degraded_theme = self._degraded_theme_name(themes)
        for comment in missing:
            accepted[comment.index] = Classification(comment.index, degraded_theme, DEGRADED_CONFIDENCE)

        outcome = BatchOutcome.REPAIRED if parsed.status is ParseStatus.REPAIRED else BatchOutcome.CLASSIFIED
        return BatchResult(
            classifications=tuple(accepted[comment.index] for comment in batch),
            outcome=outcome,
            degraded_count=len(missing),
        )

    def _degrade(self, batch: Sequence[Comment], themes: Sequence[Theme]) -> BatchResult:
        """Assign every comment in the batch to the degraded theme"""
        theme_name = self._degraded_theme_name(themes)
        return BatchResult(
            classifications=tuple(
                Classification(comment.index, theme_name, DEGRADED_CONFIDENCE) for comment in batch
            ),
            outcome=BatchOutcome.DEGRADED,
            degraded_count=len(batch),
        )

    def _degraded_theme_name(self, themes: Sequence[Theme]) -> str:
        if self.degraded_policy == DEGRADE_TO_FIRST_THEME and themes:
            return themes[0].name
        return UNCATEGORIZED_THEME.name


def _entry_index(entry: Any) -> Optional[int]:
    """0-based comment index from a 1-based commentIndex field"""
    if not isinstance(entry, dict):
        return None
    value = entry.get("commentIndex")
    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    # Rejects fractions, inf and nan
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value) - 1


def _entry_confidence(entry: Dict[str, Any]) -> float:
    try:
        confidence = float(entry.get("confidence"))
    except (TypeError, ValueError):
        return DEGRADED_CONFIDENCE
    if math.isnan(confidence):
        return DEGRADED_CONFIDENCE
    return min(1.0, max(0.0, confidence))
