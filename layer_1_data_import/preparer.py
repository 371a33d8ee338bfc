"""
Corpus preparation: normalise raw comment texts and guard against
empty or oversized datasets before anything is sent to Gemini.
"""
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from models.comment import Comment
from config.settings import settings
from utils.exceptions import EmptyCorpus, NoProcessableRecords, OversizedCorpus
from utils.logger import get_logger

logger = get_logger(__name__)

TOKEN_PATTERN = re.compile(r"\b[a-zA-Z]{3,}\b")


@dataclass(frozen=True)
class PreparedCorpus:
    """Comments ready for classification plus the size estimates derived from them"""
    comments: List[Comment]
    processable_count: int
    estimated_tokens: int
    avg_word_count: int
    is_large: bool

    @property
    def total(self) -> int:
        return len(self.comments)

    @property
    def discovery_sample_size(self) -> int:
        """How many leading comments theme discovery may look at"""
        return discovery_sample_size(self.is_large)


def extract_tokens(text: str) -> List[str]:
    """
    Extract content words from a comment

    Args:
        text: Comment text

    Returns:
        Alphabetic words of 3+ letters that are not English stop words
    """
    return [
        token for token in TOKEN_PATTERN.findall(text)
        if token.lower() not in ENGLISH_STOP_WORDS
    ]


def normalize_comments(raw_texts: Iterable[Optional[str]]) -> List[Comment]:
    """
    Lowercase, strip and length-filter raw texts

    Indices are assigned in order over the surviving comments only.
    """
    comments = []
    for raw in raw_texts:
        text = (raw or "").lower().strip()
        if len(text) > settings.MIN_COMMENT_LENGTH:
            comments.append(Comment(index=len(comments), text=text))
    return comments


def estimate_tokens(comment_count: int) -> int:
    """Rough token volume for a corpus of this many comments"""
    return comment_count * settings.TOKENS_PER_COMMENT


def check_corpus_size(comment_count: int) -> bool:
    """
    Enforce the token ceiling

    Returns:
        True if the corpus counts as large (smaller discovery sample)

    Raises:
        OversizedCorpus: estimated token volume exceeds MAX_DATASET_TOKENS
    """
    estimated = estimate_tokens(comment_count)
    if estimated > settings.MAX_DATASET_TOKENS:
        max_comments = settings.MAX_DATASET_TOKENS // settings.TOKENS_PER_COMMENT
        raise OversizedCorpus(comment_count, estimated, max_comments)
    return estimated > settings.LARGE_DATASET_TOKENS


def discovery_sample_size(is_large: bool) -> int:
    if is_large:
        return settings.DISCOVERY_SAMPLE_SIZE_LARGE
    return settings.DISCOVERY_SAMPLE_SIZE


def processable_comments(comments: Sequence[Comment]) -> List[Comment]:
    """Comments containing at least one content word"""
    return [comment for comment in comments if extract_tokens(comment.text)]


def average_word_count(comments: Sequence[Comment]) -> int:
    """Mean whitespace word count over processable comments, rounded"""
    processable = processable_comments(comments)
    if not processable:
        return 0
    return int(sum(c.word_count for c in processable) / len(processable) + 0.5)


def prepare_comments(raw_texts: Sequence[Optional[str]]) -> PreparedCorpus:
    """
    Turn raw texts into a PreparedCorpus

    Raises:
        EmptyCorpus: no text survives length filtering
        OversizedCorpus: estimated token volume exceeds MAX_DATASET_TOKENS
        NoProcessableRecords: no comment contains a content word
    """
    comments = normalize_comments(raw_texts)
    logger.info(f"Extracted {len(comments)} valid comments from {len(raw_texts)} rows")

    if not comments:
        raise EmptyCorpus("CSV file appears to be empty or contains no usable comments")

    estimated = estimate_tokens(len(comments))
    logger.info(f"Estimated tokens needed: {estimated}")

    is_large = check_corpus_size(len(comments))
    if is_large:
        logger.warning(
            f"Large dataset warning: {len(comments)} comments may take several minutes "
            f"and consume significant API credits"
        )

    processable = processable_comments(comments)
    logger.info(f"Processed {len(processable)} comments with sufficient tokens")

    if not processable:
        raise NoProcessableRecords(found=0)

    return PreparedCorpus(
        comments=comments,
        processable_count=len(processable),
        estimated_tokens=estimated,
        avg_word_count=average_word_count(processable),
        is_large=is_large,
    )
