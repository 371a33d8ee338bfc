"""
Offline keyword classifier used when Gemini is unavailable or discovery fails
"""
from typing import List, Optional, Sequence, Tuple

from models.comment import Comment
from models.theme import Classification, Theme
from layer_2_theme_extraction.theme_config import (
    KEYWORD_MATCH_CONFIDENCE,
    NO_MATCH_CONFIDENCE,
    OTHER_THEME,
    get_fallback_themes,
)


class KeywordClassifier:
    """
    Deterministic keyword matcher over a fixed theme table

    The same comments always produce the same classifications.
    """

    def __init__(self, themes: Optional[Sequence[Theme]] = None, catch_all: Theme = OTHER_THEME):
        """
        Initialize classifier

        Args:
            themes: Keyword themes in tie-break order (defaults to the built-in table)
            catch_all: Theme for comments that match no keyword
        """
        self.themes = list(themes) if themes is not None else get_fallback_themes()
        self.catch_all = catch_all

    @property
    def theme_set(self) -> List[Theme]:
        """Every theme a classification may reference, catch-all last"""
        return self.themes + [self.catch_all]

    def classify_offline(self, comments: Sequence[Comment]) -> List[Classification]:
        """
        Classify every comment by keyword matches

        Args:
            comments: Comments to classify

        Returns:
            One classification per comment, in input order
        """
        return [self.classify_comment(comment) for comment in comments]

    def classify_comment(self, comment: Comment) -> Classification:
        theme, matches = self._best_match(comment.text)
        return Classification(
            comment_index=comment.index,
            theme_name=theme.name,
            confidence=KEYWORD_MATCH_CONFIDENCE if matches > 0 else NO_MATCH_CONFIDENCE,
        )

    def _best_match(self, text: str) -> Tuple[Theme, int]:
        """Theme with the strictly highest keyword count; earlier themes win ties"""
        lowered = text.lower()
        best_theme, best_count = self.catch_all, 0
        for theme in self.themes:
            count = sum(1 for keyword in theme.keywords if keyword.lower() in lowered)
            if count > best_count:
                best_theme, best_count = theme, count
        return best_theme, best_count
