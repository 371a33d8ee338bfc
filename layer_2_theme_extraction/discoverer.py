"""
Theme discovery: ask Gemini which themes appear in a sample of comments
"""
from typing import Any, List, Optional, Sequence

from models.comment import Comment
from models.theme import Theme
from layer_2_theme_extraction.response_parser import parse_payload
from layer_2_theme_extraction.theme_config import MIN_DISCOVERED_THEMES, MAX_DISCOVERED_THEMES
from config.settings import settings
from utils.exceptions import DiscoveryRequestFailed, DiscoveryUnavailable, MalformedThemeResponse
from utils.llm_client import LLMClient
from utils.logger import get_logger

logger = get_logger(__name__)


class ThemeDiscoverer:
    """Discover a small set of themes from the leading comments of a corpus"""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        """
        Initialize discoverer

        Args:
            llm_client: LLM client instance; None means discovery is unavailable
        """
        self.llm_client = llm_client

    def discover(self, comments: Sequence[Comment], max_sample: int) -> List[Theme]:
        """
        Discover themes from the first max_sample comments

        No retry happens here: any failure is raised and the caller
        switches the whole run to keyword classification.

        Args:
            comments: Comments in corpus order
            max_sample: Cap on how many leading comments to send

        Returns:
            Discovered themes, names unique, in response order

        Raises:
            DiscoveryUnavailable: no LLM client is configured
            DiscoveryRequestFailed: the request raised
            MalformedThemeResponse: the payload has no usable themes
        """
        if self.llm_client is None:
            raise DiscoveryUnavailable("Gemini API not configured - using fallback themes")

        sample = list(comments[:max_sample])
        logger.info(f"Discovering themes from a sample of {len(sample)} comments")

        prompt = self._build_discovery_prompt(sample)
        try:
            raw_response = self.llm_client.generate(
                prompt,
                max_output_tokens=settings.DISCOVERY_MAX_OUTPUT_TOKENS,
                temperature=settings.DISCOVERY_TEMPERATURE,
            )
        except Exception as e:
            raise DiscoveryRequestFailed(f"Theme discovery request failed: {e}") from e

        parsed = parse_payload(raw_response, "themes")
        if not parsed.is_usable:
            raise MalformedThemeResponse("Theme discovery response is not valid JSON", raw_response)

        themes = self._parse_themes(parsed.entries("themes"))
        if not themes:
            raise MalformedThemeResponse("Theme discovery response contains no valid themes", raw_response)

        logger.info(f"Identified {len(themes)} themes: {[theme.name for theme in themes]}")
        return themes

    def _build_discovery_prompt(self, sample: Sequence[Comment]) -> str:
        comments_block = "\n".join(
            f"{position}. {comment.text}" for position, comment in enumerate(sample, 1)
        )

        return f"""Analyze these comments and identify {MIN_DISCOVERED_THEMES}-{MAX_DISCOVERED_THEMES} distinct themes/categories that emerge from the content.

Comments:
{comments_block}

Based on these comments, identify the main themes that appear. For each theme, provide:
1. Theme name (2-4 words, business-focused)
2. Brief description
3. Key indicators/words that signal this theme

Respond in JSON format with an array of themes:
{{
  "themes": [
    {{
      "name": "Theme Name",
      "description": "What this theme represents",
      "keywords": ["keyword1", "keyword2", "keyword3"]
    }}
  ]
}}

Return ONLY valid JSON, no markdown or additional text."""

    def _parse_themes(self, entries: List[Any]) -> List[Theme]:
        """Turn raw theme entries into Themes, skipping invalid and duplicate names"""
        themes: List[Theme] = []
        seen = set()
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            name = str(entry.get("name") or "").strip()
            if not name or name in seen:
                continue
            keywords = entry.get("keywords") or []
            if not isinstance(keywords, list):
                keywords = [keywords]
            seen.add(name)
            themes.append(Theme(
                name=name,
                description=str(entry.get("description") or ""),
                keywords=tuple(str(keyword) for keyword in keywords if keyword),
            ))
        return themes
