"""
Theme configuration for comment classification
Defines the built-in keyword themes used when Gemini is unavailable,
and the catch-all themes that always exist
"""
from typing import Dict, List

from models.theme import Theme

# Catch-all theme for AI classification (discovered themes)
UNCATEGORIZED_THEME = Theme(
    name="Uncategorized",
    description="Comments that could not be clearly categorized",
)

# Catch-all theme for the keyword fallback
OTHER_THEME = Theme(
    name="Other",
    description="Comments that do not fit into specific categories",
)

# Discovery asks Gemini for this many themes
MIN_DISCOVERED_THEMES = 3
MAX_DISCOVERED_THEMES = 8

# Confidence assigned when a batch could not be classified normally
DEGRADED_CONFIDENCE = 0.5

# Keyword fallback confidences
KEYWORD_MATCH_CONFIDENCE = 0.7
NO_MATCH_CONFIDENCE = 0.3

# Built-in keyword themes, in tie-break order
FALLBACK_THEMES = {
    "Value and Pricing": {
        "keywords": ["value", "price", "cost", "expensive", "cheap", "worth", "money", "budget"]
    },
    "Service Quality": {
        "keywords": ["service", "staff", "help", "friendly", "rude", "professional", "assistance"]
    },
    "Amenities and Features": {
        "keywords": ["pool", "gym", "spa", "restaurant", "room", "facility", "amenity", "activity"]
    },
    "Experience and Satisfaction": {
        "keywords": ["experience", "enjoy", "satisfied", "disappointed", "amazing", "terrible", "love", "hate"]
    },
    "General Feedback": {
        "keywords": ["overall", "general", "think", "feel", "opinion", "recommend", "suggest"]
    },
}


def get_fallback_themes() -> List[Theme]:
    """
    Get the built-in keyword themes

    Returns:
        Themes in table order (this order breaks ties)
    """
    return [
        Theme(
            name=name,
            description=f"Comments related to {name.lower()}",
            keywords=tuple(data["keywords"]),
        )
        for name, data in FALLBACK_THEMES.items()
    ]


def get_theme_list() -> List[str]:
    """
    Get the names of the built-in keyword themes

    Returns:
        List of theme names
    """
    return list(FALLBACK_THEMES.keys())


def get_fallback_keywords() -> Dict[str, List[str]]:
    """
    Get keyword lists for every built-in theme

    Returns:
        Dictionary mapping theme names to keyword lists
    """
    return {name: list(data["keywords"]) for name, data in FALLBACK_THEMES.items()}
