"""
Theme and classification data models
"""
from dataclasses import dataclass, field
from typing import Tuple


@dataclass(frozen=True)
class Theme:
    """A named category of semantically similar comments"""
    name: str
    description: str = ""
    keywords: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Theme name must be a non-empty string")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
        }


@dataclass(frozen=True)
class Classification:
    """Assignment of one comment to one theme"""
    comment_index: int  # 0-based index of the Comment
    theme_name: str
    confidence: float  # 0 to 1

    def __post_init__(self):
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"Confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> dict:
        return {
            "comment_index": self.comment_index,
            "theme_name": self.theme_name,
            "confidence": self.confidence,
        }
