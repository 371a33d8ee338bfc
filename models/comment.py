"""
Comment data model
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class Comment:
    """One free-text comment in the corpus being analysed"""
    index: int  # 0-based, assigned once when the corpus is prepared
    text: str  # Lowercased and stripped

    def __post_init__(self):
        if self.index < 0:
            raise ValueError(f"Comment index must be non-negative, got {self.index}")

    @property
    def word_count(self) -> int:
        return len(self.text.split())
