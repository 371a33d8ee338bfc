"""
Load comment texts from a CSV export
"""
from typing import List, Optional, Sequence

import pandas as pd

from utils.logger import get_logger

logger = get_logger(__name__)

# Columns whose average length over the first rows exceeds this look like comments
MIN_AVG_COMMENT_LENGTH = 10
DETECTION_ROWS = 10
FALLBACK_DETECTION_ROWS = 5


def detect_comment_columns(frame: pd.DataFrame) -> List[str]:
    """
    Guess which columns hold free-text comments

    Args:
        frame: CSV contents with every cell as a string

    Returns:
        Column names, in CSV order
    """
    head = frame.head(DETECTION_ROWS)
    columns = [
        column for column in frame.columns
        # Divide by the fixed window so short files are not over-weighted
        if head[column].str.len().sum() / DETECTION_ROWS > MIN_AVG_COMMENT_LENGTH
    ]
    if columns:
        return columns

    logger.info("No comment columns detected, using all columns with text data")
    head = frame.head(FALLBACK_DETECTION_ROWS)
    return [
        column for column in frame.columns
        if any(value.strip() and not _is_number(value) for value in head[column])
    ]


def load_comments_csv(path: str, columns: Optional[Sequence[str]] = None) -> List[str]:
    """
    Read a CSV file and return one joined comment text per row

    Args:
        path: CSV file path
        columns: Columns to read; auto-detected when omitted

    Returns:
        Raw comment texts (not yet normalised)
    """
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)
    logger.info(f"Processing {len(frame)} rows from CSV")

    if frame.empty:
        return []

    logger.info(f"CSV columns found: {list(frame.columns)}")
    selected = list(columns) if columns else detect_comment_columns(frame)
    logger.info(f"Detected comment columns: {selected}")

    if not selected:
        return []
    return frame[selected].agg(" ".join, axis=1).tolist()


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True
