"""
Layer 1: Data Import & Preparation
- CSV Loader (comment column auto-detection)
- Corpus Preparer (normalisation, size guards, processability check)
"""
from .csv_loader import load_comments_csv, detect_comment_columns
from .preparer import (
    PreparedCorpus,
    prepare_comments,
    extract_tokens,
    estimate_tokens,
    check_corpus_size,
    average_word_count,
)

__all__ = [
    'load_comments_csv',
    'detect_comment_columns',
    'PreparedCorpus',
    'prepare_comments',
    'extract_tokens',
    'estimate_tokens',
    'check_corpus_size',
    'average_word_count',
]
