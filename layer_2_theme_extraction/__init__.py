"""
Layer 2: Theme extraction pipeline (theme discovery + batch classification, keyword fallback).
"""
from .theme_config import (
    FALLBACK_THEMES,
    UNCATEGORIZED_THEME,
    OTHER_THEME,
    DEGRADED_CONFIDENCE,
    get_fallback_themes,
    get_theme_list,
    get_fallback_keywords,
)
from .response_parser import ParsedPayload, ParseStatus, parse_payload, repair_truncated_json
from .discoverer import ThemeDiscoverer
from .classifier import (
    BatchClassifier,
    BatchOutcome,
    BatchResult,
    ClassificationRun,
    plan_batches,
    verify_coverage,
)
from .fallback_classifier import KeywordClassifier
from .classify_comments import ThemeClassification, classify_comments

__all__ = [
    'FALLBACK_THEMES',
    'UNCATEGORIZED_THEME',
    'OTHER_THEME',
    'DEGRADED_CONFIDENCE',
    'get_fallback_themes',
    'get_theme_list',
    'get_fallback_keywords',
    'ParsedPayload',
    'ParseStatus',
    'parse_payload',
    'repair_truncated_json',
    'ThemeDiscoverer',
    'BatchClassifier',
    'BatchOutcome',
    'BatchResult',
    'ClassificationRun',
    'plan_batches',
    'verify_coverage',
    'KeywordClassifier',
    'ThemeClassification',
    'classify_comments',
]
