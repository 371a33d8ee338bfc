"""
Layer 4: Insights (question answering over analysis results).
"""
from .chat_assistant import AnalysisChatAssistant, build_analysis_context

__all__ = [
    'AnalysisChatAssistant',
    'build_analysis_context',
]
