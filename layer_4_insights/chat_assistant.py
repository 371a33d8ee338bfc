"""
Answer questions about a finished analysis using Gemini
"""
from typing import Any, Dict, Optional, Union

from models.analysis import AnalysisResult
from config.settings import settings
from utils.exceptions import ChatUnavailable
from utils.llm_client import LLMClient
from utils.logger import get_logger

logger = get_logger(__name__)

NO_ANALYSIS_MESSAGE = "No analysis data available. Please ask the user to upload and analyze a CSV file first."


def build_analysis_context(analysis: Optional[Union[AnalysisResult, Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """
    Reduce an analysis to the figures the assistant may quote

    Args:
        analysis: AnalysisResult or its to_dict() form

    Returns:
        Dictionary with total_comments and per-theme figures, or None
    """
    if analysis is None:
        return None
    if isinstance(analysis, AnalysisResult):
        analysis = analysis.to_dict()

    themes = []
    for topic in analysis.get("topics") or []:
        sentiment = topic.get("sentiment") or {}
        distribution = sentiment.get("distribution") or {}
        themes.append({
            "name": topic.get("title"),
            "percentage": topic.get("percentage", 0),
            "volume": topic.get("volume", 0),
            "sentiment": sentiment.get("classification"),
            "description": topic.get("description", ""),
            "breakdown": {
                key: distribution.get(key, 0)
                for key in (
                    "positive", "negative", "neutral",
                    "positive_percentage", "negative_percentage", "neutral_percentage",
                )
            },
        })
    return {"total_comments": analysis.get("total_comments", 0), "themes": themes}


class AnalysisChatAssistant:
    """Chat over analysis results, answering only from the supplied figures"""

    def __init__(self, llm_client: Optional[LLMClient] = None):
        """
        Initialize assistant

        Args:
            llm_client: LLM client instance; None means chat is unavailable
        """
        self.llm_client = llm_client

    def answer(self, message: str, analysis: Optional[Union[AnalysisResult, Dict[str, Any]]] = None) -> str:
        """
        Answer a user question about the analysis

        Args:
            message: User question
            analysis: Analysis to ground the answer in

        Returns:
            Answer text

        Raises:
            ValueError: message is empty
            ChatUnavailable: no LLM client is configured
        """
        if not message or not message.strip():
            raise ValueError("Message is required")
        if self.llm_client is None:
            raise ChatUnavailable("Gemini API not configured")

        prompt = self._build_chat_prompt(message.strip(), build_analysis_context(analysis))
        logger.info(f"Answering chat question ({len(message)} chars)")
        return self.llm_client.generate(
            prompt,
            max_output_tokens=settings.CHAT_MAX_OUTPUT_TOKENS,
            temperature=settings.CHAT_TEMPERATURE,
        )

    def _build_chat_prompt(self, message: str, context: Optional[Dict[str, Any]]) -> str:
        if context is None:
            data_block = NO_ANALYSIS_MESSAGE
        else:
            theme_lines = ""
            for theme in context["themes"]:
                breakdown = theme["breakdown"]
                theme_lines += (
                    f"\n- {theme['name']}: {theme['volume']} comments ({theme['percentage']}%)\n"
                    f"  - Overall Sentiment: {theme['sentiment']}\n"
                    f"  - Breakdown: {breakdown['positive']} positive ({breakdown['positive_percentage']}%), "
                    f"{breakdown['negative']} negative ({breakdown['negative_percentage']}%), "
                    f"{breakdown['neutral']} neutral ({breakdown['neutral_percentage']}%)\n"
                    f"  - Description: {theme['description']}\n"
                )
            data_block = (
                f"ANALYSIS DATA:\n"
                f"- Total Comments: {context['total_comments']}\n"
                f"- Themes Identified: {len(context['themes'])}\n\n"
                f"THEMES BREAKDOWN:{theme_lines}"
            )

        return f"""You are an AI assistant analyzing comment data. You have access to the following analysis results:

{data_block}

User Question: {message}

Instructions:
1. ONLY use the provided analysis data above to answer questions
2. Be specific with numbers and percentages from the data
3. If asked about themes not in the data, say they weren't found
4. Provide actionable insights based on the sentiment and volume data
5. Keep responses concise but informative

Answer the user's question based solely on this analysis data:"""
