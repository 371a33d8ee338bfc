"""
Application settings and configuration

This file contains all the settings for the comment analysis pipeline.
Think of it like a control panel where you can adjust how the system works.

Most settings can be changed by creating a .env file in the project root.
If a setting isn't in .env, it uses the default value shown here.
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file (if it exists)
load_dotenv()


class Settings:
    """
    Application configuration settings

    This class holds all the configuration for the entire application.
    You can change these values by setting environment variables in a .env file.
    """

    # ============================================================
    # Gemini API Settings
    # ============================================================
    # Gemini is used to:
    # - Discover the themes present in a sample of comments
    # - Assign every comment to one of those themes
    # - Answer questions about a finished analysis
    # Leave the key empty to run fully offline (keyword fallback)
    GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")

    # ============================================================
    # Theme Discovery
    # ============================================================
    # Discovery only looks at the first N comments
    # Large datasets use the smaller sample to save tokens
    DISCOVERY_SAMPLE_SIZE = int(os.getenv("DISCOVERY_SAMPLE_SIZE", "50"))
    DISCOVERY_SAMPLE_SIZE_LARGE = int(os.getenv("DISCOVERY_SAMPLE_SIZE_LARGE", "30"))
    DISCOVERY_MAX_OUTPUT_TOKENS = int(os.getenv("DISCOVERY_MAX_OUTPUT_TOKENS", "1000"))
    DISCOVERY_TEMPERATURE = float(os.getenv("DISCOVERY_TEMPERATURE", "0.3"))

    # ============================================================
    # Batch Classification & Rate Limiting
    # ============================================================
    # batch size = max(MIN_BATCH_SIZE, ceil(total / MAX_BATCHES))
    CLASSIFY_MAX_BATCHES = int(os.getenv("CLASSIFY_MAX_BATCHES", "10"))
    CLASSIFY_MIN_BATCH_SIZE = int(os.getenv("CLASSIFY_MIN_BATCH_SIZE", "50"))
    CLASSIFY_MAX_OUTPUT_TOKENS = int(os.getenv("CLASSIFY_MAX_OUTPUT_TOKENS", "1500"))
    CLASSIFY_TEMPERATURE = float(os.getenv("CLASSIFY_TEMPERATURE", "0.1"))
    LLM_BATCH_DELAY = float(os.getenv("LLM_BATCH_DELAY", "10.0"))  # Wait between batches
    LLM_RATE_LIMIT_DELAY = float(os.getenv("LLM_RATE_LIMIT_DELAY", "60.0"))  # Wait once if rate limited
    # Where comments go when a batch can't be classified:
    # "first_theme" = first discovered theme, "catch_all" = Uncategorized
    DEGRADED_THEME_POLICY = os.getenv("DEGRADED_THEME_POLICY", "first_theme")

    # ============================================================
    # Corpus Preparation
    # ============================================================
    MIN_COMMENT_LENGTH = int(os.getenv("MIN_COMMENT_LENGTH", "3"))  # Drop comments this short or shorter
    TOKENS_PER_COMMENT = int(os.getenv("TOKENS_PER_COMMENT", "20"))  # Conservative estimate
    LARGE_DATASET_TOKENS = int(os.getenv("LARGE_DATASET_TOKENS", "25000"))  # Warn above this
    MAX_DATASET_TOKENS = int(os.getenv("MAX_DATASET_TOKENS", "50000"))  # Refuse above this

    # ============================================================
    # Chat Assistant
    # ============================================================
    CHAT_MAX_OUTPUT_TOKENS = int(os.getenv("CHAT_MAX_OUTPUT_TOKENS", "500"))
    CHAT_TEMPERATURE = float(os.getenv("CHAT_TEMPERATURE", "0.3"))

    # ============================================================
    # Logging Settings
    # ============================================================
    # Options: DEBUG (very detailed), INFO (normal), WARNING (only problems), ERROR (only errors)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")

    def is_llm_configured(self) -> bool:
        """Return True when a Gemini API key is available"""
        return bool(self.GEMINI_API_KEY)


# Global settings instance
settings = Settings()
