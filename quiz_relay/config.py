"""Configuration settings using pydantic-settings."""
from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field


@dataclass(frozen=True)
class TelegramCredentials:
    """Bot token and destination chat for report delivery."""
    token: Optional[str]
    chat_id: Optional[str]

    @property
    def is_complete(self) -> bool:
        return bool(self.token) and bool(self.chat_id)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Telegram
    TELEGRAM_BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Telegram Bot API token"
    )
    TELEGRAM_CHAT_ID: Optional[str] = Field(
        default=None,
        description="Chat ID (or @channel) that receives reports"
    )
    TELEGRAM_TIMEOUT: float = Field(
        default=10,
        description="Timeout for a single sendMessage call in seconds"
    )
    TELEGRAM_MAX_MESSAGE_LENGTH: int = Field(
        default=4000,
        description="Maximum length of one message (Telegram hard limit is 4096)"
    )
    TELEGRAM_MESSAGE_DELAY: float = Field(
        default=1.0,
        description="Pause between consecutive messages in seconds"
    )

    # HTTP server
    HOST: str = Field(default="0.0.0.0", description="Bind address")
    PORT: int = Field(default=8000, description="Bind port")
    SUBMIT_PATH: str = Field(
        default="/api/submit-test",
        description="Path of the submission endpoint"
    )
    CORS_ENABLED: bool = Field(
        default=True,
        description="Send CORS headers and answer preflight requests"
    )
    CORS_ALLOW_ORIGIN: str = Field(
        default="*",
        description="Value of Access-Control-Allow-Origin"
    )

    # Report
    REPORT_TITLE: str = Field(
        default="ENGLISH GRAMMAR TEST RESULT",
        description="Heading of the report"
    )
    REPORT_SAMPLE_QUESTIONS: int = Field(
        default=5,
        ge=0,
        description="How many questions to list in the report (0 = all)"
    )
    TIMEZONE: str = Field(
        default="UTC",
        description="Timezone for the report date and time"
    )

    # Logging
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    class Config:
        """Pydantic config."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    def telegram_credentials(self) -> TelegramCredentials:
        return TelegramCredentials(
            token=self.TELEGRAM_BOT_TOKEN,
            chat_id=self.TELEGRAM_CHAT_ID,
        )


# Performance bands, highest threshold first. The first matching band wins.
PERFORMANCE_TIERS = [
    (90, "🏆 EXCELLENT"),
    (80, "🎯 VERY GOOD"),
    (70, "👍 GOOD"),
    (60, "📚 SATISFACTORY"),
    (50, "⚠️ NEEDS IMPROVEMENT"),
    (0, "📖 UNSATISFACTORY"),
]

# Section marks, highest threshold first
SECTION_MARKS = [
    (80, "✅"),
    (60, "⚠️"),
    (0, "❌"),
]

RECOMMENDATIONS = [
    (80, [
        "Excellent performance! Maintain regular practice.",
        "Consider more advanced grammar topics.",
    ]),
    (60, [
        "Good effort. Focus on weak areas.",
        "Review incorrect answers.",
    ]),
    (0, [
        "Review basic grammar rules.",
        "Practice each section thoroughly.",
        "Take the test again after studying.",
    ]),
]

# Sections answered correctly less often than this are flagged as weak
WEAK_SECTION_THRESHOLD = 0.7

PROGRESS_BAR_WIDTH = 10


# Global settings instance
settings = Settings()
