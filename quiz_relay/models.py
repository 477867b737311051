"""Data models for quiz submissions and report delivery."""
from dataclasses import dataclass
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Answer(BaseModel):
    """Single answered question as sent by the quiz page."""
    section: str = Field(..., min_length=1)
    question: str = ""
    user_answer: str = Field(default="", alias="userAnswer")
    correct_answer: str = Field(default="", alias="correctAnswer")
    is_correct: bool = Field(..., alias="isCorrect")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Submission(BaseModel):
    """Completed quiz submission (request body of the submit endpoint)."""
    name: str = Field(..., min_length=1)
    score: int = Field(..., ge=0)
    total: int = Field(..., gt=0)
    time_used: int = Field(..., ge=0, alias="timeUsed", description="Seconds spent on the test")
    answers: List[Answer]
    test_duration: Optional[int] = Field(
        default=None, ge=0, alias="testDuration", description="Time limit in minutes"
    )

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    @model_validator(mode="after")
    def _score_within_total(self):
        if self.score > self.total:
            raise ValueError("score must not exceed total")
        return self


@dataclass
class SectionStat:
    """Correct/total counters of one quiz section."""
    correct: int = 0
    total: int = 0

    @property
    def ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


@dataclass
class DeliveryResult:
    """Outcome of delivering a report to Telegram."""
    ok: bool
    chunks_total: int = 0
    chunks_sent: int = 0
    error: Optional[str] = None
