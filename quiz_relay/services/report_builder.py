"""Builds the Telegram report (legacy Markdown) for a quiz submission."""
from datetime import datetime
from typing import Dict, List, Optional

from quiz_relay.models import Answer, SectionStat, Submission
from quiz_relay.services.scoring import (
    calculate_percentage,
    fold_sections,
    format_duration,
    performance_tier,
    progress_bar,
    recommendations,
    section_mark,
    section_percentage,
    weak_sections,
)

# Section divider line; the dispatcher splits long reports on it
SECTION_DIVIDER = "━" * 20

DEFAULT_TITLE = "ENGLISH GRAMMAR TEST RESULT"

_MARKDOWN_SPECIAL = ("_", "*", "`", "[")


def escape_markdown(text: str) -> str:
    """Экранирует пользовательский текст вне сущностей для parse_mode=Markdown."""
    for char in _MARKDOWN_SPECIAL:
        text = text.replace(char, f"\\{char}")
    return text


def bold(text: str) -> str:
    """
    Жирный текст для parse_mode=Markdown.

    Внутри сущности экранирование не работает, а вложенные сущности
    не разбираются, поэтому убирается только закрывающий символ '*'.
    """
    return f"*{text.replace('*', '')}*"


def _format_date(moment: datetime) -> str:
    """'Monday, October 19, 2026'."""
    return f"{moment:%A}, {moment:%B} {moment.day}, {moment.year}"


def _format_time(moment: datetime) -> str:
    """'06:38 AM'."""
    return moment.strftime("%I:%M %p")


def _heading(title: str) -> List[str]:
    return [bold(title), SECTION_DIVIDER]


def _header_block(submission: Submission, submitted_at: datetime, title: str) -> List[str]:
    lines = [
        f"📊 {bold(title)}",
        "",
        f"*Candidate:* {escape_markdown(submission.name)}",
        f"*Date:* {_format_date(submitted_at)}",
        f"*Time:* {_format_time(submitted_at)}",
        f"*Duration:* {format_duration(submission.time_used)}",
    ]
    if submission.test_duration is not None:
        lines.append(f"*Time limit:* {submission.test_duration} min")
    lines.append("")
    return lines


def _sections_block(sections: Dict[str, SectionStat]) -> List[str]:
    lines = _heading("SECTION-WISE PERFORMANCE")
    if not sections:
        lines.extend(["No answers were submitted.", ""])
        return lines

    for name, stat in sections.items():
        percent = section_percentage(stat)
        lines.append(f"{section_mark(percent)} {bold(name)}")
        lines.append(f"   {progress_bar(percent)} {percent}%")
        lines.append(f"   {stat.correct}/{stat.total} correct")
        lines.append("")
    return lines


def _weak_block(weak: List[str]) -> List[str]:
    lines = _heading("AREAS NEEDING IMPROVEMENT")
    if weak:
        lines.extend(f"• {escape_markdown(name)}" for name in weak)
    else:
        lines.append("✅ No weak areas, every section is at 70% or above.")
    lines.append("")
    return lines


def _questions_block(answers: List[Answer], sample_size: int) -> List[str]:
    if sample_size and len(answers) > sample_size:
        lines = _heading("SAMPLE QUESTIONS ANALYSIS")
        answers = answers[:sample_size]
    else:
        lines = _heading("QUESTIONS ANALYSIS")

    for index, answer in enumerate(answers, 1):
        mark = "✅" if answer.is_correct else "❌"
        lines.append(f"{mark} Q{index}: {escape_markdown(answer.question)}")
        lines.append(f"   Your answer: {escape_markdown(answer.user_answer)}")
        if not answer.is_correct:
            lines.append(f"   Correct: {escape_markdown(answer.correct_answer)}")
        lines.append("")
    return lines


def build_report(
    submission: Submission,
    submitted_at: Optional[datetime] = None,
    title: str = DEFAULT_TITLE,
    sample_size: int = 5,
) -> str:
    """
    Собирает текстовый отчёт о прохождении теста.

    Args:
        submission: Проверенная заявка
        submitted_at: Момент отправки (по умолчанию текущее время)
        title: Заголовок отчёта
        sample_size: Сколько вопросов показать (0 = все)

    Returns:
        Текст отчёта в формате Telegram Markdown
    """
    if submitted_at is None:
        submitted_at = datetime.now()

    percentage = calculate_percentage(submission.score, submission.total)
    sections = fold_sections(submission.answers)

    lines = _header_block(submission, submitted_at, title)

    lines.extend(_heading("OVERALL SCORE"))
    lines.append(f"🎯 *{submission.score}/{submission.total} ({percentage}%)*")
    lines.append("")
    lines.append(f"*Performance:* {performance_tier(percentage)}")
    lines.append("")

    lines.extend(_sections_block(sections))
    lines.extend(_weak_block(weak_sections(sections)))
    lines.extend(_questions_block(list(submission.answers), sample_size))

    lines.extend(_heading("RECOMMENDATIONS"))
    lines.extend(f"• {line}" for line in recommendations(percentage))
    lines.append("")
    lines.append("Test completed successfully! 🎉")

    return "\n".join(lines)
