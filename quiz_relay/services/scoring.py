"""Score derivations used by the report: percentages, sections, tiers."""
import math
from typing import Dict, Iterable, List, Sequence, Tuple

from quiz_relay.config import (
    PERFORMANCE_TIERS,
    PROGRESS_BAR_WIDTH,
    RECOMMENDATIONS,
    SECTION_MARKS,
    WEAK_SECTION_THRESHOLD,
)
from quiz_relay.models import Answer, SectionStat

FILLED_SYMBOL = "█"
EMPTY_SYMBOL = "░"


def _round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (2.5 -> 3, not 2)."""
    return math.floor(value + 0.5)


def calculate_percentage(score: int, total: int) -> int:
    """
    Процент правильных ответов.

    Args:
        score: Количество правильных ответов
        total: Общее количество вопросов (> 0)

    Returns:
        Целый процент в диапазоне [0, 100] при 0 <= score <= total
    """
    if total <= 0:
        raise ValueError("total must be positive")
    return _round_half_up(score * 100 / total)


def format_duration(seconds: int) -> str:
    """125 -> '2m 5s'."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}m {secs}s"


def fold_sections(answers: Iterable[Answer]) -> Dict[str, SectionStat]:
    """Группирует ответы по разделам в порядке первого появления раздела."""
    sections: Dict[str, SectionStat] = {}
    for answer in answers:
        stat = sections.setdefault(answer.section, SectionStat())
        stat.total += 1
        if answer.is_correct:
            stat.correct += 1
    return sections


def section_percentage(stat: SectionStat) -> int:
    if stat.total == 0:
        return 0
    return calculate_percentage(stat.correct, stat.total)


def _pick_band(value: int, bands: Sequence[Tuple[int, object]]):
    """Первый диапазон сверху, порог которого не превышает value."""
    for threshold, item in bands:
        if value >= threshold:
            return item
    return bands[-1][1]


def performance_tier(percentage: int, tiers=PERFORMANCE_TIERS) -> str:
    return _pick_band(percentage, tiers)


def section_mark(percentage: int, marks=SECTION_MARKS) -> str:
    return _pick_band(percentage, marks)


def recommendations(percentage: int, table=RECOMMENDATIONS) -> List[str]:
    return list(_pick_band(percentage, table))


def weak_sections(
    sections: Dict[str, SectionStat],
    threshold: float = WEAK_SECTION_THRESHOLD,
) -> List[str]:
    """Разделы с долей правильных ответов ниже порога."""
    return [
        name for name, stat in sections.items()
        if stat.total > 0 and stat.ratio < threshold
    ]


def progress_bar(percentage: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """60 -> '██████░░░░'."""
    filled = _round_half_up(percentage * width / 100)
    filled = max(0, min(width, filled))
    return FILLED_SYMBOL * filled + EMPTY_SYMBOL * (width - filled)
