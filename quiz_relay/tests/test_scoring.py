"""Тесты расчёта процентов, разделов, уровней и прогресс-бара."""
import pytest

from pydantic import ValidationError

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


# ============================================================================
# ПРОЦЕНТЫ И ВРЕМЯ
# ============================================================================


class TestPercentage:
    """Тесты calculate_percentage."""

    def test_seven_of_ten(self):
        """7 из 10 — 70%."""
        assert calculate_percentage(7, 10) == 70

    def test_zero_score(self):
        """Ноль баллов — валидный результат, 0%."""
        assert calculate_percentage(0, 10) == 0

    def test_full_score(self):
        assert calculate_percentage(12, 12) == 100

    def test_half_rounds_up(self):
        """1 из 8 = 12.5% — округляется вверх до 13."""
        assert calculate_percentage(1, 8) == 13

    def test_rounding_down(self):
        """4 из 7 = 57.14% — 57."""
        assert calculate_percentage(4, 7) == 57

    @pytest.mark.parametrize("total", [1, 3, 7, 9, 13, 40])
    def test_always_within_bounds(self, total):
        """Для любого 0 <= score <= total процент лежит в [0, 100]."""
        for score in range(total + 1):
            assert 0 <= calculate_percentage(score, total) <= 100

    def test_zero_total_rejected(self):
        with pytest.raises(ValueError):
            calculate_percentage(0, 0)


class TestFormatDuration:
    """Тесты форматирования времени прохождения."""

    def test_minutes_and_seconds(self):
        assert format_duration(125) == "2m 5s"

    def test_under_a_minute(self):
        assert format_duration(59) == "0m 59s"

    def test_exact_minutes(self):
        assert format_duration(600) == "10m 0s"

    def test_zero(self):
        assert format_duration(0) == "0m 0s"


# ============================================================================
# РАЗДЕЛЫ
# ============================================================================


class TestFoldSections:
    """Тесты группировки ответов по разделам."""

    def test_counts(self, sample_answers):
        """Подсчёт правильных и всего по каждому разделу."""
        sections = fold_sections(sample_answers)

        assert sections["Tenses"] == SectionStat(correct=2, total=3)
        assert sections["Articles"] == SectionStat(correct=1, total=3)
        assert sections["Prepositions"] == SectionStat(correct=1, total=1)

    def test_first_seen_order(self, sample_answers):
        """Порядок разделов — порядок первого появления."""
        sections = fold_sections(sample_answers)

        assert list(sections) == ["Tenses", "Articles", "Prepositions"]

    def test_totals_sum_to_answer_count(self, sample_answers):
        """Сумма total по разделам равна числу ответов, correct <= total."""
        sections = fold_sections(sample_answers)

        assert sum(stat.total for stat in sections.values()) == len(sample_answers)
        assert all(stat.correct <= stat.total for stat in sections.values())

    def test_empty_answers(self):
        """Пустой список ответов — ни одного раздела, без деления на ноль."""
        sections = fold_sections([])

        assert sections == {}
        assert weak_sections(sections) == []

    def test_section_percentage(self):
        assert section_percentage(SectionStat(correct=3, total=5)) == 60
        assert section_percentage(SectionStat()) == 0


class TestWeakSections:
    """Тесты поиска слабых разделов (порог 70%)."""

    def test_weak_sections_detected(self, sample_answers):
        """Tenses 2/3 и Articles 1/3 ниже 70%, Prepositions 1/1 — нет."""
        sections = fold_sections(sample_answers)

        assert weak_sections(sections) == ["Tenses", "Articles"]

    def test_exactly_threshold_is_not_weak(self):
        """Ровно 70% слабым не считается."""
        sections = {"Reading": SectionStat(correct=7, total=10)}

        assert weak_sections(sections) == []

    def test_custom_threshold(self):
        sections = {"Reading": SectionStat(correct=7, total=10)}

        assert weak_sections(sections, threshold=0.8) == ["Reading"]


# ============================================================================
# УРОВНИ, ОТМЕТКИ, РЕКОМЕНДАЦИИ
# ============================================================================


class TestBands:
    """Тесты таблиц уровней: срабатывает первый сверху подходящий порог."""

    @pytest.mark.parametrize("percentage,expected", [
        (100, "🏆 EXCELLENT"),
        (90, "🏆 EXCELLENT"),
        (89, "🎯 VERY GOOD"),
        (80, "🎯 VERY GOOD"),
        (70, "👍 GOOD"),
        (65, "📚 SATISFACTORY"),
        (50, "⚠️ NEEDS IMPROVEMENT"),
        (49, "📖 UNSATISFACTORY"),
        (0, "📖 UNSATISFACTORY"),
    ])
    def test_performance_tier(self, percentage, expected):
        assert performance_tier(percentage) == expected

    def test_custom_tiers(self):
        """Таблица уровней конфигурируема."""
        tiers = [(75, "PASS"), (0, "FAIL")]

        assert performance_tier(75, tiers) == "PASS"
        assert performance_tier(74, tiers) == "FAIL"

    def test_section_marks(self):
        assert section_mark(80) == "✅"
        assert section_mark(60) == "⚠️"
        assert section_mark(59) == "❌"

    def test_recommendations(self):
        assert len(recommendations(85)) == 2
        assert recommendations(65)[0] == "Good effort. Focus on weak areas."
        assert recommendations(10)[-1] == "Take the test again after studying."


class TestProgressBar:
    """Тесты прогресс-бара шириной 10."""

    def test_sixty_percent(self):
        """3 из 5 = 60% — шесть заполненных, четыре пустых."""
        assert progress_bar(60) == "██████░░░░"

    def test_empty_and_full(self):
        assert progress_bar(0) == "░" * 10
        assert progress_bar(100) == "█" * 10

    def test_half_rounds_up(self):
        """45% — 4.5 деления, округляется до 5."""
        assert progress_bar(45) == "█████░░░░░"

    def test_width(self):
        assert len(progress_bar(33, width=20)) == 20


def test_answer_aliases():
    """Answer принимает camelCase-поля из JSON."""
    answer = Answer.model_validate({
        "section": "Tenses",
        "question": "Q",
        "userAnswer": "a",
        "correctAnswer": "b",
        "isCorrect": False,
    })

    assert answer.user_answer == "a"
    assert answer.correct_answer == "b"
    assert answer.is_correct is False


def test_answer_is_immutable():
    """Answer заморожен через model_config, изменить поле нельзя."""
    answer = Answer(section="Tenses", isCorrect=True)

    assert Answer.model_config["frozen"] is True
    with pytest.raises(ValidationError):
        answer.is_correct = False


def test_submission_strips_name():
    submission = Submission(name="  Anna  ", score=1, total=2, timeUsed=10, answers=[])

    assert Submission.model_config["str_strip_whitespace"] is True
    assert submission.name == "Anna"
