"""Общие фикстуры для тестов ретранслятора отчётов."""
import pytest
from datetime import datetime

from quiz_relay.config import Settings, TelegramCredentials
from quiz_relay.models import Answer, Submission


@pytest.fixture
def sample_answers():
    """Семь ответов в трёх разделах, разделы идут вперемешку."""
    return [
        Answer(section="Tenses", question="She ___ to school every day.",
               userAnswer="goes", correctAnswer="goes", isCorrect=True),
        Answer(section="Articles", question="I saw ___ elephant.",
               userAnswer="a", correctAnswer="an", isCorrect=False),
        Answer(section="Tenses", question="They ___ dinner now.",
               userAnswer="are having", correctAnswer="are having", isCorrect=True),
        Answer(section="Prepositions", question="The book is ___ the table.",
               userAnswer="on", correctAnswer="on", isCorrect=True),
        Answer(section="Articles", question="___ sun is bright.",
               userAnswer="The", correctAnswer="The", isCorrect=True),
        Answer(section="Tenses", question="He ___ here since 2010.",
               userAnswer="lives", correctAnswer="has lived", isCorrect=False),
        Answer(section="Articles", question="She is ___ honest person.",
               userAnswer="a", correctAnswer="an", isCorrect=False),
    ]


@pytest.fixture
def sample_submission(sample_answers):
    """Заявка: 4 из 7, 2 минуты 5 секунд."""
    return Submission(
        name="Anna Petrova",
        score=4,
        total=7,
        timeUsed=125,
        answers=sample_answers,
    )


@pytest.fixture
def sample_payload():
    """JSON-тело запроса в том виде, как его шлёт страница теста."""
    return {
        "name": "Anna Petrova",
        "score": 7,
        "total": 10,
        "timeUsed": 125,
        "answers": [
            {
                "section": "Tenses",
                "question": "She ___ to school every day.",
                "userAnswer": "goes",
                "correctAnswer": "goes",
                "isCorrect": True,
            },
            {
                "section": "Articles",
                "question": "I saw ___ elephant.",
                "userAnswer": "a",
                "correctAnswer": "an",
                "isCorrect": False,
            },
        ],
    }


@pytest.fixture
def fixed_now():
    """Фиксированный момент отправки (понедельник, утро)."""
    return datetime(2026, 10, 19, 6, 38)


@pytest.fixture
def credentials():
    return TelegramCredentials(token="123456:TEST-token", chat_id="-100200300")


@pytest.fixture
def unconfigured_settings():
    """Настройки без токена и чата Telegram."""
    return Settings(
        _env_file=None,
        TELEGRAM_BOT_TOKEN=None,
        TELEGRAM_CHAT_ID=None,
        TIMEZONE="UTC",
    )


@pytest.fixture
def configured_settings():
    return Settings(
        _env_file=None,
        TELEGRAM_BOT_TOKEN="123456:TEST-token",
        TELEGRAM_CHAT_ID="-100200300",
        TELEGRAM_MESSAGE_DELAY=0,
        TIMEZONE="UTC",
    )
