"""Delivery of reports to a Telegram chat via aiogram."""
import asyncio
import logging
from typing import List, Optional

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.types import LinkPreviewOptions
from aiogram.utils.token import TokenValidationError

from quiz_relay.config import TelegramCredentials
from quiz_relay.models import DeliveryResult
from quiz_relay.services.report_builder import SECTION_DIVIDER
from .exceptions import ConfigurationError, DeliveryError

logger = logging.getLogger(__name__)

# Telegram принимает до 4096 единиц UTF-16, оставляем запас
MAX_MESSAGE_LENGTH = 4000

# Пауза между сообщениями, чтобы не упереться в rate limit
MESSAGE_DELAY_SECONDS = 1.0

DEFAULT_TIMEOUT_SECONDS = 10

CHUNK_DELIMITER = SECTION_DIVIDER + "\n"


def utf16_length(text: str) -> int:
    """Длина в единицах UTF-16, в которых Telegram считает лимит сообщения."""
    return len(text.encode("utf-16-le")) // 2


def _cut_point(line: str, max_length: int) -> int:
    """
    Индекс, до которого префикс line укладывается в max_length единиц UTF-16.

    Разрез не ставится сразу после обратного слэша, чтобы не разорвать
    экранированный символ Markdown между сообщениями.
    """
    size = 0
    cut = len(line)
    for index, char in enumerate(line):
        size += 2 if ord(char) > 0xFFFF else 1
        if size > max_length:
            cut = index
            break

    if 1 < cut < len(line) and line[cut - 1] == "\\":
        cut -= 1
    return max(cut, 1)


def _fit_segment(segment: str, max_length: int) -> List[str]:
    """Режет слишком длинный сегмент по строкам, а слишком длинную строку по max_length."""
    if utf16_length(segment) <= max_length:
        return [segment] if segment else []

    parts = []
    for line in segment.splitlines(keepends=True):
        while utf16_length(line) > max_length:
            cut = _cut_point(line, max_length)
            parts.append(line[:cut])
            line = line[cut:]
        if line:
            parts.append(line)
    return parts


def split_report(
    text: str,
    max_length: int = MAX_MESSAGE_LENGTH,
    delimiter: str = CHUNK_DELIMITER,
) -> List[str]:
    """
    Разбивает отчёт на сообщения не длиннее max_length единиц UTF-16.

    Текст режется по разделителю секций, каждая следующая секция начинается
    с разделителя. Секции жадно упаковываются в сообщения; секция, которая
    сама длиннее лимита, дополнительно режется по строкам.
    Склейка результата в точности равна исходному тексту.

    Args:
        text: Полный текст отчёта
        max_length: Максимальная длина одного сообщения
        delimiter: Строка-разделитель секций

    Returns:
        Список сообщений в порядке отправки
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")

    if utf16_length(text) <= max_length:
        return [text]

    pieces = text.split(delimiter)
    segments = [pieces[0]] + [delimiter + piece for piece in pieces[1:]]

    chunks: List[str] = []
    current = ""
    current_length = 0
    for segment in segments:
        for part in _fit_segment(segment, max_length):
            part_length = utf16_length(part)
            if current and current_length + part_length > max_length:
                chunks.append(current)
                current, current_length = part, part_length
            else:
                current += part
                current_length += part_length

    if current:
        chunks.append(current)

    return chunks


class ReportDispatcher:
    """Sends reports to one Telegram chat, splitting long ones into several messages."""

    def __init__(
        self,
        credentials: TelegramCredentials,
        max_length: int = MAX_MESSAGE_LENGTH,
        delay: float = MESSAGE_DELAY_SECONDS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        bot: Optional[Bot] = None,
    ):
        """
        Args:
            credentials: Токен бота и ID чата
            max_length: Максимальная длина одного сообщения
            delay: Пауза между сообщениями в секундах
            timeout: Таймаут одного запроса sendMessage в секундах
            bot: Готовый экземпляр Bot (для тестов)

        Raises:
            ConfigurationError: Токен или ID чата не заданы, либо токен невалиден
        """
        if not credentials.is_complete:
            raise ConfigurationError("Telegram credentials are not set")

        if bot is None:
            try:
                bot = Bot(token=credentials.token)
            except TokenValidationError as e:
                raise ConfigurationError(f"Invalid Telegram bot token: {e}") from e

        self.bot = bot
        self.chat_id = credentials.chat_id
        self.max_length = max_length
        self.delay = delay
        self.timeout = timeout

    async def _send_chunk(self, text: str) -> None:
        try:
            await self.bot.send_message(
                chat_id=self.chat_id,
                text=text,
                parse_mode=ParseMode.MARKDOWN,
                link_preview_options=LinkPreviewOptions(is_disabled=True),
                request_timeout=self.timeout,
            )
        except TelegramAPIError as e:
            raise DeliveryError(e.message or "Telegram API error") from e

    async def send_report(self, report: str) -> DeliveryResult:
        """
        Отправляет отчёт строго последовательно, с паузой между сообщениями.

        Первое неудачное сообщение прерывает отправку, и весь результат
        считается неудачным.
        """
        chunks = split_report(report, self.max_length)
        result = DeliveryResult(ok=False, chunks_total=len(chunks))

        for i, chunk in enumerate(chunks):
            if i > 0 and self.delay > 0:
                await asyncio.sleep(self.delay)

            logger.debug(
                "Sending report chunk %d/%d (%d UTF-16 units)",
                i + 1, len(chunks), utf16_length(chunk),
            )
            try:
                await self._send_chunk(chunk)
            except DeliveryError as e:
                logger.error(
                    "Telegram rejected chunk %d/%d: %s", i + 1, len(chunks), e.description
                )
                result.error = e.description
                return result

            result.chunks_sent += 1

        result.ok = True
        return result

    async def close(self) -> None:
        """Close the bot HTTP session."""
        await self.bot.session.close()
