"""Quiz submission endpoint: validates, builds the report, relays it to Telegram."""
import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from aiohttp import web
from pydantic import ValidationError

from quiz_relay.config import Settings
from quiz_relay.models import Submission
from quiz_relay.services.report_builder import build_report
from quiz_relay.services.scoring import calculate_percentage, format_duration
from quiz_relay.telegram_api.dispatcher import ReportDispatcher

logger = logging.getLogger(__name__)

SETTINGS_KEY = web.AppKey("settings", Settings)
DISPATCHER_KEY = web.AppKey("dispatcher", Optional[ReportDispatcher])

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": "Content-Type",
}

_REQUIRED_FIELDS = {"name", "score", "total", "timeUsed", "answers"}


# ============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# ============================================================================

def _error_response(status: int, error: str, details: Optional[str] = None) -> web.Response:
    body = {"success": False, "error": error}
    if details:
        body["details"] = details
    return web.json_response(body, status=status)


def _is_missing(error: dict) -> bool:
    """Поле отсутствует, равно null или пустой строке."""
    loc = error.get("loc") or ()
    if not loc or loc[0] not in _REQUIRED_FIELDS or len(loc) > 1:
        return False
    return (
        error.get("type") in ("missing", "string_too_short")
        or error.get("input") is None
    )


def _describe_validation_error(exc: ValidationError) -> tuple:
    """Возвращает (error, details) для ответа 400."""
    errors = exc.errors()
    fields: List[str] = []
    for error in errors:
        field = ".".join(str(part) for part in error.get("loc", ())) or "body"
        fields.append(f"{field}: {error.get('msg')}")

    if any(_is_missing(error) for error in errors):
        return "Missing required fields", "; ".join(fields)
    return "Invalid submission", "; ".join(fields)


def _report_time(settings: Settings) -> datetime:
    try:
        return datetime.now(ZoneInfo(settings.TIMEZONE))
    except ZoneInfoNotFoundError:
        logger.warning("Unknown TIMEZONE %r, falling back to UTC", settings.TIMEZONE)
        return datetime.now(ZoneInfo("UTC"))


def _submission_data(submission: Submission, percentage: int, telegram_sent: bool) -> dict:
    return {
        "name": submission.name,
        "score": submission.score,
        "total": submission.total,
        "percentage": percentage,
        "timeUsed": submission.time_used,
        "timeFormatted": format_duration(submission.time_used),
        "telegramSent": telegram_sent,
    }


async def _deliver(
    dispatcher: ReportDispatcher, submission: Submission, settings: Settings
) -> bool:
    """Строит и отправляет отчёт. Никогда не бросает исключений."""
    try:
        report = build_report(
            submission,
            submitted_at=_report_time(settings),
            title=settings.REPORT_TITLE,
            sample_size=settings.REPORT_SAMPLE_QUESTIONS,
        )
        result = await dispatcher.send_report(report)
    except Exception:
        logger.exception("Telegram notification failed for %s", submission.name)
        return False

    if not result.ok:
        logger.error(
            "Telegram notification failed for %s after %d/%d messages: %s",
            submission.name, result.chunks_sent, result.chunks_total, result.error,
        )
    return result.ok


# ============================================================================
# MIDDLEWARE
# ============================================================================

def make_cors_middleware(allow_origin: str):
    """Adds CORS headers to every response."""

    @web.middleware
    async def cors_middleware(request: web.Request, handler):
        response = await handler(request)
        response.headers.update(CORS_HEADERS)
        response.headers["Access-Control-Allow-Origin"] = allow_origin
        return response

    return cors_middleware


# ============================================================================
# ОБРАБОТЧИК
# ============================================================================

async def submit_test(request: web.Request) -> web.Response:
    """Принимает результат теста и пересылает отчёт в Telegram."""
    settings = request.app[SETTINGS_KEY]

    if request.method == "OPTIONS" and settings.CORS_ENABLED:
        return web.Response(status=200)

    if request.method != "POST":
        return _error_response(405, "Method not allowed")

    try:
        try:
            payload = await request.json()
        except ValueError as e:
            logger.warning("Rejected submission with invalid JSON: %s", e)
            return _error_response(400, "Invalid JSON body", str(e))

        try:
            submission = Submission.model_validate(payload)
        except ValidationError as e:
            error, details = _describe_validation_error(e)
            logger.warning("Rejected submission: %s (%s)", error, details)
            return _error_response(400, error, details)

        percentage = calculate_percentage(submission.score, submission.total)
        time_formatted = format_duration(submission.time_used)
        dispatcher = request.app[DISPATCHER_KEY]

        if dispatcher is None:
            logger.error("Telegram credentials not set in environment variables")
            logger.info(
                "Test result (Telegram not configured): name=%s score=%d/%d time=%s",
                submission.name, submission.score, submission.total, time_formatted,
            )
            return web.json_response({
                "success": True,
                "message": "Test submitted successfully (Telegram not configured)",
                "data": _submission_data(submission, percentage, False),
            })

        telegram_sent = await _deliver(dispatcher, submission, settings)

        logger.info(
            "Test submitted: name=%s score=%d/%d percentage=%d%% time=%s telegram_sent=%s",
            submission.name, submission.score, submission.total,
            percentage, time_formatted, telegram_sent,
        )

        if telegram_sent:
            message = "Test submitted successfully"
        else:
            message = "Test submitted (Telegram notification failed)"

        return web.json_response({
            "success": True,
            "message": message,
            "data": _submission_data(submission, percentage, telegram_sent),
        })

    except Exception as e:
        logger.exception("Error processing submission")
        return _error_response(500, "Internal server error", str(e))
