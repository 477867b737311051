"""Main entry point for the quiz report relay."""
import logging
import sys
from typing import Optional

from aiohttp import web

from quiz_relay.config import Settings, settings as default_settings
from quiz_relay.handlers.submit import (
    DISPATCHER_KEY,
    SETTINGS_KEY,
    make_cors_middleware,
    submit_test,
)
from quiz_relay.telegram_api.dispatcher import ReportDispatcher
from quiz_relay.telegram_api.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def build_dispatcher(settings: Settings) -> Optional[ReportDispatcher]:
    """Создаёт диспетчер отчётов; None, если Telegram не настроен."""
    try:
        return ReportDispatcher(
            settings.telegram_credentials(),
            max_length=settings.TELEGRAM_MAX_MESSAGE_LENGTH,
            delay=settings.TELEGRAM_MESSAGE_DELAY,
            timeout=settings.TELEGRAM_TIMEOUT,
        )
    except ConfigurationError as e:
        logger.error("Telegram notifications disabled: %s", e)
        return None


async def index(request: web.Request) -> web.Response:
    """Root endpoint"""
    return web.json_response({
        "message": "Quiz Report Relay",
        "submit": request.app[SETTINGS_KEY].SUBMIT_PATH,
    })


async def health_check(request: web.Request) -> web.Response:
    """Health check endpoint"""
    return web.json_response({
        "status": "healthy",
        "telegram_configured": request.app[DISPATCHER_KEY] is not None,
    })


async def _close_dispatcher(app: web.Application) -> None:
    dispatcher = app[DISPATCHER_KEY]
    if dispatcher is not None:
        await dispatcher.close()
    logger.info("Quiz report relay stopped")


def create_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[ReportDispatcher] = None,
) -> web.Application:
    """
    Собирает aiohttp-приложение.

    Args:
        settings: Настройки (по умолчанию из окружения)
        dispatcher: Готовый диспетчер; если не передан, строится из settings

    Returns:
        Приложение с зарегистрированными маршрутами
    """
    settings = settings or default_settings
    if dispatcher is None:
        dispatcher = build_dispatcher(settings)

    middlewares = []
    if settings.CORS_ENABLED:
        middlewares.append(make_cors_middleware(settings.CORS_ALLOW_ORIGIN))

    app = web.Application(middlewares=middlewares)
    app[SETTINGS_KEY] = settings
    app[DISPATCHER_KEY] = dispatcher

    app.router.add_get("/", index)
    app.router.add_get("/health", health_check)
    # Все методы идут в обработчик, он сам отвечает 405 в JSON
    app.router.add_route("*", settings.SUBMIT_PATH, submit_test)

    app.on_cleanup.append(_close_dispatcher)
    return app


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def main():
    """Start the HTTP server."""
    setup_logging(default_settings.LOG_LEVEL)
    logger.info("Starting quiz report relay on %s:%d", default_settings.HOST, default_settings.PORT)

    try:
        web.run_app(
            create_app(default_settings),
            host=default_settings.HOST,
            port=default_settings.PORT,
            print=None,
        )
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
