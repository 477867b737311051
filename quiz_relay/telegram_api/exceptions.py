"""Custom exceptions for report delivery."""


class RelayError(Exception):
    """Base exception for report relay errors."""
    pass


class ConfigurationError(RelayError):
    """Telegram credentials are missing or invalid."""
    pass


class DeliveryError(RelayError):
    """Telegram did not accept a message."""

    def __init__(self, description: str = "Telegram API error"):
        super().__init__(description)
        self.description = description
