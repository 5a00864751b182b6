"""
utils/errors.py
---------------
Error taxonomy shared by every layer.

    BotError
    ├── ValidationError        malformed command argument
    ├── NotFoundError          token / person / application absent
    │   └── TokenExpiredError  token exists but can no longer be redeemed
    ├── ConflictError          resource already owned by someone else
    ├── TransportError         Telegram send/receive failure
    └── UpstreamServiceError   repository / storage failure
"""


class BotError(Exception):
    """Base class for all errors raised by the bot."""


class ValidationError(BotError):
    """A command argument could not be parsed."""


class NotFoundError(BotError):
    """The requested entity does not exist."""


class TokenExpiredError(NotFoundError):
    """The token exists but its validity window has passed."""


class ConflictError(BotError):
    """The entity is already bound to a different owner."""


class TransportError(BotError):
    """Sending to or receiving from the chat platform failed."""


class UpstreamServiceError(BotError):
    """The database or another backing service failed."""
