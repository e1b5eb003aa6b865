class MessagelyError(Exception):
    """Base class for errors raised by the identity and messaging core."""


class ConflictError(MessagelyError):
    """A user with this username already exists."""


class NotFoundError(MessagelyError):
    """The referenced username is not in the store."""


class ConfigurationError(MessagelyError):
    """Secret key or hashing cost is missing or invalid. Fatal at startup."""


class InvalidTokenError(MessagelyError):
    """A session token failed signature, expiry or claim validation."""
