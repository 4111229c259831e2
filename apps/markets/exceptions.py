"""Domain exceptions for the markets app."""


class MarketServiceError(Exception):
    """Base exception for market service errors."""
    pass


class InvalidIdentifierError(MarketServiceError, ValueError):
    """Raised when an id cannot be parsed as a UUID."""
    pass


class MarketNotFoundError(MarketServiceError):
    """Raised when a market does not exist."""
    pass


class TraderNotFoundError(MarketServiceError):
    """Raised when a trader does not exist."""
    pass


class CaretakerNotFoundError(MarketServiceError):
    """Raised when a caretaker does not exist or works another market."""
    pass


class DuplicateTINError(MarketServiceError):
    """Raised when a trader with the same TIN is already registered."""
    pass


class InvalidLevyOverrideError(MarketServiceError):
    """Raised when a trader override has only one of amount and frequency."""
    pass


class InvalidQRCodeError(MarketServiceError):
    """Raised when a scanned payload is not a trader QR code."""
    pass
