"""
Domain exceptions for levy services.

Exception Hierarchy:
    LevyServiceError (base)
    ├── ConfigurationMissingError - no trader override and no active setup
    ├── LevyNotFoundError
    │   ├── MarketNotFoundError
    │   ├── TraderNotFoundError
    │   ├── CollectorNotFoundError
    │   ├── LevySetupNotFoundError
    │   └── LevyPaymentNotFoundError
    ├── InvalidLevyAmountError
    ├── InvalidIncentiveError
    ├── InvalidPaymentDetailsError
    ├── TraderMarketMismatchError
    ├── CollectorScopeError
    ├── DuplicateTransactionReferenceError
    ├── InvalidStateTransitionError
    └── LevySetupConflictError - lost a race to change the same rate
"""


class LevyServiceError(Exception):
    """Base exception for levy service errors."""
    pass


class ConfigurationMissingError(LevyServiceError):
    """Raised when no levy rate is configured for a trader's market and occupancy."""
    pass


class LevyNotFoundError(LevyServiceError):
    """Base for lookups that found no row."""
    pass


class MarketNotFoundError(LevyNotFoundError):
    pass


class TraderNotFoundError(LevyNotFoundError):
    pass


class CollectorNotFoundError(LevyNotFoundError):
    pass


class LevySetupNotFoundError(LevyNotFoundError):
    pass


class LevyPaymentNotFoundError(LevyNotFoundError):
    pass


class InvalidLevyAmountError(LevyServiceError):
    """Raised when an amount is not positive or exceeds the levy ceiling."""
    pass


class InvalidIncentiveError(LevyServiceError):
    """Raised when an incentive is not positive or not below the amount."""
    pass


class InvalidPaymentDetailsError(LevyServiceError):
    """Raised for notes that are too long or collection dates in the future."""
    pass


class TraderMarketMismatchError(LevyServiceError):
    """Raised when the trader is not registered in the given market."""
    pass


class CollectorScopeError(LevyServiceError):
    """Raised when a collector records a payment outside their market or caretaker."""
    pass


class DuplicateTransactionReferenceError(LevyServiceError):
    pass


class InvalidStateTransitionError(LevyServiceError):
    """Raised when a payment status change is not allowed."""
    pass


class LevySetupConflictError(LevyServiceError):
    """Raised when a concurrent change already activated a rate for the same triple."""
    pass
