"""Levy services - setup resolution, payment recording and trader positions."""

from .exceptions import (
    LevyServiceError,
    ConfigurationMissingError,
    LevyNotFoundError,
    MarketNotFoundError,
    TraderNotFoundError,
    CollectorNotFoundError,
    LevySetupNotFoundError,
    LevyPaymentNotFoundError,
    InvalidLevyAmountError,
    InvalidIncentiveError,
    InvalidPaymentDetailsError,
    TraderMarketMismatchError,
    CollectorScopeError,
    DuplicateTransactionReferenceError,
    InvalidStateTransitionError,
    LevySetupConflictError,
)
from .setup_resolver import resolve_active_setup, get_active_setup_or_raise, list_active_setups
from .setup_management import configure_levy_setup, deactivate_levy_setup, get_setup_history
from .due_dates import compute_due_date, is_payment_due
from .payment_recording import (
    ResolvedRate,
    resolve_trader_rate,
    record_payment,
    record_payment_by_qr,
    generate_transaction_reference,
)
from .payment_state import confirm_payment, fail_payment
from .trader_levies import get_trader_levy_breakdown
from .collector_summary import get_collector_summary

__all__ = [
    # Exceptions
    'LevyServiceError',
    'ConfigurationMissingError',
    'LevyNotFoundError',
    'MarketNotFoundError',
    'TraderNotFoundError',
    'CollectorNotFoundError',
    'LevySetupNotFoundError',
    'LevyPaymentNotFoundError',
    'InvalidLevyAmountError',
    'InvalidIncentiveError',
    'InvalidPaymentDetailsError',
    'TraderMarketMismatchError',
    'CollectorScopeError',
    'DuplicateTransactionReferenceError',
    'InvalidStateTransitionError',
    'LevySetupConflictError',
    # Setups
    'resolve_active_setup',
    'get_active_setup_or_raise',
    'list_active_setups',
    'configure_levy_setup',
    'deactivate_levy_setup',
    'get_setup_history',
    # Payments
    'compute_due_date',
    'is_payment_due',
    'ResolvedRate',
    'resolve_trader_rate',
    'record_payment',
    'record_payment_by_qr',
    'generate_transaction_reference',
    'confirm_payment',
    'fail_payment',
    # Positions
    'get_trader_levy_breakdown',
    'get_collector_summary',
]
