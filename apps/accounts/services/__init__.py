"""
Account services.

Accounts are provisioned by administrators, so login is the only flow
served here. Views translate the errors into 401/403 responses.
"""

from .exceptions import (
    AccountsServiceError,
    InvalidCredentialsError,
    InactiveAccountError,
)
from .user_authentication import authenticate_user

__all__ = [
    'AccountsServiceError',
    'InvalidCredentialsError',
    'InactiveAccountError',
    'authenticate_user',
]
