"""
Login errors for market staff and trader accounts.

Exception Hierarchy:
    AccountsServiceError (base)
    ├── InvalidCredentialsError - unknown email or wrong password (401)
    └── InactiveAccountError - account switched off by an administrator (403)
"""


class AccountsServiceError(Exception):
    """Base exception for account login errors."""
    pass


class InvalidCredentialsError(AccountsServiceError):
    """
    Raised when the email/password pair does not match an account.

    Unknown emails and wrong passwords share this error so the login
    response does not reveal which accounts exist.
    """
    pass


class InactiveAccountError(AccountsServiceError):
    """Raised when a chairman, caretaker, collector or trader account has been deactivated."""
    pass
