"""Banking domain exceptions"""


class BankingError(Exception):
    """Base exception for the banking core"""

    status_code = 500


class ValidationError(BankingError, ValueError):
    """Missing or invalid input such as a non-positive amount"""

    status_code = 400


class NotFoundError(BankingError):
    """User, recipient or account does not exist"""

    status_code = 404


class InsufficientFundsError(BankingError):
    """Balance does not cover a withdrawal or transfer"""

    status_code = 400


class ForbiddenError(BankingError):
    """Caller lacks the privileged claim, or the account may not transact"""

    status_code = 403


class AuthError(BankingError):
    """Bad credentials or an invalid token"""

    status_code = 401


class StorageError(BankingError):
    """Underlying persistence failure"""

    status_code = 500
