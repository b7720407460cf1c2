# app/core/exceptions.py
"""
Error taxonomy for the portfolio backend.

Every error carries a stable ``code`` and the HTTP ``status_code`` the API
layer answers with (see ``app.main``).
"""
from typing import Optional


class PortfolioError(Exception):
    code = "portfolio_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PortfolioError):
    """Referenced portfolio, item or job seeker profile does not exist."""
    code = "not_found"
    status_code = 404


class ConflictError(PortfolioError):
    """A portfolio already exists for the job seeker."""
    code = "conflict"
    status_code = 409


class LimitExceededError(PortfolioError):
    """The portfolio already holds the maximum number of items."""
    code = "limit_exceeded"
    status_code = 409


class ValidationError(PortfolioError):
    """Caller supplied identifiers or payload that cannot be applied."""
    code = "validation_error"
    status_code = 400


class UnknownItemError(ValidationError, NotFoundError):
    """An item id passed by the caller is not part of the portfolio."""
    code = "unknown_item"
    status_code = 400

    def __init__(self, item_id: str):
        super().__init__(f"portfolio item not found: {item_id}")
        self.item_id = item_id


class StorageError(PortfolioError):
    """A store or the attachment gateway failed. The cause is chained."""
    code = "storage_error"
    status_code = 502


class CompensationError(StorageError):
    """
    The undo step of a failed cross-store write failed as well.

    Both errors are kept: the stores are now inconsistent and need an operator.
    """
    code = "compensation_failed"
    status_code = 500

    def __init__(self, message: str, original_error: BaseException,
                 compensation_error: Optional[BaseException] = None):
        super().__init__(message)
        self.original_error = original_error
        self.compensation_error = compensation_error


class SearchServiceError(PortfolioError):
    """The external AI search server could not answer."""
    code = "search_unavailable"
    status_code = 502
