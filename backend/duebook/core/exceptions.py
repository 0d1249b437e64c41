"""
Application errors with stable error codes.

Business-rule violations are client errors: they carry a specific message and an
error code the UI can switch on. Structural failures are server errors: the detail
is logged internally and the caller gets a generic message.
"""
import logging

from fastapi import status

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Raised by services; translated to a JSON error body by the exception handlers."""

    def __init__(self, message: str, error_code: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code

    def __repr__(self):
        return f"<ApplicationError {self.error_code}: {self.message}>"


class BusinessError:
    """Factory for the errors the services raise."""

    @staticmethod
    def customer_not_found(reason: str = "") -> ApplicationError:
        if reason:
            logger.warning(f"Customer not found: {reason}")
        return ApplicationError(
            "Customer not found or you don't have access to it", "CUSTOMER_NOT_FOUND"
        )

    @staticmethod
    def ledger_not_found(reason: str = "") -> ApplicationError:
        """
        Same response whether the entry doesn't exist or the caller cannot see it.
        Prevents enumeration of other shops' entries.
        """
        if reason:
            logger.warning(f"Ledger entry not found: {reason}")
        return ApplicationError(
            "Ledger entry not found or you don't have access to it", "LEDGER_NOT_FOUND"
        )

    @staticmethod
    def shop_not_found(reason: str = "") -> ApplicationError:
        if reason:
            logger.warning(f"Shop not found: {reason}")
        return ApplicationError("Shop not found or you don't have access to it", "SHOP_NOT_FOUND")

    @staticmethod
    def user_not_found(detail: str = "User not found") -> ApplicationError:
        logger.info(f"User not found: {detail}")
        return ApplicationError(detail, "USER_NOT_FOUND")

    @staticmethod
    def shop_user_not_found() -> ApplicationError:
        return ApplicationError("Shop user not found", "SHOP_USER_NOT_FOUND")

    @staticmethod
    def forbidden(detail: str = "You don't have access to this shop", reason: str = "") -> ApplicationError:
        logger.warning(f"Forbidden: {detail}" + (f" ({reason})" if reason else ""))
        return ApplicationError(detail, "FORBIDDEN")

    @staticmethod
    def invalid_reversal(detail: str) -> ApplicationError:
        logger.info(f"Invalid reversal: {detail}")
        return ApplicationError(detail, "INVALID_REVERSAL")

    @staticmethod
    def validation_error(detail: str) -> ApplicationError:
        """
        400 for input validation. OK to include specific details here
        since the caller caused the issue.
        """
        logger.info(f"Validation error: {detail}")
        return ApplicationError(detail, "VALIDATION_ERROR")

    @staticmethod
    def conflict(detail: str, error_code: str) -> ApplicationError:
        """
        Uniqueness / membership conflicts.
        Examples: PHONE_ALREADY_EXISTS, ALREADY_MEMBER, LAST_OWNER
        """
        logger.info(f"Conflict ({error_code}): {detail}")
        return ApplicationError(detail, error_code)

    @staticmethod
    def ledger_creation_failed(original_error: Exception) -> ApplicationError:
        """
        Structural failure while writing a synthetic ledger entry.
        Unlike audit failures this aborts the surrounding transaction.
        """
        logger.error(
            f"Ledger creation failed: {type(original_error).__name__}: {original_error}",
            exc_info=original_error,
        )
        return ApplicationError(
            f"Failed to create opening balance ledger entry: {original_error}",
            "LEDGER_CREATION_FAILED",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
