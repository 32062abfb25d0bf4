from typing import Any, Mapping, Optional


class AppError(Exception):
    """Base class for errors that carry their own HTTP mapping.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: machine-readable error code, defaults to the class-level code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(AppError):
    """Raised when input data is invalid or a precondition for a service call is not met."""

    http_status = 400
    default_code = "INVALID_REQUEST"
    default_message = "Invalid request"


class InvalidCreditAmountError(InvalidRequestError):
    default_code = "INVALID_CREDIT_AMOUNT"
    default_message = "Credit amount must be greater than zero"


class UnauthorizedError(AppError):
    """Raised when the caller identity is missing or cannot be verified."""

    http_status = 401
    default_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class InsufficientCreditsError(AppError):
    """Raised when a wallet has no balance left for a metered operation."""

    http_status = 402
    default_code = "INSUFFICIENT_CREDITS"
    default_message = "You don't have enough credits to perform this action"


class ForbiddenError(AppError):
    """Raised when the caller is authenticated but may not touch the resource."""

    http_status = 403
    default_code = "FORBIDDEN"
    default_message = "User not authorized for this operation"


class ForbiddenRoleError(ForbiddenError):
    default_code = "FORBIDDEN_ROLE"
    default_message = "You do not have permission to access this resource"


class NotFoundError(AppError):
    """Raised when a requested resource was not found (or is not owned by the caller)."""

    http_status = 404
    default_code = "NOT_FOUND"
    default_message = "Not found"


class PantryNotFoundError(NotFoundError):
    default_code = "PANTRY_NOT_FOUND"
    default_message = "Pantry not found"


class NoIngredientsError(NotFoundError):
    default_code = "NO_INGREDIENTS"
    default_message = "No ingredients available in pantry"


class RecipeNotFoundError(NotFoundError):
    default_code = "RECIPE_NOT_FOUND"
    default_message = "Recipe not found"


class ShoppingListNotFoundError(NotFoundError):
    default_code = "SHOPPING_LIST_NOT_FOUND"
    default_message = "Shopping list not found"


class UserNotFoundError(NotFoundError):
    default_code = "USER_NOT_FOUND"
    default_message = "User not found"


class ConflictError(AppError):
    """Raised when a resource conflict occurs (e.g., duplicate membership)."""

    http_status = 409
    default_code = "CONFLICT"
    default_message = "Conflict"


class RequestCancelledError(AppError):
    """Raised when the caller cancelled an in-flight vendor call."""

    http_status = 499
    default_code = "REQUEST_CANCELLED"
    default_message = "Request was cancelled"


class InvalidLLMResponseError(AppError):
    """Raised when the model reply holds no decodable artifact, even after repair.

    The raw reply is kept on the exception for diagnosis but is never sent to clients.
    """

    http_status = 500
    default_code = "INVALID_LLM_RESPONSE"
    default_message = "Invalid response from LLM"

    def __init__(
        self,
        message: Optional[str] = None,
        raw_response: str = "",
        details: Optional[Mapping[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.raw_response = raw_response


class LLMRequestFailedError(AppError):
    """Raised when the vendor call failed after all retries."""

    http_status = 500
    default_code = "LLM_REQUEST_FAILED"
    default_message = "Failed to process LLM request"


class LedgerError(AppError):
    """Raised when the credit store fails underneath a ledger operation."""

    http_status = 500
    default_code = "INTERNAL_SERVER_ERROR"
    default_message = "Credit transaction failed"
