"""
Service error taxonomy
Every rule violation raised by a service is a ServiceError carrying an ErrorCode;
the API layer maps the code to an HTTP status.
"""
import enum
from typing import Any, Optional


class ErrorCode(str, enum.Enum):
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    # Deliberately does not reveal whether the entity exists
    NOT_FOUND_OR_FORBIDDEN = "NOT_FOUND_OR_FORBIDDEN"
    VALIDATION = "VALIDATION"
    INVALID_DUE_DATE = "INVALID_DUE_DATE"
    SCORE_OUT_OF_RANGE = "SCORE_OUT_OF_RANGE"
    INVALID_STATE = "INVALID_STATE"
    ALREADY_GRADED = "ALREADY_GRADED"
    PAST_DUE = "PAST_DUE"
    CONFLICT = "CONFLICT"


HTTP_STATUS = {
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.FORBIDDEN: 403,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.NOT_FOUND_OR_FORBIDDEN: 404,
    ErrorCode.VALIDATION: 400,
    ErrorCode.INVALID_DUE_DATE: 400,
    ErrorCode.SCORE_OUT_OF_RANGE: 400,
    ErrorCode.INVALID_STATE: 409,
    ErrorCode.ALREADY_GRADED: 409,
    ErrorCode.PAST_DUE: 400,
    ErrorCode.CONFLICT: 409,
}


class ServiceError(Exception):
    def __init__(self, code: ErrorCode, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details

    @property
    def status_code(self) -> int:
        return HTTP_STATUS.get(self.code, 400)

    def __repr__(self) -> str:
        return f"ServiceError({self.code.value}, {self.message!r})"


def forbidden(message: str = "Access denied") -> ServiceError:
    return ServiceError(ErrorCode.FORBIDDEN, message)


def not_found(message: str = "Resource not found") -> ServiceError:
    return ServiceError(ErrorCode.NOT_FOUND, message)


def not_found_or_forbidden(entity: str, action: str = "access") -> ServiceError:
    return ServiceError(
        ErrorCode.NOT_FOUND_OR_FORBIDDEN,
        f"{entity} not found or you do not have permission to {action} it",
    )


def validation(message: str, details: Optional[Any] = None) -> ServiceError:
    return ServiceError(ErrorCode.VALIDATION, message, details)
