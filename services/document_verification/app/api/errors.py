"""Mapping of registry errors to HTTP error responses."""

from fastapi import HTTPException, status

from services.document_verification.app.api.schemas import ErrorResponse
from services.document_verification.app.core.errors import (
    AlreadyVerifierError,
    CannotRemoveLastVerifierError,
    DocumentAlreadyRegisteredError,
    DocumentDoesNotExistError,
    EmptyHashError,
    InvalidTransitionError,
    NotAuthorizedError,
    NotAuthorizedVerifierError,
    NotVerifierError,
    OnlyOwnerCanRequestError,
    RegistryError,
    RegistryNotInitializedError,
    RejectionReasonRequiredError,
    VerificationCompletedError,
)
from shared.utils.logging import get_correlation_id

# Most specific classes first: VerificationCompletedError is an InvalidTransitionError
ERROR_STATUS_CODES: list[tuple[type[RegistryError], int]] = [
    (EmptyHashError, 422),
    (DocumentAlreadyRegisteredError, status.HTTP_409_CONFLICT),
    (DocumentDoesNotExistError, status.HTTP_404_NOT_FOUND),
    (OnlyOwnerCanRequestError, status.HTTP_403_FORBIDDEN),
    (NotAuthorizedVerifierError, status.HTTP_403_FORBIDDEN),
    (VerificationCompletedError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (RejectionReasonRequiredError, 422),
    (AlreadyVerifierError, status.HTTP_409_CONFLICT),
    (NotVerifierError, status.HTTP_404_NOT_FOUND),
    (CannotRemoveLastVerifierError, status.HTTP_409_CONFLICT),
    (NotAuthorizedError, status.HTTP_403_FORBIDDEN),
    (RegistryNotInitializedError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def create_error_response(
    error_code: str,
    message: str,
    details: dict | None = None,
) -> dict:
    """Create a standardized error response dict.

    Args:
        error_code: Machine-readable error code (e.g., "DOCUMENT_DOES_NOT_EXIST")
        message: Human-readable error message
        details: Optional additional error details

    Returns:
        Dict suitable for HTTPException detail parameter
    """
    response = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details or None,
        correlation_id=get_correlation_id() or None,
    )
    return response.model_dump(exclude_none=True)


def status_code_for(error: RegistryError) -> int:
    """HTTP status for a registry error."""
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: RegistryError) -> HTTPException:
    """Wrap a registry error in an HTTPException with the standard envelope."""
    return HTTPException(
        status_code=status_code_for(error),
        detail=create_error_response(
            error_code=error.error_code,
            message=error.message,
            details=error.details,
        ),
    )
