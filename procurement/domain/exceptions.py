"""Errors raised by the procurement workflow.

Every error carries a stable ``error_code`` and a ``details`` dict that
end up in the JSON error envelope; main.py maps each code onto an HTTP
status. Guards raise these before anything is mutated.
"""

from typing import Any


class DomainError(Exception):
    """Root of the workflow errors; the API renders any subclass as an envelope."""

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Authentication / Authorization Errors
# ============================================================================


class AuthenticationRequiredError(DomainError):
    """Raised when no valid session is present."""

    error_code = "AUTHENTICATION_REQUIRED"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(DomainError):
    """Raised when an authenticated user lacks the role for an action."""

    error_code = "FORBIDDEN"

    def __init__(self, action: str, required_role: str, actual_role: str) -> None:
        """Initialize forbidden error.

        Args:
            action: Description of the attempted action.
            required_role: Role needed for the action.
            actual_role: Role of the acting user.
        """
        super().__init__(
            f"Only users with role '{required_role}' can {action}",
            details={
                "action": action,
                "required_role": required_role,
                "actual_role": actual_role,
            },
        )


class NotRequestOwnerError(ForbiddenError):
    """Raised when a non-owner tries to change a request."""

    def __init__(self, request_id: str, actor_email: str) -> None:
        DomainError.__init__(
            self,
            f"Only the requester who created request {request_id} can change it",
            details={"request_id": request_id, "actor": actor_email},
        )


class UnauthorizedEmailError(DomainError):
    """Raised when an email is not on any allowlist."""

    error_code = "UNAUTHORIZED_EMAIL"

    def __init__(self) -> None:
        super().__init__(
            "This email is not authorized to access the procurement system. "
            "Please contact your administrator."
        )


class InvalidTokenError(DomainError):
    """Raised when a magic link token cannot be exchanged.

    The message never says whether the token was expired, tampered
    or of the wrong kind.
    """

    error_code = "INVALID_TOKEN"

    def __init__(self) -> None:
        super().__init__("Invalid or expired token")


# ============================================================================
# Lookup Errors
# ============================================================================


class RequestNotFoundError(DomainError):
    """Raised when a procurement request does not exist."""

    error_code = "REQUEST_NOT_FOUND"

    def __init__(self, request_id: str) -> None:
        super().__init__(
            f"Request not found: {request_id}",
            details={"request_id": request_id},
        )


class RequestItemNotFoundError(DomainError):
    """Raised when an item is not part of a request."""

    error_code = "ITEM_NOT_FOUND"

    def __init__(self, request_id: str, item_id: str) -> None:
        """Initialize item not found error.

        Args:
            request_id: ID of the request.
            item_id: ID of the missing item.
        """
        super().__init__(
            f"Item {item_id} not found in request {request_id}",
            details={"request_id": request_id, "item_id": item_id},
        )


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when a request or item is not in a state that allows the operation."""

    error_code = "INVALID_TRANSITION"

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of entity (e.g., "Request", "RequestItem").
            entity_id: ID of the entity.
            current_state: Current state of the entity.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
            reason: Optional explanation that replaces the default message.
        """
        allowed = allowed_transitions or []
        message = reason or (
            f"Cannot transition {entity_type}({entity_id}) "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "entity_id": entity_id,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


class RequestNotEditableError(DomainError):
    """Raised when editing or deleting a request outside its editable window."""

    error_code = "NOT_EDITABLE"

    def __init__(self, request_id: str, current_status: str) -> None:
        super().__init__(
            f"Request {request_id} cannot be edited or deleted in status '{current_status}'",
            details={"request_id": request_id, "current_status": current_status},
        )


# ============================================================================
# Validation Errors
# ============================================================================


class ValidationFailureError(DomainError):
    """Raised when a field-level contract is violated."""

    error_code = "VALIDATION_FAILED"


class ItemValidationError(ValidationFailureError):
    """Raised when one or more request items fail field validation."""

    def __init__(self, errors: dict[str, dict[str, str]]) -> None:
        """Initialize item validation error.

        Args:
            errors: Mapping of item id to field name to message.
        """
        super().__init__(
            f"{len(errors)} item(s) failed validation",
            details={"items": errors},
        )
        self.errors = errors


# ============================================================================
# Persistence Errors
# ============================================================================


class RequestAlreadyExistsError(DomainError):
    """Raised when creating a request whose id is taken."""

    error_code = "ALREADY_EXISTS"

    def __init__(self, request_id: str) -> None:
        super().__init__(
            f"Request already exists: {request_id}",
            details={"request_id": request_id},
        )


class VersionConflictError(DomainError):
    """Raised when a compare-and-set write finds a newer document."""

    error_code = "VERSION_CONFLICT"

    def __init__(self, key: str, expected_version: int, actual_version: int | None) -> None:
        """Initialize version conflict error.

        Args:
            key: Store key being written.
            expected_version: Version the writer read.
            actual_version: Version currently stored (None if deleted).
        """
        super().__init__(
            f"Document {key} was modified concurrently; reload and retry",
            details={
                "key": key,
                "expected_version": expected_version,
                "actual_version": actual_version,
            },
        )


class UpstreamFailureError(DomainError):
    """Raised when a store, blob or notifier call fails.

    The message is generic; the low-level cause is chained and logged.
    """

    error_code = "UPSTREAM_FAILURE"

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"Failed to {operation}",
            details={"operation": operation},
        )
