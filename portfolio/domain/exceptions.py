"""Domain exceptions for the portfolio workflow service.

Defines domain-level exceptions that represent business rule violations and
the workflow engine's error taxonomy. These exceptions are independent of
infrastructure concerns. Presentation layer maps them to HTTP responses in
exception handlers.
"""

from typing import Any


class PortfolioException(Exception):
    """Base exception for all application errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body used by the HTTP exception handler."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PortfolioException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(PortfolioException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'workflow', 'initiative').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class SystemRuleReadOnlyException(PortfolioException):
    """Raised when an edit, delete, toggle, duplicate or run-persist targets a system rule."""

    def __init__(self, workflow_id: str, operation: str) -> None:
        """Initialize with the system workflow id and the rejected operation.

        Args:
            workflow_id: Id of the system rule.
            operation: Operation that was attempted (e.g. 'edit', 'toggle').
        """
        super().__init__(
            f"System rules are read-only and cannot be {_past_participle(operation)}",
            "SYSTEM_RULE_READ_ONLY",
            {"workflow_id": workflow_id, "operation": operation},
        )


def _past_participle(operation: str) -> str:
    return {
        "edit": "edited",
        "delete": "deleted",
        "toggle": "enabled or disabled",
        "duplicate": "duplicated",
        "record_run": "given a persisted run history",
    }.get(operation, operation)


class ScopeFilterError(PortfolioException):
    """Raised when a workflow scope is malformed. Fatal to the whole run."""

    def __init__(self, message: str, scope_field: str | None = None) -> None:
        details = {"scope_field": scope_field} if scope_field else {}
        super().__init__(message, "SCOPE_FILTER_ERROR", details)


class ActionExecutionError(PortfolioException):
    """Raised when an action cannot be applied to one initiative (recorded per record)."""

    def __init__(self, action_type: str, reason: str) -> None:
        super().__init__(
            f"{action_type}: {reason}",
            "ACTION_EXECUTION_ERROR",
            {"action_type": action_type, "reason": reason},
        )


class ConditionEvaluationError(PortfolioException):
    """Raised inside condition evaluation; always caught and resolved to False."""

    def __init__(self, condition_type: str, reason: str) -> None:
        super().__init__(
            f"{condition_type}: {reason}",
            "CONDITION_EVALUATION_ERROR",
            {"condition_type": condition_type, "reason": reason},
        )


class NotificationDeliveryError(PortfolioException):
    """Raised by a notification sender when delivery fails."""

    def __init__(self, target: str, reason: str) -> None:
        super().__init__(
            f"Failed to deliver notification to {target}",
            "NOTIFICATION_DELIVERY_ERROR",
            {"target": target, "reason": reason},
        )
