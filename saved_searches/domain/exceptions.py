"""
Domain-level exceptions for the saved searches service.

The new-results check classifies failures into four groups which decide what
happens to the saved search:

* configuration errors (unknown or disabled type): the search is skipped
* deserialization errors (corrupt stored query): the search is skipped
* execution errors (search backend unavailable): transient, retried next pass
* delivery errors (notifier failed): logged, state stays committed

They are mapped to HTTP responses in the API layer.
"""


class DomainException(Exception):
    """Base exception for all domain-level errors."""
    pass


class ValidationError(DomainException):
    """Raised when domain validation rules are violated."""
    pass


class NotFoundError(DomainException):
    """Base exception for entities not found."""
    pass


class SavedSearchNotFoundError(NotFoundError):
    """Raised when a saved search is not found."""
    pass


class SearchPageNotFoundError(NotFoundError):
    """Raised when a saved search has no search page to redirect to."""
    pass


class AuthorizationError(DomainException):
    """Base exception for authorization errors."""
    pass


class InvalidAccessTokenError(AuthorizationError):
    """Raised when a saved search access token does not match."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid or missing."""
    pass


class SavedSearchTypeNotFoundError(ConfigurationError, NotFoundError):
    """Raised when the type of a saved search cannot be resolved."""
    pass


class SavedSearchTypeDisabledError(ConfigurationError):
    """Raised when the type of a saved search is disabled."""
    pass


class UnknownNotificationPluginError(ConfigurationError):
    """Raised when a type references a notification plugin that is not registered."""
    pass


class ProcessingError(DomainException):
    """Base exception for processing errors."""
    pass


class QueryDeserializationError(ProcessingError):
    """Raised when a stored query payload cannot be turned back into a query."""
    pass


class QueryExecutionError(ProcessingError):
    """Raised when the search backend fails to execute a query.

    Execution errors are transient: nothing is persisted for the failed check.
    """
    pass


class NotificationDeliveryError(ProcessingError):
    """Raised when a notifier fails to deliver new results."""
    pass


class MailDeliveryError(NotificationDeliveryError):
    """Raised when a mail transport cannot hand over a message."""
    pass


class ConcurrencyError(DomainException):
    """Raised when concurrent operations conflict."""
    pass


__all__ = [
    "DomainException",
    "ValidationError",
    "NotFoundError",
    "SavedSearchNotFoundError",
    "SearchPageNotFoundError",
    "AuthorizationError",
    "InvalidAccessTokenError",
    "ConfigurationError",
    "SavedSearchTypeNotFoundError",
    "SavedSearchTypeDisabledError",
    "UnknownNotificationPluginError",
    "ProcessingError",
    "QueryDeserializationError",
    "QueryExecutionError",
    "NotificationDeliveryError",
    "MailDeliveryError",
    "ConcurrencyError",
]
