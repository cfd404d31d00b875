"""Custom exception hierarchy."""

class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class APIClientError(AppError):
    """Raised when an external API call fails."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external API call times out."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class ConfigurationError(AppError):
    """Raised when configuration is invalid or missing."""
    pass


class DocumentDecodingError(AppError):
    """Base exception for turning an uploaded file into plain text."""
    pass


class UnsupportedFormatError(DocumentDecodingError):
    """The file extension has no registered decoder."""
    pass


class ExtractionFailureError(DocumentDecodingError):
    """A decoder was found but could not read the file."""
    pass


class IdentityProvisioningError(APIClientError):
    """Raised when a login account cannot be provisioned."""
    pass


class NotificationError(APIClientError):
    """Raised when an outbound email cannot be sent."""
    pass


class StorageError(APIClientError):
    """Raised when the object storage cannot serve a document."""
    pass
