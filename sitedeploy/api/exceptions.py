"""
Custom exceptions for provisioning operations
"""

from typing import Optional, Union

from botocore.exceptions import BotoCoreError, ClientError


THROTTLING_CODES = {
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "TooManyRequestsException",
    "SlowDown",
    "PriorRequestNotComplete",
}


class ProvisioningError(Exception):
    """Base exception for all provisioning errors"""

    def __init__(self, message: str, code: Optional[str] = None, operation: Optional[str] = None):
        self.message = message
        self.code = code
        self.operation = operation
        super().__init__(self.message)

    def __str__(self):
        if self.code:
            return f"{self.message} ({self.code})"
        return self.message


class ValidationError(ProvisioningError):
    """Raised when a deployment request is invalid (before any external call)"""
    pass


class ProviderError(ProvisioningError):
    """Raised when a cloud provider rejects a call or returns an unexpected shape"""

    @classmethod
    def from_boto_error(cls, operation: str, error: Union[ClientError, BotoCoreError]) -> "ProviderError":
        """
        Translate a botocore error into a ProviderError.

        Throttling codes map to ThrottlingError so read-only calls can retry them.
        Transport and credential errors (BotoCoreError) carry no code.
        """
        if not isinstance(error, ClientError):
            return cls(f"{operation} failed: {error}", operation=operation)

        details = error.response.get("Error", {})
        code = details.get("Code")
        message = details.get("Message") or str(error)
        error_cls = ThrottlingError if code in THROTTLING_CODES else cls
        return error_cls(f"{operation} failed: {message}", code=code, operation=operation)

    @classmethod
    def unexpected_shape(cls, operation: str, error: Exception) -> "ProviderError":
        return cls(f"{operation} returned an unexpected response: {error!r}", operation=operation)


class ThrottlingError(ProviderError):
    """Raised when the provider throttles a request"""
    pass


class NotFoundError(ProvisioningError):
    """Raised when a required pre-existing resource does not exist"""
    pass
